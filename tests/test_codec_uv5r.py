"""Tests for the UV-5R memory layout."""

import pytest

from baoclone.codec import uv5r as layout
from baoclone.codec.records import (
    Band,
    Bandwidth,
    ChannelRecord,
    LimitsRecord,
    Power,
    PttId,
)
from baoclone.codec.tones import Squelch
from baoclone.errors import ImageFormatError
from baoclone.session import RadioSession


def _session(model, firmware: bytes = b"") -> RadioSession:
    session = RadioSession(model=model)
    if firmware:
        session.mem[0x1EF0:0x1F00] = firmware.ljust(16, b"\x00")
    return session


class TestChannels:
    def test_decode_raw_record(self, uv5r):
        session = _session(uv5r)
        session.mem[0x0000:0x0010] = bytes([
            0x00, 0x50, 0x62, 0x14,   # rx 146.25000
            0x00, 0x50, 0x62, 0x14,   # tx 146.25000
            0xB6, 0x05,               # rx tone 146.2
            0x6A, 0x00,               # tx D023I
            0x03, 0x00,
            0x00,                     # high power
            0x44,                     # wide, scan
        ])
        session.mem[0x1000:0x1010] = b"REPEAT\xff" + b"\xff" * 9

        record = session.channel(0)

        assert record.rx_hz == 146250000
        assert record.tx_hz == 146250000
        assert record.rx_squelch == Squelch.ctcss(1462)
        assert str(record.rx_squelch) == "146.2"
        assert record.tx_squelch == Squelch.dcs(23, inverted=True)
        assert record.power is Power.HIGH
        assert record.bandwidth is Bandwidth.WIDE
        assert record.scan is True
        assert record.bcl is False
        assert record.pttid is PttId.NONE
        assert record.signal_code == 3
        assert record.name == "REPEAT"

    def test_empty_slots(self, uv5r):
        session = _session(uv5r)
        session.mem[0x0010:0x0014] = bytes(4)

        assert not session.channel(0).enabled
        assert not session.channel(1).enabled
        assert list(session.channels()) == []

    def test_roundtrip(self, uv5r):
        session = _session(uv5r)
        record = ChannelRecord(
            rx_hz=446006250,
            tx_hz=441006250,
            rx_squelch=Squelch.ctcss(885),
            tx_squelch=Squelch.dcs(754, inverted=True),
            power=Power.LOW,
            bandwidth=Bandwidth.NARROW,
            scan=False,
            bcl=True,
            pttid=PttId.BOTH,
            signal_code=7,
            name="PMR1",
        )

        session.set_channel(5, record)

        assert session.channel(5) == record
        assert list(session.channels()) == [(5, record)]

    def test_new_slot_is_zeroed_first(self, uv5r):
        session = _session(uv5r)
        session.set_channel(0, ChannelRecord(rx_hz=145500000, name="S20"))

        assert session.mem[12] == 0x00
        assert session.mem[13] == 0x00
        assert session.mem[0x1000:0x1007] == b"S20\xff\xff\xff\xff"

    def test_tx_inhibit(self, uv5r):
        session = _session(uv5r)
        session.set_channel(0, ChannelRecord(rx_hz=162550000, tx_hz=0))

        assert session.mem[4:8] == b"\xff\xff\xff\xff"
        assert session.channel(0).tx_hz == 0

    def test_tx_defaults_to_simplex(self, uv5r):
        session = _session(uv5r)
        session.set_channel(0, ChannelRecord(rx_hz=145500000))

        assert session.channel(0).tx_hz == 145500000
        assert session.channel(0).offset_hz == 0

    def test_disable_blanks_record_and_name(self, uv5r):
        session = _session(uv5r)
        session.set_channel(3, ChannelRecord(rx_hz=145500000, name="CALL"))
        session.set_channel(3, ChannelRecord.disabled())

        assert session.mem[0x30:0x40] == b"\xff" * 16
        assert session.mem[0x1030:0x1037] == b"\xff" * 7
        assert session.channel(3) == ChannelRecord.disabled()

    def test_name_too_long(self, uv5r):
        with pytest.raises(ValueError):
            _session(uv5r).set_channel(0, ChannelRecord(rx_hz=145500000, name="TOOLONG1"))

    def test_frequency_step(self, uv5r):
        with pytest.raises(ValueError):
            _session(uv5r).set_channel(0, ChannelRecord(rx_hz=145500005))

    def test_rejected_record_leaves_slot_untouched(self, uv5r):
        session = _session(uv5r)
        session.set_channel(0, ChannelRecord(rx_hz=146520000, name="CALL"))
        before = bytes(session.mem)

        with pytest.raises(ValueError):
            session.set_channel(0, ChannelRecord(
                rx_hz=440000000, tx_hz=445000000, rx_squelch=Squelch.dcs(999),
            ))
        with pytest.raises(ValueError):
            session.set_channel(0, ChannelRecord(rx_hz=440000000, signal_code=16))

        assert bytes(session.mem) == before
        assert session.channel(0).rx_hz == 146520000

    def test_bad_bcd(self, uv5r):
        session = _session(uv5r)
        session.mem[0:4] = b"\x00\x5a\x62\x14"

        with pytest.raises(ImageFormatError):
            session.channel(0)

    def test_slot_range(self, uv5r):
        with pytest.raises(IndexError):
            _session(uv5r).channel(128)


class TestLimits:
    def test_decode_291_layout(self, uv5r):
        session = _session(uv5r)
        session.mem[0x1FC0:0x1FC5] = b"\x01\x01\x36\x01\x74"
        session.mem[0x1FC5:0x1FCA] = b"\x00\x04\x00\x05\x20"

        vhf = session.limits(Band.VHF)
        uhf = session.limits(Band.UHF)

        assert vhf == LimitsRecord(Band.VHF, enabled=True, lower=136, upper=174)
        assert vhf.lower_hz == 136_000_000
        assert uhf.enabled is False
        assert (uhf.lower, uhf.upper) == (400, 520)

    def test_original_layout(self, uv5r_orig):
        session = _session(uv5r_orig)
        session.mem[0x1FCA:0x1FCF] = b"\x01\x01\x30\x01\x79"

        assert session.revision == layout.REVISION_ORIGINAL
        assert session.limits(Band.VHF).lower == 130

    def test_encode(self, uv5r):
        session = _session(uv5r)
        session.set_limits(LimitsRecord(Band.UHF, enabled=True, lower=400, upper=480))

        assert session.mem[0x1FC5:0x1FCA] == b"\x01\x04\x00\x04\x80"

    def test_bad_bcd(self, uv5r):
        session = _session(uv5r)
        session.mem[0x1FC0:0x1FC5] = b"\x01\x1a\x36\x01\x74"

        with pytest.raises(ImageFormatError):
            session.limits(Band.VHF)


class TestSettings:
    def test_fresh_memory_is_unknown(self, uv5r):
        squelch = _session(uv5r).settings().get("squelch")

        assert squelch.known is False
        assert squelch.display == "Unknown (255)"

    def test_decode_and_apply(self, uv5r):
        session = _session(uv5r)
        session.mem[0x0E20] = 3

        assert session.settings().get("squelch").display == "3"

        session.apply_settings({"squelch": 5, "beep": 1})
        assert session.mem[0x0E20] == 5
        assert session.settings().get("beep").display == "On"

    def test_step_list_depends_on_revision(self, uv5r, uv5r_orig):
        new = _session(uv5r)
        old = _session(uv5r_orig)
        new.mem[0x0E21] = 7
        old.mem[0x0E21] = 7

        assert new.settings().get("step").display == "100.0K"
        assert old.settings().get("step").known is False

    def test_current_channel_uses_seven_bits(self, uv5r):
        session = _session(uv5r)
        session.mem[0x0E76] = 0x85

        assert session.settings().get("mrcha").display == "5"

    def test_ani_code(self, uv5r):
        session = _session(uv5r)
        session.mem[0x0CAA:0x0CAF] = bytes([1, 2, 3, 0x0A, 0x05])

        ani = session.settings().get("ani")
        assert ani.display == "123A5"
        assert ani.raw is None
        assert "ani" not in session.settings().raw_values()

    def test_rejects_out_of_range(self, uv5r):
        with pytest.raises(ValueError):
            _session(uv5r).apply_settings({"squelch": 10})

    def test_rejects_unknown_name(self, uv5r):
        with pytest.raises(KeyError):
            _session(uv5r).apply_settings({"nosuch": 1})


class TestFirmware:
    def test_version_and_info(self, uv5r):
        session = _session(uv5r, b"BFB297")
        session.mem[0x1ED0:0x1EE0] = b"SN0012345\x00".ljust(16, b"\xff")
        session.mem[0x1EE0:0x1EF0] = b"HELLO\xff\xff".ljust(16, b"\xff")

        assert layout.firmware_version(session.mem) == "BFB297"
        assert session.device_info() == {
            "Firmware": "BFB297",
            "Power-on message": "HELLO",
            "Serial number": "SN0012345",
        }

    def test_original_detection(self):
        assert layout.is_original_firmware("BFB282")
        assert not layout.is_original_firmware("BFB291")
        assert not layout.is_original_firmware("BFB297")
        assert not layout.is_original_firmware("HN5RV01")
        assert not layout.is_original_firmware("")

    def test_detect_revision(self, uv5r):
        assert layout.detect_revision(_session(uv5r, b"BFB282").mem) == layout.REVISION_ORIGINAL
        assert layout.detect_revision(_session(uv5r, b"BFB297").mem) == layout.REVISION_291
