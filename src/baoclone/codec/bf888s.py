"""
BF-888S memory layout.

    0x0010  16 channel records, 16 bytes each
    0x02B0  device settings, one byte each
    0x03C0  extra settings

The radio has no band limits and no channel names. Several channel flags
are stored inverted ("no scan", "no BCL", "no scrambler").
"""

import struct
from typing import Dict, List

from ..errors import ImageFormatError, UnsupportedOperation
from .bcd import read_bcd_le, write_bcd_le
from .bits import get_flag, set_flag
from .records import Band, Bandwidth, ChannelRecord, LimitsRecord, Power, SettingsRecord
from .settings import ON_OFF, SettingField, decode_fields, encode_fields, numbered
from .tones import decode_bcd16, encode_bcd16

NUM_CHANNELS = 16
RECORD_SIZE = 16
CHANNEL_BASE = 0x0010
SETTINGS_BASE = 0x02B0
EXTRA_BASE = 0x03C0

_EMPTY_WORDS = (0, 0xFFFFFFFF)

# Byte 12 flags
_NOBCL_BIT = 0
_NOSCR_BIT = 1
_NARROW_BIT = 2
_HIGHPOWER_BIT = 3
_NOSCAN_BIT = 4


def _check_slot(slot: int) -> None:
    if not 0 <= slot < NUM_CHANNELS:
        raise IndexError(f"Channel slot {slot} outside 0..{NUM_CHANNELS - 1}")


def decode_channel(session, slot: int) -> ChannelRecord:
    """
    Decode channel ``slot`` (0-15, shown to users as 1-16).

    Raises:
        IndexError: If the slot is out of range
        ImageFormatError: If a frequency is not valid BCD
    """
    _check_slot(slot)
    mem = session.mem
    base = CHANNEL_BASE + slot * RECORD_SIZE
    rx_word, tx_word, rxtone, txtone = struct.unpack_from("<IIHH", mem, base)
    if rx_word in _EMPTY_WORDS:
        return ChannelRecord.disabled()

    try:
        rx_hz = read_bcd_le(mem, base, 4) * 10
        tx_hz = 0 if tx_word in _EMPTY_WORDS else read_bcd_le(mem, base + 4, 4) * 10
    except ValueError as e:
        raise ImageFormatError(f"Channel {slot + 1}: {e}", address=base)

    flags = mem[base + 12]
    return ChannelRecord(
        rx_hz=rx_hz,
        tx_hz=tx_hz,
        rx_squelch=decode_bcd16(rxtone),
        tx_squelch=decode_bcd16(txtone),
        power=Power.HIGH if get_flag(flags, _HIGHPOWER_BIT) else Power.LOW,
        bandwidth=Bandwidth.NARROW if get_flag(flags, _NARROW_BIT) else Bandwidth.WIDE,
        scan=not get_flag(flags, _NOSCAN_BIT),
        bcl=not get_flag(flags, _NOBCL_BIT),
        scramble=not get_flag(flags, _NOSCR_BIT),
    )


def encode_channel(session, slot: int, record: ChannelRecord) -> None:
    """Store ``record`` into channel ``slot``; a disabled record blanks it."""
    _check_slot(slot)
    mem = session.mem
    base = CHANNEL_BASE + slot * RECORD_SIZE

    if not record.enabled:
        mem[base:base + RECORD_SIZE] = b"\xff" * RECORD_SIZE
        return

    tx_hz = record.rx_hz if record.tx_hz is None else record.tx_hz
    for value, what in ((record.rx_hz, "RX"), (tx_hz, "TX")):
        if value % 10:
            raise ValueError(f"{what} frequency {value} Hz is not a multiple of 10 Hz")
    rxtone = encode_bcd16(record.rx_squelch)
    txtone = encode_bcd16(record.tx_squelch)

    if struct.unpack_from("<I", mem, base)[0] in _EMPTY_WORDS:
        mem[base:base + RECORD_SIZE] = bytes(RECORD_SIZE)

    write_bcd_le(mem, base, 4, record.rx_hz // 10)
    if tx_hz == 0:
        mem[base + 4:base + 8] = b"\xff\xff\xff\xff"
    else:
        write_bcd_le(mem, base + 4, 4, tx_hz // 10)
    struct.pack_into("<HH", mem, base + 8, rxtone, txtone)

    flags = mem[base + 12]
    flags = set_flag(flags, _NOBCL_BIT, not record.bcl)
    flags = set_flag(flags, _NOSCR_BIT, not record.scramble)
    flags = set_flag(flags, _NARROW_BIT, record.bandwidth is Bandwidth.NARROW)
    flags = set_flag(flags, _HIGHPOWER_BIT, record.power is not Power.LOW)
    flags = set_flag(flags, _NOSCAN_BIT, record.scan is False)
    mem[base + 12] = flags


def decode_limits(session, band: Band) -> LimitsRecord:
    raise UnsupportedOperation("BF-888S has no band limits")


def encode_limits(session, record: LimitsRecord) -> None:
    raise UnsupportedOperation("BF-888S has no band limits")


SIDEKEY_LIST = ("Off", "Monitor", "TX Power", "Alarm")
TIMEOUT_LIST = ("Off",) + tuple(f"{n} sec" for n in range(30, 330, 30))
SCANMODE_LIST = ("Carrier", "Time")


def _settings_fields() -> List[SettingField]:
    b = SETTINGS_BASE
    x = EXTRA_BASE
    return [
        SettingField("voice", "Voice Prompt", b + 0, ON_OFF),
        SettingField("chinese", "Voice Language", b + 1, ("English", "Chinese")),
        SettingField("scan", "Scan", b + 2, ON_OFF),
        SettingField("vox", "VOX Function", b + 3, ON_OFF),
        SettingField("voxgain", "VOX Sensitivity", b + 4, numbered(1, 5)),
        SettingField("voxinhrx", "VOX Inhibit On Receive", b + 5, ON_OFF),
        SettingField("lowinhtx", "Low Vol Inhibit TX", b + 6, ON_OFF),
        SettingField("highinhtx", "High Vol Inhibit TX", b + 7, ON_OFF),
        SettingField("alarm", "Alarm", b + 8, ON_OFF),
        SettingField("fm", "FM Radio", b + 9, ON_OFF),
        SettingField("beep", "Beep", x + 0, ON_OFF, shift=0, width=1),
        SettingField("saver", "Battery Saver", x + 0, ON_OFF, shift=1, width=1),
        SettingField("squelch", "Squelch Level", x + 1, numbered(0, 9)),
        SettingField("sidekey", "Side Key", x + 2, SIDEKEY_LIST),
        SettingField("timeout", "TX Timer", x + 3, TIMEOUT_LIST),
        SettingField("scanmode", "Scan Mode", x + 7, SCANMODE_LIST, shift=0, width=1),
    ]


def decode_settings(session) -> SettingsRecord:
    return SettingsRecord(decode_fields(session.mem, _settings_fields()))


def encode_settings(session, values: Dict[str, int]) -> None:
    encode_fields(session.mem, _settings_fields(), values)
