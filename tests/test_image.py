"""Tests for image file persistence."""

import io
import logging

import pytest

from baoclone.codec.records import ChannelRecord
from baoclone.errors import ImageFormatError
from baoclone.image import (
    image_bytes,
    load_image,
    load_image_file,
    parse_image,
    save_image,
    save_image_file,
)
from baoclone.models import get_model
from baoclone.session import RadioSession

IDENT = b"\xAA\x30\x76\x04\x00\x05\x20\xDD"


def _uv5r_session(firmware: bytes = b"BFB297") -> RadioSession:
    session = RadioSession(model=get_model("UV-5R"), ident=IDENT)
    session.mem[0x1EF0:0x1F00] = firmware.ljust(16, b"\x00")
    session.set_channel(0, ChannelRecord(rx_hz=146520000, name="CALL"))
    return session


class TestLayout:
    def test_uv5r_size_and_order(self):
        session = _uv5r_session()
        session.mem[0x17FF] = 0x12
        session.mem[0x1EC0] = 0x34

        data = image_bytes(session)

        assert len(data) == 6472
        assert data[:8] == IDENT
        assert data[8 + 0x17FF] == 0x12
        assert data[8 + 0x1800] == 0x34

    def test_uvb5_header(self):
        session = RadioSession(model=get_model("UV-B5"), ident=IDENT)

        data = image_bytes(session)

        assert len(data) == 4144
        assert data[8:32] == b"Radio Program data v1.08"
        assert data[32:48] == bytes(16)

    def test_bf888s_block_remap(self):
        session = RadioSession(model=get_model("BF-888S"), ident=IDENT)
        session.mem[0x02B0:0x02C0] = bytes(range(16))
        session.mem[0x02C0] = 0x77

        data = image_bytes(session)

        assert len(data) == 992
        assert data[8:16] == b"\xff" * 8
        assert data[688:704] == b"\xff" * 16
        assert data[704] == 0x77
        assert data[880:896] == bytes(range(16))


class TestParse:
    def test_roundtrip_uv5r(self):
        session = _uv5r_session()

        loaded = parse_image(image_bytes(session))

        assert loaded.model.name == "UV-5R"
        assert loaded.ident == IDENT
        assert loaded.channel(0).name == "CALL"
        assert loaded.channel(0).rx_hz == 146520000

    def test_original_firmware_picks_old_layout(self):
        data = image_bytes(_uv5r_session(b"BFB282"))

        assert parse_image(data).model.name == "UV-5R-ORIG"
        assert parse_image(data, get_model("UV-5R")).model.name == "UV-5R"

    def test_bf888s_remap_restored(self):
        session = RadioSession(model=get_model("BF-888S"), ident=IDENT)
        session.mem[0x02B0:0x02C0] = bytes(range(16))
        session.mem[0x0370:0x0380] = bytes(16)

        loaded = parse_image(image_bytes(session))

        assert loaded.model.name == "BF-888S"
        assert loaded.mem[0x02B0:0x02C0] == bytes(range(16))
        # Not stored in the file
        assert loaded.mem[0x0370:0x0380] == b"\xff" * 16

    def test_unknown_size(self):
        with pytest.raises(ImageFormatError):
            parse_image(bytes(1000))

    def test_short_file_for_forced_model(self):
        with pytest.raises(ImageFormatError):
            parse_image(bytes(992), get_model("UV-5R"))

    def test_trailing_bytes_warn(self, caplog):
        data = image_bytes(_uv5r_session()) + b"\x00\x00"

        with caplog.at_level(logging.WARNING, logger="baoclone"):
            loaded = parse_image(data, get_model("UV-5R"))

        assert loaded.channel(0).name == "CALL"
        assert "trailing" in caplog.text


class TestFiles:
    def test_stream_roundtrip(self):
        session = _uv5r_session()
        buf = io.BytesIO()

        assert save_image(session, buf) == 6472
        buf.seek(0)
        assert load_image(buf).mem == session.mem

    def test_path_roundtrip(self, tmp_path):
        session = RadioSession(model=get_model("UV-B5"), ident=IDENT)
        session.set_channel(1, ChannelRecord(rx_hz=145000000, name="ONE"))
        path = tmp_path / "uvb5.img"

        save_image_file(session, path)
        loaded = load_image_file(path)

        assert path.stat().st_size == 4144
        assert loaded.model.name == "UV-B5"
        assert loaded.channel(1).name == "ONE"
