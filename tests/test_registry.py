"""Tests for the model registry and radio sessions."""

import pytest

from baoclone.codec import uv5r as uv5r_layout
from baoclone.models import (
    Capability,
    ModelId,
    detect_image_model,
    get_capabilities,
    get_model,
    get_model_by_id,
    list_models,
    probe_candidates,
    refine_model,
)
from baoclone.session import RadioSession


def test_probe_order() -> None:
    assert list_models() == ["UV-5R", "UV-5R-ORIG", "UV-B5", "BF-888S"]
    assert [config.name for config, _ in probe_candidates()] == list_models()


def test_magic_sequences() -> None:
    magics = dict((config.name, magic) for config, magic in probe_candidates())

    assert magics["UV-5R"] == b"\x50\xBB\xFF\x20\x12\x07\x25"
    assert magics["UV-5R-ORIG"] == b"\x50\xBB\xFF\x01\x25\x98\x4D"
    assert magics["UV-B5"] == b"\x05PROGRAM"
    assert magics["BF-888S"] == b"\x02PROGRAM"


def test_lookup() -> None:
    assert get_model("uv-5r").name == "UV-5R"
    assert get_model("UV-B6") is None
    assert get_model_by_id(ModelId.BF_888S).name == "BF-888S"


class TestModelConfig:
    def test_uv5r_transfer(self, uv5r):
        assert uv5r.read_blocks() == 101
        assert uv5r.write_blocks() == 404
        assert uv5r.image_size == 6472
        assert uv5r.read_acks == frozenset({0x06})
        assert uv5r.read_tag == b"S"
        assert uv5r.reply_tag == uv5r.write_tag == b"X"

    def test_uvb5_transfer(self, uvb5):
        assert uvb5.read_blocks() == 256
        assert uvb5.image_size == 4144
        assert uvb5.read_acks == frozenset({0x74, 0x78, 0x1F})
        assert uvb5.write_acks == frozenset({0x06})
        assert len(uvb5.channel_slots) == 99

    def test_bf888s_transfer(self, bf888s):
        assert bf888s.read_blocks() == 38
        assert bf888s.image_size == 992
        assert bf888s.channel_label(15) == 16
        assert bf888s.bands == ()

    def test_channel_table_traits(self, uv5r, uv5r_orig, uvb5, bf888s):
        assert [m.has_names for m in (uv5r, uv5r_orig, uvb5, bf888s)] == [True, True, True, False]
        assert [m.tx_as_offset for m in (uv5r, uv5r_orig, uvb5, bf888s)] == [False, False, True, False]

    def test_frozen(self, uv5r):
        with pytest.raises(AttributeError):
            uv5r.baud_rate = 19200


class TestImageDetection:
    def test_by_size(self):
        assert detect_image_model(6472).name == "UV-5R"
        assert detect_image_model(4144).name == "UV-B5"
        assert detect_image_model(992).name == "BF-888S"
        assert detect_image_model(8192) is None

    def test_refine_uv5r(self, uv5r):
        session = RadioSession(model=uv5r)
        session.mem[0x1EF0:0x1F00] = b"BFB282".ljust(16, b"\x00")

        assert refine_model(uv5r, session.mem).name == "UV-5R-ORIG"

    def test_refine_other_models(self, uvb5):
        assert refine_model(uvb5, bytearray(0x1000)) is uvb5


class TestCapabilities:
    def test_uv5r(self):
        caps = {info.capability: info for info in get_capabilities("UV-5R")}

        assert caps[Capability.READ_CLONE].supported
        assert caps[Capability.BAND_LIMITS].supported
        assert caps[Capability.FIRMWARE_INFO].supported
        assert not caps[Capability.CONFIGURE].supported

    def test_bf888s(self):
        caps = {info.capability: info for info in get_capabilities("BF-888S")}

        assert not caps[Capability.BAND_LIMITS].supported
        assert not caps[Capability.CHANNEL_NAMES].supported
        assert not caps[Capability.FIRMWARE_INFO].supported

    def test_unknown(self):
        assert get_capabilities("FT-60") == []


class TestSession:
    def test_fresh_memory(self, bf888s):
        session = RadioSession(model=bf888s)

        assert session.mem == bytearray(b"\xff" * 0x400)
        assert session.ident == b"\xff" * 8
        assert session.device_info() == {}

    def test_size_mismatch(self, uvb5):
        with pytest.raises(ValueError):
            RadioSession(model=uvb5, mem=bytearray(0x2000))

    def test_copies_memory(self, uvb5):
        mem = bytes(0x1000)
        session = RadioSession(model=uvb5, mem=mem)

        assert isinstance(session.mem, bytearray)
        session.mem[0] = 1
        assert mem[0] == 0

    def test_revision_from_model(self, uv5r, uv5r_orig):
        assert RadioSession(model=uv5r).revision == uv5r_layout.REVISION_291
        assert RadioSession(model=uv5r_orig).revision == uv5r_layout.REVISION_ORIGINAL
        assert RadioSession(model=uv5r, revision="original").revision == "original"
