"""Tests for BCD helpers and bit-field helpers."""

import pytest

from baoclone.codec.bcd import (
    bcd_to_int,
    int_to_bcd,
    read_bcd_be,
    read_bcd_le,
    write_bcd_be,
    write_bcd_le,
)
from baoclone.codec.bits import get_bits, set_bits, get_flag, set_flag


class TestBcdToInt:
    def test_frequency_word(self):
        assert bcd_to_int(0x14625000) == 14625000

    def test_short_field(self):
        assert bcd_to_int(0x0136, digits=4) == 136

    def test_zero(self):
        assert bcd_to_int(0) == 0

    def test_strict_rejects_hex_nibble(self):
        with pytest.raises(ValueError):
            bcd_to_int(0x1462500A)

    def test_strict_rejects_high_nibble(self):
        with pytest.raises(ValueError):
            bcd_to_int(0xFFFF, digits=4)

    def test_lenient_accumulates_without_masking(self):
        # 0x1A -> 1 * 10 + 10
        assert bcd_to_int(0x1A, digits=2, strict=False) == 20
        assert bcd_to_int(0xC023, digits=4, strict=False) == 12023


class TestIntToBcd:
    def test_inverse(self):
        for value in (0, 7, 136, 14625000, 99999999):
            assert bcd_to_int(int_to_bcd(value)) == value

    def test_packing(self):
        assert int_to_bcd(14625000) == 0x14625000
        assert int_to_bcd(520, 4) == 0x0520

    def test_overflow(self):
        with pytest.raises(ValueError):
            int_to_bcd(10000, 4)

    def test_negative(self):
        with pytest.raises(ValueError):
            int_to_bcd(-1)


class TestMemoryAccess:
    def test_little_endian(self):
        mem = bytearray(b"\x00\x50\x62\x14")
        assert read_bcd_le(mem, 0, 4) == 14625000

        write_bcd_le(mem, 0, 4, 43912500)
        assert bytes(mem) == b"\x00\x25\x91\x43"

    def test_big_endian(self):
        mem = bytearray(b"\x01\x01\x36\x01\x74")
        assert read_bcd_be(mem, 1, 2) == 136
        assert read_bcd_be(mem, 3, 2) == 174

        write_bcd_be(mem, 1, 2, 400)
        assert mem[1:3] == b"\x04\x00"


class TestBits:
    def test_get_bits(self):
        assert get_bits(0b1011_0100, 2, 2) == 0b01
        assert get_bits(0b1000_0000, 7) == 1

    def test_set_bits_keeps_neighbours(self):
        assert set_bits(0xFF, 0, 2, 0) == 0xFC
        assert set_bits(0x00, 4, 2, 3) == 0x30

    def test_set_bits_overflow(self):
        with pytest.raises(ValueError):
            set_bits(0, 0, 2, 4)

    def test_flags(self):
        assert get_flag(0x40, 6) is True
        assert set_flag(0x40, 6, False) == 0
        assert set_flag(0x00, 3, True) == 0x08
