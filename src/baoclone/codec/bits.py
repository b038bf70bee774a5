"""Bit-field helpers for packed memory records (bit 0 is the LSB)."""


def get_bits(byte: int, shift: int, width: int = 1) -> int:
    return (byte >> shift) & ((1 << width) - 1)


def set_bits(byte: int, shift: int, width: int, value: int) -> int:
    mask = (1 << width) - 1
    if not 0 <= value <= mask:
        raise ValueError(f"Value {value} does not fit in {width} bit(s)")
    return (byte & ~(mask << shift) & 0xFF) | (value << shift)


def get_flag(byte: int, shift: int) -> bool:
    return bool(get_bits(byte, shift))


def set_flag(byte: int, shift: int, flag: bool) -> int:
    return set_bits(byte, shift, 1, int(bool(flag)))
