"""
Binary-coded decimal helpers.

Frequencies, limits and BF-888S tones are stored as packed BCD, one decimal
digit per nibble. Multi-byte fields are little-endian in radio memory except
where a model stores them big-endian (UV-5R band limits); the callers pick
the byte order and these helpers only deal with the integer value.
"""


def bcd_to_int(value: int, digits: int = 8, strict: bool = True) -> int:
    """
    Decode a packed BCD integer, most-significant nibble first.

    Args:
        value: Packed value (e.g. 0x14625000)
        digits: Number of nibbles to read
        strict: Reject nibbles 10-15 instead of accumulating them

    Raises:
        ValueError: If strict and a nibble is not a decimal digit
    """
    result = 0
    for shift in range((digits - 1) * 4, -1, -4):
        nibble = (value >> shift) & 0x0F
        if strict and nibble > 9:
            raise ValueError(f"Invalid BCD digit 0x{nibble:X} in 0x{value:0{digits}X}")
        result = result * 10 + nibble
    return result


def int_to_bcd(number: int, digits: int = 8) -> int:
    """
    Encode a non-negative integer as packed BCD.

    Raises:
        ValueError: If the number does not fit in ``digits`` decimal digits
    """
    if number < 0 or number >= 10 ** digits:
        raise ValueError(f"{number} does not fit in {digits} BCD digits")
    result = 0
    for shift in range(0, digits * 4, 4):
        result |= (number % 10) << shift
        number //= 10
    return result


def read_bcd_le(mem, offset: int, size: int, strict: bool = True) -> int:
    """Decode ``size`` little-endian BCD bytes at ``offset``."""
    raw = int.from_bytes(bytes(mem[offset:offset + size]), "little")
    return bcd_to_int(raw, size * 2, strict)


def write_bcd_le(mem, offset: int, size: int, number: int) -> None:
    """Encode ``number`` into ``size`` little-endian BCD bytes at ``offset``."""
    mem[offset:offset + size] = int_to_bcd(number, size * 2).to_bytes(size, "little")


def read_bcd_be(mem, offset: int, size: int, strict: bool = True) -> int:
    """Decode ``size`` big-endian BCD bytes at ``offset``."""
    raw = int.from_bytes(bytes(mem[offset:offset + size]), "big")
    return bcd_to_int(raw, size * 2, strict)


def write_bcd_be(mem, offset: int, size: int, number: int) -> None:
    """Encode ``number`` into ``size`` big-endian BCD bytes at ``offset``."""
    mem[offset:offset + size] = int_to_bcd(number, size * 2).to_bytes(size, "big")
