"""
Squelch tone tables and the three squelch encodings.

Each model stores rx/tx squelch in exactly one of three ways:

- index16 (UV-5R): 16-bit value. 0 or 0xFFFF is off, 0x0258 and above is a
  CTCSS frequency in tenths of Hz, 1..0x69 indexes UV5R_DCS_CODES with normal
  polarity, 0x6A..0xD2 indexes UV5R_DCS_CODES with inverted polarity.
- index8 (UV-B5): byte index plus a separate polarity bit. 0 is off, 1..50
  indexes CTCSS_TONES, 51..154 indexes DCS_CODES.
- bcd16 (BF-888S): 4-digit BCD. 0 or 0xFFFF is off, below 8000 is CTCSS in
  tenths of Hz, 8000-11999 is DCS normal (value - 8000), 12000 and above is
  DCS inverted (value - 12000). The inverted flag lives in the thousands
  nibble as 0xC, so that nibble is read without digit checking.

Decoders are total: every raw value maps to a Squelch, values with no
meaning decode as off.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .bcd import bcd_to_int, int_to_bcd

CTCSS_TONES = (
    670, 693, 719, 744, 770, 797, 825, 854, 885, 915,
    948, 974, 1000, 1035, 1072, 1109, 1148, 1188, 1230, 1273,
    1318, 1365, 1413, 1462, 1514, 1567, 1598, 1622, 1655, 1679,
    1713, 1738, 1773, 1799, 1835, 1862, 1899, 1928, 1966, 1995,
    2035, 2065, 2107, 2181, 2257, 2291, 2336, 2418, 2503, 2541,
)

DCS_CODES = (
    23, 25, 26, 31, 32, 36, 43, 47, 51, 53,
    54, 65, 71, 72, 73, 74, 114, 115, 116, 122,
    125, 131, 132, 134, 143, 145, 152, 155, 156, 162,
    165, 172, 174, 205, 212, 223, 225, 226, 243, 244,
    245, 246, 251, 252, 255, 261, 263, 265, 266, 271,
    274, 306, 311, 315, 325, 331, 332, 343, 346, 351,
    356, 364, 365, 371, 411, 412, 413, 423, 431, 432,
    445, 446, 452, 454, 455, 462, 464, 465, 466, 503,
    506, 516, 523, 526, 532, 546, 565, 606, 612, 624,
    627, 631, 632, 654, 662, 664, 703, 712, 723, 731,
    732, 734, 743, 754,
)

# The UV-5R firmware also knows D645
UV5R_DCS_CODES = tuple(sorted(DCS_CODES + (645,)))

# index16 thresholds
_CTCSS_MIN = 0x0258
_DCS_INVERTED_BASE = 0x6A

# index8 thresholds
_DCS_INDEX_BASE = 51

# bcd16 thresholds
_DCS_NORMAL_BASE = 8000
_DCS_INVERTED_BCD_BASE = 12000


class SquelchKind(Enum):
    """Squelch mode family."""
    NONE = "none"
    CTCSS = "ctcss"
    DCS = "dcs"


@dataclass(frozen=True)
class Squelch:
    """
    Decoded squelch setting.

    Attributes:
        kind: NONE, CTCSS or DCS
        value: CTCSS frequency in tenths of Hz, or DCS code (0 for NONE)
        inverted: DCS polarity (always False otherwise)
    """
    kind: SquelchKind = SquelchKind.NONE
    value: int = 0
    inverted: bool = False

    @classmethod
    def none(cls) -> "Squelch":
        return cls()

    @classmethod
    def ctcss(cls, tenths_hz: int) -> "Squelch":
        return cls(SquelchKind.CTCSS, tenths_hz)

    @classmethod
    def dcs(cls, code: int, inverted: bool = False) -> "Squelch":
        return cls(SquelchKind.DCS, code, inverted)

    @property
    def is_none(self) -> bool:
        return self.kind is SquelchKind.NONE

    def __str__(self) -> str:
        if self.kind is SquelchKind.CTCSS:
            return f"{self.value / 10:.1f}"
        if self.kind is SquelchKind.DCS:
            return f"D{self.value:03d}{'I' if self.inverted else 'N'}"
        return "-"


def _dcs_index(code: int, table: Tuple[int, ...] = DCS_CODES) -> int:
    try:
        return table.index(code)
    except ValueError:
        raise ValueError(f"Unsupported DCS code {code:03d}")


def decode_index16(raw: int) -> Squelch:
    """Decode a UV-5R 16-bit squelch value."""
    if raw == 0 or raw == 0xFFFF:
        return Squelch.none()
    if raw >= _CTCSS_MIN:
        return Squelch.ctcss(raw)
    if raw < _DCS_INVERTED_BASE:
        return Squelch.dcs(UV5R_DCS_CODES[raw - 1])
    index = raw - _DCS_INVERTED_BASE
    if index < len(UV5R_DCS_CODES):
        return Squelch.dcs(UV5R_DCS_CODES[index], inverted=True)
    return Squelch.none()


def encode_index16(squelch: Squelch) -> int:
    """Inverse of decode_index16."""
    if squelch.kind is SquelchKind.CTCSS:
        if not _CTCSS_MIN <= squelch.value <= 0xFFFE:
            raise ValueError(f"CTCSS {squelch} out of range")
        return squelch.value
    if squelch.kind is SquelchKind.DCS:
        index = _dcs_index(squelch.value, UV5R_DCS_CODES)
        return index + (_DCS_INVERTED_BASE if squelch.inverted else 1)
    return 0


def decode_index8(raw: int, polarity: int) -> Squelch:
    """Decode a UV-B5 tone byte and its polarity bit."""
    if raw == 0:
        return Squelch.none()
    if raw <= len(CTCSS_TONES):
        return Squelch.ctcss(CTCSS_TONES[raw - 1])
    index = raw - _DCS_INDEX_BASE
    if index < len(DCS_CODES):
        return Squelch.dcs(DCS_CODES[index], inverted=bool(polarity))
    return Squelch.none()


def encode_index8(squelch: Squelch) -> Tuple[int, int]:
    """Inverse of decode_index8, returns (tone byte, polarity bit)."""
    if squelch.kind is SquelchKind.CTCSS:
        try:
            return CTCSS_TONES.index(squelch.value) + 1, 0
        except ValueError:
            raise ValueError(f"Unsupported CTCSS tone {squelch}")
    if squelch.kind is SquelchKind.DCS:
        return _dcs_index(squelch.value) + _DCS_INDEX_BASE, int(squelch.inverted)
    return 0, 0


def decode_bcd16(raw: int) -> Squelch:
    """Decode a BF-888S 4-digit BCD squelch value."""
    if raw == 0 or raw == 0xFFFF:
        return Squelch.none()
    value = bcd_to_int(raw, digits=4, strict=False)
    if value < _DCS_NORMAL_BASE:
        return Squelch.ctcss(value)
    if value < _DCS_INVERTED_BCD_BASE:
        return Squelch.dcs(value - _DCS_NORMAL_BASE)
    return Squelch.dcs(value - _DCS_INVERTED_BCD_BASE, inverted=True)


def encode_bcd16(squelch: Squelch) -> int:
    """Inverse of decode_bcd16."""
    if squelch.kind is SquelchKind.CTCSS:
        if not 0 < squelch.value < _DCS_NORMAL_BASE:
            raise ValueError(f"CTCSS {squelch} out of range")
        return int_to_bcd(squelch.value, 4)
    if squelch.kind is SquelchKind.DCS:
        if not 0 <= squelch.value < 1000:
            raise ValueError(f"DCS code {squelch.value} out of range")
        # Thousands nibble 0x8 is normal, 0xC (12 when read as a digit) inverted
        flag = 0xC000 if squelch.inverted else 0x8000
        return flag | int_to_bcd(squelch.value, 3)
    return 0xFFFF
