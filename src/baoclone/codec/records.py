"""
Decoded record types.

Records are views computed from a session's memory buffer. Fields a model
does not store are left as None.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .tones import Squelch


class Power(Enum):
    LOW = "Low"
    HIGH = "High"


class Bandwidth(Enum):
    NARROW = "Narrow"
    WIDE = "Wide"


class PttId(Enum):
    """PTT-ID transmission; value is the raw 2-bit encoding."""
    NONE = 0
    BEGIN = 1
    END = 2
    BOTH = 3

    def __str__(self) -> str:
        return ("-", "Beg", "End", "Both")[self.value]


class Duplex(Enum):
    """UV-B5 offset direction; value is the raw 2-bit encoding."""
    OFF = 0
    MINUS = 1
    PLUS = 2
    RESERVED = 3


class Band(Enum):
    VHF = "VHF"
    UHF = "UHF"


@dataclass(frozen=True)
class ChannelRecord:
    """
    One memory channel slot.

    A disabled slot has ``rx_hz == 0`` and every other field unset.

    Attributes:
        rx_hz: Receive frequency in Hz
        tx_hz: Transmit frequency in Hz (models storing an absolute frequency)
        tx_offset_hz: Signed transmit offset in Hz (models storing an offset)
        duplex: Raw offset direction for models storing an offset
        rx_squelch / tx_squelch: Squelch modes
        power, bandwidth: Transmit power and channel width
        scan: Channel is in the scan list
        bcl: Busy channel lockout
        pttid: PTT-ID mode
        scramble: Voice scrambler (BF-888S)
        compander: Compander (UV-B5)
        reverse: Reverse frequency (UV-B5)
        signal_code: PTT-ID signal code group (UV-5R)
        name: Channel name, padding stripped
    """
    rx_hz: int = 0
    tx_hz: Optional[int] = None
    tx_offset_hz: Optional[int] = None
    duplex: Optional[Duplex] = None
    rx_squelch: Squelch = field(default_factory=Squelch.none)
    tx_squelch: Squelch = field(default_factory=Squelch.none)
    power: Optional[Power] = None
    bandwidth: Optional[Bandwidth] = None
    scan: Optional[bool] = None
    bcl: Optional[bool] = None
    pttid: Optional[PttId] = None
    scramble: Optional[bool] = None
    compander: Optional[bool] = None
    reverse: Optional[bool] = None
    signal_code: Optional[int] = None
    name: Optional[str] = None

    @classmethod
    def disabled(cls) -> "ChannelRecord":
        return cls()

    @property
    def enabled(self) -> bool:
        return self.rx_hz != 0

    @property
    def offset_hz(self) -> int:
        """Signed transmit offset regardless of how the model stores it."""
        if self.tx_offset_hz is not None:
            return self.tx_offset_hz
        if self.tx_hz is not None:
            return self.tx_hz - self.rx_hz
        return 0


@dataclass(frozen=True)
class LimitsRecord:
    """
    Band edge limits.

    ``lower``/``upper`` are the BCD-decoded integers as stored; ``unit_hz``
    converts them (1 MHz for UV-5R, 100 kHz for UV-B5). An edge is None when
    its bytes are erased, as on UV-B5 firmware without band limits.
    """
    band: Band
    enabled: Optional[bool]
    lower: Optional[int]
    upper: Optional[int]
    unit_hz: int = 1_000_000

    @property
    def lower_hz(self) -> Optional[int]:
        return None if self.lower is None else self.lower * self.unit_hz

    @property
    def upper_hz(self) -> Optional[int]:
        return None if self.upper is None else self.upper * self.unit_hz


@dataclass(frozen=True)
class SettingValue:
    """
    One decoded device-wide setting.

    ``raw`` is None for read-only text values. ``known`` is False when the
    raw value lies outside the documented range.
    """
    name: str
    label: str
    raw: Optional[int]
    display: str
    known: bool = True


@dataclass
class SettingsRecord:
    """Ordered device-wide settings."""
    values: List[SettingValue] = field(default_factory=list)

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, name: str) -> Optional[SettingValue]:
        for value in self.values:
            if value.name == name:
                return value
        return None

    def raw_values(self) -> Dict[str, int]:
        """Raw values of all writable settings, keyed by name."""
        return {v.name: v.raw for v in self.values if v.raw is not None}
