"""
Memory codec: packed radio memory to records and back.

Per-model layouts live in ``uv5r``, ``uvb5`` and ``bf888s``; every decode
and encode function takes the session explicitly.
"""

from .bcd import bcd_to_int, int_to_bcd
from .records import (
    Band,
    Bandwidth,
    ChannelRecord,
    Duplex,
    LimitsRecord,
    Power,
    PttId,
    SettingValue,
    SettingsRecord,
)
from .tones import (
    CTCSS_TONES,
    DCS_CODES,
    Squelch,
    SquelchKind,
)

__all__ = [
    "bcd_to_int",
    "int_to_bcd",
    "Band",
    "Bandwidth",
    "ChannelRecord",
    "Duplex",
    "LimitsRecord",
    "Power",
    "PttId",
    "SettingValue",
    "SettingsRecord",
    "CTCSS_TONES",
    "DCS_CODES",
    "Squelch",
    "SquelchKind",
]
