"""
Table-driven enumerated settings.

Each model lists its settings as SettingField entries: a byte offset, a bit
range inside that byte and the display name of every legal raw value. A raw
value past the end of the list renders as "Unknown (N)".
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .bits import get_bits, set_bits
from .records import SettingValue

ON_OFF = ("Off", "On")


@dataclass(frozen=True)
class SettingField:
    """
    Location and legal values of one setting.

    Attributes:
        name: Stable key used for encoding
        label: Human-readable label
        offset: Absolute byte address in radio memory
        choices: Display text for raw values 0..len-1
        shift: Lowest bit of the field
        width: Field width in bits
        base: Raw value of the first choice
    """
    name: str
    label: str
    offset: int
    choices: Tuple[str, ...]
    shift: int = 0
    width: int = 8
    base: int = 0

    def legal(self, raw: int) -> bool:
        return self.base <= raw < self.base + len(self.choices)


def numbered(first: int, last: int, fmt: str = "{}") -> Tuple[str, ...]:
    """Choices for a plain numeric range, e.g. squelch level 0..9."""
    return tuple(fmt.format(n) for n in range(first, last + 1))


def decode_field(mem, fld: SettingField) -> SettingValue:
    raw = get_bits(mem[fld.offset], fld.shift, fld.width)
    if fld.legal(raw):
        return SettingValue(fld.name, fld.label, raw, fld.choices[raw - fld.base])
    return SettingValue(fld.name, fld.label, raw, f"Unknown ({raw})", known=False)


def decode_fields(mem, fields: Iterable[SettingField]) -> List[SettingValue]:
    return [decode_field(mem, fld) for fld in fields]


def encode_fields(mem, fields: Sequence[SettingField], values: Dict[str, int]) -> None:
    """
    Write raw setting values back into memory.

    Raises:
        KeyError: If a name is not a setting of this model
        ValueError: If a raw value is outside the documented range
    """
    by_name = {fld.name: fld for fld in fields}
    for name, raw in values.items():
        if name not in by_name:
            raise KeyError(f"Unknown setting '{name}'")
        fld = by_name[name]
        if not fld.legal(raw):
            raise ValueError(
                f"{fld.label}: raw value {raw} outside "
                f"{fld.base}..{fld.base + len(fld.choices) - 1}"
            )
        mem[fld.offset] = set_bits(mem[fld.offset], fld.shift, fld.width, raw)
