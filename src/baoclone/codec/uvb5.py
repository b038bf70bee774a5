"""
UV-B5 / UV-B6 memory layout.

    0x0000  VFO A record
    0x0010  99 channel records, 16 bytes each (slots 1-99)
    0x0820  VFO B record (slot 130)
    0x0A00  channel names, 5 charset indices per channel
    0x0D00  device settings
    0x0D20  PTT-ID code
    0x0F00  band limits, little-endian BCD in units of 100 kHz

Transmit frequency is stored as an offset magnitude plus a direction.
"""

from typing import Dict, List, Optional

from ..errors import ImageFormatError
from .bcd import int_to_bcd, read_bcd_le, write_bcd_le
from .bits import get_bits, get_flag, set_bits, set_flag
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
from .settings import ON_OFF, SettingField, decode_fields, encode_fields, numbered
from .tones import decode_index8, encode_index8

NUM_CHANNELS = 99
RECORD_SIZE = 16
VFO_A_SLOT = 0
VFO_B_SLOT = 130

NAME_BASE = 0x0A00
NAME_LEN = 5
CHARSET = "0123456789- ABCDEFGHIJKLMNOPQRSTUVWXYZ/_+*"

SETTINGS_BASE = 0x0D00
PTTID_CODE_OFFSET = 0x0D20
PTTID_CODE_LEN = 6
DTMF_CHARS = "0123456789ABCD*#"

LIMITS_OFFSETS = {Band.VHF: 0x0F00, Band.UHF: 0x0F04}
LIMITS_UNIT_HZ = 100_000

_EMPTY_WORDS = (0, 0xFFFFFFFF)

# Byte 8 flags
_COMPANDER_BIT = 3
_RXPOL_BIT = 4
_TXPOL_BIT = 5

# Byte 11 flags
_DUPLEX_SHIFT = 0
_REVFREQ_BIT = 2
_HIGHPOWER_BIT = 3
_BCL_BIT = 4
_NARROW_BIT = 5
_SCAN_BIT = 6
_PTTID_BIT = 7


def _check_slot(slot: int) -> None:
    if not (0 <= slot <= NUM_CHANNELS or slot == VFO_B_SLOT):
        raise IndexError(
            f"Channel slot {slot} outside 0..{NUM_CHANNELS} and {VFO_B_SLOT}"
        )


def _has_name(slot: int) -> bool:
    return 1 <= slot <= NUM_CHANNELS


def _decode_name(mem, slot: int) -> str:
    offset = NAME_BASE + (slot - 1) * NAME_LEN
    chars = []
    for index in mem[offset:offset + NAME_LEN]:
        if index >= len(CHARSET):
            break
        chars.append(CHARSET[index])
    return "".join(chars)


def _encode_name(name: str) -> bytes:
    if len(name) > NAME_LEN:
        raise ValueError(f"Name {name!r} longer than {NAME_LEN} characters")
    indices = []
    for char in name.upper():
        if char not in CHARSET:
            raise ValueError(f"Character {char!r} cannot be stored in a channel name")
        indices.append(CHARSET.index(char))
    return bytes(indices).ljust(NAME_LEN, b"\xff")


def decode_channel(session, slot: int) -> ChannelRecord:
    """
    Decode channel ``slot``: 1-99 are memory channels, 0 and 130 the VFOs.

    Raises:
        IndexError: If the slot is out of range
        ImageFormatError: If a frequency is not valid BCD
    """
    _check_slot(slot)
    mem = session.mem
    base = slot * RECORD_SIZE
    rx_word = int.from_bytes(bytes(mem[base:base + 4]), "little")
    if rx_word in _EMPTY_WORDS:
        return ChannelRecord.disabled()

    try:
        rx_hz = read_bcd_le(mem, base, 4) * 10
        offset_hz = read_bcd_le(mem, base + 4, 4) * 10
    except ValueError as e:
        raise ImageFormatError(f"Channel {slot}: {e}", address=base)

    polarity = mem[base + 8]
    flags = mem[base + 11]
    duplex = Duplex(get_bits(flags, _DUPLEX_SHIFT, 2))
    return ChannelRecord(
        rx_hz=rx_hz,
        tx_offset_hz=-offset_hz if duplex is Duplex.MINUS else offset_hz,
        duplex=duplex,
        rx_squelch=decode_index8(mem[base + 9], get_bits(polarity, _RXPOL_BIT)),
        tx_squelch=decode_index8(mem[base + 10], get_bits(polarity, _TXPOL_BIT)),
        power=Power.HIGH if get_flag(flags, _HIGHPOWER_BIT) else Power.LOW,
        bandwidth=Bandwidth.NARROW if get_flag(flags, _NARROW_BIT) else Bandwidth.WIDE,
        scan=get_flag(flags, _SCAN_BIT),
        bcl=get_flag(flags, _BCL_BIT),
        pttid=PttId.BEGIN if get_flag(flags, _PTTID_BIT) else PttId.NONE,
        compander=get_flag(polarity, _COMPANDER_BIT),
        reverse=get_flag(flags, _REVFREQ_BIT),
        name=_decode_name(mem, slot) if _has_name(slot) else None,
    )


def encode_channel(session, slot: int, record: ChannelRecord) -> None:
    """
    Store ``record`` into channel ``slot``.

    The offset direction comes from ``record.duplex`` when set, otherwise
    from the sign of the offset. Only "none" and "begin" PTT-ID fit.
    Nothing is stored if any field cannot be encoded.
    """
    _check_slot(slot)
    mem = session.mem
    base = slot * RECORD_SIZE
    name_offset = NAME_BASE + (slot - 1) * NAME_LEN

    if not record.enabled:
        mem[base:base + RECORD_SIZE] = b"\xff" * RECORD_SIZE
        if _has_name(slot):
            mem[name_offset:name_offset + NAME_LEN] = b"\xff" * NAME_LEN
        return

    pttid = record.pttid or PttId.NONE
    if pttid not in (PttId.NONE, PttId.BEGIN):
        raise ValueError(f"PTT-ID mode {pttid.name} not supported on this model")
    name = _encode_name(record.name or "") if _has_name(slot) else None

    offset_hz = record.offset_hz
    if record.duplex is not None:
        duplex = record.duplex
    elif offset_hz < 0:
        duplex = Duplex.MINUS
    elif offset_hz > 0:
        duplex = Duplex.PLUS
    else:
        duplex = Duplex.OFF

    raw = bytearray(mem[base:base + RECORD_SIZE])
    if int.from_bytes(bytes(raw[0:4]), "little") in _EMPTY_WORDS:
        raw = bytearray(RECORD_SIZE)

    for value, what in ((record.rx_hz, "RX"), (abs(offset_hz), "Offset")):
        if value % 10:
            raise ValueError(f"{what} frequency {value} Hz is not a multiple of 10 Hz")
    write_bcd_le(raw, 0, 4, record.rx_hz // 10)
    write_bcd_le(raw, 4, 4, abs(offset_hz) // 10)

    rxtone, rxpol = encode_index8(record.rx_squelch)
    txtone, txpol = encode_index8(record.tx_squelch)
    raw[9] = rxtone
    raw[10] = txtone

    polarity = raw[8]
    polarity = set_flag(polarity, _COMPANDER_BIT, bool(record.compander))
    polarity = set_flag(polarity, _RXPOL_BIT, rxpol)
    polarity = set_flag(polarity, _TXPOL_BIT, txpol)
    raw[8] = polarity

    flags = raw[11]
    flags = set_bits(flags, _DUPLEX_SHIFT, 2, duplex.value)
    flags = set_flag(flags, _REVFREQ_BIT, bool(record.reverse))
    flags = set_flag(flags, _HIGHPOWER_BIT, record.power is not Power.LOW)
    flags = set_flag(flags, _BCL_BIT, bool(record.bcl))
    flags = set_flag(flags, _NARROW_BIT, record.bandwidth is Bandwidth.NARROW)
    flags = set_flag(flags, _SCAN_BIT, bool(record.scan))
    flags = set_flag(flags, _PTTID_BIT, pttid is PttId.BEGIN)
    raw[11] = flags

    mem[base:base + RECORD_SIZE] = raw
    if name is not None:
        mem[name_offset:name_offset + NAME_LEN] = name


def _read_edge(mem, offset: int) -> Optional[int]:
    if mem[offset:offset + 2] == b"\xff\xff":
        return None
    return read_bcd_le(mem, offset, 2)


def decode_limits(session, band: Band) -> LimitsRecord:
    """
    Band limits; this model has no enable flag.

    Older firmware never writes the limits, so an erased edge decodes as None.
    """
    offset = LIMITS_OFFSETS[band]
    try:
        lower = _read_edge(session.mem, offset)
        upper = _read_edge(session.mem, offset + 2)
    except ValueError as e:
        raise ImageFormatError(f"{band.value} limits: {e}", address=offset)
    return LimitsRecord(band, enabled=None, lower=lower, upper=upper,
                        unit_hz=LIMITS_UNIT_HZ)


def encode_limits(session, record: LimitsRecord) -> None:
    offset = LIMITS_OFFSETS[record.band]
    edges = []
    for value in (record.lower, record.upper):
        if value is None:
            edges.append(b"\xff\xff")
        else:
            edges.append(int_to_bcd(value, 4).to_bytes(2, "little"))
    session.mem[offset:offset + 4] = b"".join(edges)


SCANTYPE_LIST = ("Time", "Carrier", "Search")
PTTID_LIST = ("Off", "BOT", "EOT", "Both")
TIMEOUT_LIST = ("Off",) + numbered(1, 7, "{} min")
MDF_LIST = ("Frequency", "Name", "Channel")
TXTDR_LIST = ("Current Frequency", "F1 Frequency", "F2 Frequency")
WORKMODE_LIST = ("Frequency Mode", "Channel Mode")
OFF_ON_INVERTED = ("On", "Off")


def _settings_fields() -> List[SettingField]:
    b = SETTINGS_BASE
    return [
        SettingField("squelch", "Squelch Level", b + 0, numbered(0, 9)),
        SettingField("freqmode_ab", "Active Display", b + 1, ("A", "B"), shift=7, width=1),
        SettingField("save_funct", "Battery Saver", b + 1, ON_OFF, shift=6, width=1),
        SettingField("backlight", "Backlight", b + 1, ON_OFF, shift=5, width=1),
        SettingField("beep_tone_disabled", "Beep Prompt", b + 1, OFF_ON_INVERTED,
                     shift=4, width=1),
        SettingField("roger", "Roger Beep", b + 1, ON_OFF, shift=3, width=1),
        SettingField("tdr", "Dual Watch", b + 1, ON_OFF, shift=2, width=1),
        SettingField("scantype", "Scan Type", b + 1, SCANTYPE_LIST, width=2),
        SettingField("language", "Language", b + 2, ("English", "Chinese"),
                     shift=7, width=1),
        SettingField("workmode_b", "Work Mode (B)", b + 2, WORKMODE_LIST, shift=6, width=1),
        SettingField("workmode_a", "Work Mode (A)", b + 2, WORKMODE_LIST, shift=5, width=1),
        SettingField("workmode_fm", "FM Work Mode", b + 2, WORKMODE_LIST, shift=4, width=1),
        SettingField("voice_prompt", "Voice Prompt", b + 2, ON_OFF, shift=3, width=1),
        SettingField("fm", "FM Radio", b + 2, ON_OFF, shift=2, width=1),
        SettingField("pttid", "PTT ID", b + 2, PTTID_LIST, width=2),
        SettingField("timeout", "Timeout Timer", b + 3, TIMEOUT_LIST, width=3),
        SettingField("mdf_b", "Display Mode (B)", b + 4, MDF_LIST, shift=6, width=2),
        SettingField("mdf_a", "Display Mode (A)", b + 4, MDF_LIST, shift=4, width=2),
        SettingField("txtdr", "Dual Standby TX Priority", b + 4, TXTDR_LIST, width=2),
        SettingField("ste_disabled", "Squelch Tail Eliminate", b + 5, OFF_ON_INVERTED,
                     shift=3, width=1),
        SettingField("sidetone", "Sidetone", b + 5, ON_OFF, width=1),
        SettingField("vox", "VOX Level", b + 6, numbered(0, 9)),
        SettingField("mem_chan_a", "Memory Channel (A)", b + 8, numbered(1, 99), base=1),
        SettingField("mem_chan_b", "Memory Channel (B)", b + 13, numbered(1, 99), base=1),
    ]


def pttid_code(mem) -> str:
    code = mem[PTTID_CODE_OFFSET:PTTID_CODE_OFFSET + PTTID_CODE_LEN]
    return "".join(DTMF_CHARS[c] for c in code if c < len(DTMF_CHARS))


def decode_settings(session) -> SettingsRecord:
    values = decode_fields(session.mem, _settings_fields())
    values.append(SettingValue("pttid_code", "PTT-ID Code", None, pttid_code(session.mem)))
    return SettingsRecord(values)


def encode_settings(session, values: Dict[str, int]) -> None:
    encode_fields(session.mem, _settings_fields(), values)
