"""
UV-5R memory layout.

Radio addresses (0x0000-0x2000). The clone protocol skips 0x1800-0x1EC0, the
image file stores the two transferred spans back to back.

    0x0000  128 channel records, 16 bytes each
    0x0CAA  ANI code, 5 digits
    0x0E20  device settings
    0x0E76  current channel of display A and B
    0x1000  channel names, 16 bytes per slot (7 used)
    0x1EC0  firmware strings (serial, power-on message, version)
    0x1FC0  band limits (BFB291 and later)
    0x1FCA  band limits (earlier firmware)
"""

import logging
import struct
from typing import Dict, List, Optional

from ..errors import ImageFormatError, UnsupportedOperation
from .bcd import read_bcd_be, read_bcd_le, write_bcd_be, write_bcd_le
from .bits import get_bits, get_flag, set_bits, set_flag
from .records import (
    Band,
    Bandwidth,
    ChannelRecord,
    LimitsRecord,
    Power,
    PttId,
    SettingValue,
    SettingsRecord,
)
from .settings import ON_OFF, SettingField, decode_fields, encode_fields, numbered
from .tones import decode_index16, encode_index16

logger = logging.getLogger(__name__)

REVISION_291 = "291"
REVISION_ORIGINAL = "original"

NUM_CHANNELS = 128
RECORD_SIZE = 16
NAME_BASE = 0x1000
NAME_LEN = 7

ANI_OFFSET = 0x0CAA
ANI_LEN = 5
SETTINGS_BASE = 0x0E20
CURRENT_CHANNEL = 0x0E76

AUX_BASE = 0x1EC0
SERIAL_OFFSET = AUX_BASE + 0x10
PONMSG_OFFSET = AUX_BASE + 0x20
FIRMWARE_OFFSET = AUX_BASE + 0x30
STRING_LEN = 16

LIMITS_OFFSETS = {
    REVISION_291: {Band.VHF: 0x1FC0, Band.UHF: 0x1FC5},
    REVISION_ORIGINAL: {Band.VHF: 0x1FCA, Band.UHF: 0x1FDA},
}

_HEX_DIGITS = "0123456789ABCDEF"
_EMPTY_WORDS = (0, 0xFFFFFFFF)

# Byte 12/14/15 flag positions
_LOWPOWER_BIT = 0
_PTTID_SHIFT = 0
_SCAN_BIT = 2
_BCL_BIT = 3
_WIDE_BIT = 6


# ---------------------------------------------------------------------------
# Firmware strings
# ---------------------------------------------------------------------------

def _text(mem, offset: int, size: int = STRING_LEN) -> str:
    raw = bytes(mem[offset:offset + size]).split(b"\x00", 1)[0]
    return raw.replace(b"\xff", b" ").decode("latin-1").strip()


def firmware_version(mem) -> str:
    """Firmware version string, e.g. "HN5RV01" or "BFB297"."""
    return _text(mem, FIRMWARE_OFFSET)


def is_original_firmware(version: str) -> bool:
    """True for BFB firmware older than 291, which uses the old layout."""
    pos = version.find("BFB")
    if pos < 0:
        return False
    digits = version[pos + 3:pos + 6]
    return digits.isdigit() and int(digits) < 291


def detect_revision(mem) -> str:
    if is_original_firmware(firmware_version(mem)):
        return REVISION_ORIGINAL
    return REVISION_291


def device_info(session) -> Dict[str, str]:
    mem = session.mem
    return {
        "Firmware": firmware_version(mem),
        "Power-on message": _text(mem, PONMSG_OFFSET),
        "Serial number": _text(mem, SERIAL_OFFSET),
    }


def check_upload(session, transfer) -> None:
    """
    Refuse to upload an image taken from a different firmware.

    Reads the firmware block from the radio and compares it with the image.

    Raises:
        UnsupportedOperation: If the version strings differ
    """
    block = transfer.read_block(AUX_BASE, 0x40)
    radio_version = _text(block, FIRMWARE_OFFSET - AUX_BASE)
    image_version = firmware_version(session.mem)
    logger.info(f"Radio firmware: {radio_version!r}, image firmware: {image_version!r}")
    if radio_version != image_version:
        raise UnsupportedOperation(
            f"Image firmware {image_version!r} does not match radio firmware "
            f"{radio_version!r}; refusing to upload"
        )


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------

def _check_slot(slot: int) -> None:
    if not 0 <= slot < NUM_CHANNELS:
        raise IndexError(f"Channel slot {slot} outside 0..{NUM_CHANNELS - 1}")


def _decode_name(mem, slot: int) -> str:
    offset = NAME_BASE + slot * RECORD_SIZE
    raw = bytes(mem[offset:offset + NAME_LEN]).split(b"\x00", 1)[0].rstrip(b"\xff")
    return raw.decode("ascii", errors="replace")


def decode_channel(session, slot: int) -> ChannelRecord:
    """
    Decode channel ``slot`` (0-127).

    An rx word of all zeros or all ones is an empty slot. A tx word of all
    ones means transmit is inhibited and decodes as ``tx_hz == 0``.

    Raises:
        IndexError: If the slot is out of range
        ImageFormatError: If a frequency is not valid BCD
    """
    _check_slot(slot)
    mem = session.mem
    base = slot * RECORD_SIZE
    rx_word, tx_word, rxtone, txtone = struct.unpack_from("<IIHH", mem, base)
    if rx_word in _EMPTY_WORDS:
        return ChannelRecord.disabled()

    try:
        rx_hz = read_bcd_le(mem, base, 4) * 10
        tx_hz = 0 if tx_word in _EMPTY_WORDS else read_bcd_le(mem, base + 4, 4) * 10
    except ValueError as e:
        raise ImageFormatError(f"Channel {slot}: {e}", address=base)

    flags = mem[base + 15]
    return ChannelRecord(
        rx_hz=rx_hz,
        tx_hz=tx_hz,
        rx_squelch=decode_index16(rxtone),
        tx_squelch=decode_index16(txtone),
        power=Power.LOW if get_flag(mem[base + 14], _LOWPOWER_BIT) else Power.HIGH,
        bandwidth=Bandwidth.WIDE if get_flag(flags, _WIDE_BIT) else Bandwidth.NARROW,
        scan=get_flag(flags, _SCAN_BIT),
        bcl=get_flag(flags, _BCL_BIT),
        pttid=PttId(get_bits(flags, _PTTID_SHIFT, 2)),
        signal_code=get_bits(mem[base + 12], 0, 4),
        name=_decode_name(mem, slot),
    )


def _hz_to_word(hz: int, what: str) -> int:
    if hz % 10:
        raise ValueError(f"{what} frequency {hz} Hz is not a multiple of 10 Hz")
    return hz // 10


def encode_channel(session, slot: int, record: ChannelRecord) -> None:
    """
    Store ``record`` into channel ``slot``.

    A disabled record blanks the slot and its name with 0xFF. Bits the
    record does not describe are kept as they were. The record is built
    aside and stored only once every field has been encoded.
    """
    _check_slot(slot)
    mem = session.mem
    base = slot * RECORD_SIZE
    name_offset = NAME_BASE + slot * RECORD_SIZE

    if not record.enabled:
        mem[base:base + RECORD_SIZE] = b"\xff" * RECORD_SIZE
        mem[name_offset:name_offset + NAME_LEN] = b"\xff" * NAME_LEN
        return

    name = (record.name or "").encode("ascii")
    if len(name) > NAME_LEN:
        raise ValueError(f"Name {record.name!r} longer than {NAME_LEN} characters")

    raw = bytearray(mem[base:base + RECORD_SIZE])
    if struct.unpack_from("<I", raw)[0] in _EMPTY_WORDS:
        raw = bytearray(RECORD_SIZE)

    write_bcd_le(raw, 0, 4, _hz_to_word(record.rx_hz, "RX"))
    tx_hz = record.rx_hz if record.tx_hz is None else record.tx_hz
    if tx_hz == 0:
        raw[4:8] = b"\xff\xff\xff\xff"
    else:
        write_bcd_le(raw, 4, 4, _hz_to_word(tx_hz, "TX"))
    struct.pack_into(
        "<HH", raw, 8,
        encode_index16(record.rx_squelch),
        encode_index16(record.tx_squelch),
    )

    raw[12] = set_bits(raw[12], 0, 4, record.signal_code or 0)
    raw[14] = set_flag(raw[14], _LOWPOWER_BIT, record.power is Power.LOW)

    flags = raw[15]
    flags = set_bits(flags, _PTTID_SHIFT, 2, (record.pttid or PttId.NONE).value)
    flags = set_flag(flags, _SCAN_BIT, bool(record.scan))
    flags = set_flag(flags, _BCL_BIT, bool(record.bcl))
    flags = set_flag(flags, _WIDE_BIT, record.bandwidth is not Bandwidth.NARROW)
    raw[15] = flags

    mem[base:base + RECORD_SIZE] = raw
    mem[name_offset:name_offset + NAME_LEN] = name.ljust(NAME_LEN, b"\xff")


# ---------------------------------------------------------------------------
# Band limits
# ---------------------------------------------------------------------------

def _limits_offset(session, band: Band) -> int:
    revision = session.revision or REVISION_291
    return LIMITS_OFFSETS[revision][band]


def decode_limits(session, band: Band) -> LimitsRecord:
    """
    Decode band limits: enable byte then lower and upper edge as big-endian
    BCD whole MHz.
    """
    mem = session.mem
    offset = _limits_offset(session, band)
    try:
        lower = read_bcd_be(mem, offset + 1, 2)
        upper = read_bcd_be(mem, offset + 3, 2)
    except ValueError as e:
        raise ImageFormatError(f"{band.value} limits: {e}", address=offset)
    return LimitsRecord(band, enabled=mem[offset] != 0, lower=lower, upper=upper)


def encode_limits(session, record: LimitsRecord) -> None:
    mem = session.mem
    offset = _limits_offset(session, record.band)
    mem[offset] = 1 if record.enabled else 0
    write_bcd_be(mem, offset + 1, 2, record.lower)
    write_bcd_be(mem, offset + 3, 2, record.upper)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

STEP_LIST_ORIGINAL = ("2.5K", "5.0K", "6.25K", "10.0K", "12.5K", "25.0K")
STEP_LIST_291 = STEP_LIST_ORIGINAL + ("50.0K", "100.0K")

SAVE_LIST = ("Off", "1:1", "1:2", "1:3", "1:4")
VOX_LIST = ("OFF",) + numbered(1, 10)
TIMEOUT_LIST = tuple(f"{n} sec" for n in range(15, 615, 15))
ABR_LIST_ORIGINAL = ("Off",) + numbered(1, 5)
ABR_LIST_291 = numbered(0, 24)
VOICE_LIST = ("Off", "English", "Chinese")
DTMFST_LIST = ("OFF", "DT-ST", "ANI-ST", "DT+ANI")
RESUME_LIST = ("TO", "CO", "SE")
PTTID_LIST = ("Off", "BOT", "EOT", "Both")
MODE_LIST = ("Channel", "Name", "Frequency")
COLOR_LIST = ("Off", "Blue", "Orange", "Purple")
ALMOD_LIST = ("Site", "Tone", "Code")
TDRAB_LIST = ("Off", "A", "B")
RPSTE_LIST = ("OFF",) + numbered(1, 10)
STEDELAY_LIST = ("OFF",) + tuple(f"{n} ms" for n in range(100, 1100, 100))
PONMSG_LIST = ("Full", "Message")


def _settings_fields(revision: Optional[str]) -> List[SettingField]:
    original = revision == REVISION_ORIGINAL
    b = SETTINGS_BASE
    return [
        SettingField("squelch", "Squelch Level", b + 0, numbered(0, 9)),
        SettingField("step", "Tuning Step", b + 1,
                     STEP_LIST_ORIGINAL if original else STEP_LIST_291),
        SettingField("save", "Battery Saver", b + 3, SAVE_LIST),
        SettingField("vox", "VOX Sensitivity", b + 4, VOX_LIST),
        SettingField("abr", "Backlight Timeout", b + 6,
                     ABR_LIST_ORIGINAL if original else ABR_LIST_291),
        SettingField("tdr", "Dual Watch", b + 7, ON_OFF),
        SettingField("beep", "Beep", b + 8, ON_OFF),
        SettingField("timeout", "Timeout Timer", b + 9, TIMEOUT_LIST),
        SettingField("voice", "Voice", b + 14, VOICE_LIST),
        SettingField("dtmfst", "DTMF Sidetone", b + 16, DTMFST_LIST),
        SettingField("screv", "Scan Resume", b + 18, RESUME_LIST, width=2),
        SettingField("pttid", "When to send PTT ID", b + 19, PTTID_LIST),
        SettingField("mdfa", "Display Mode (A)", b + 21, MODE_LIST),
        SettingField("mdfb", "Display Mode (B)", b + 22, MODE_LIST),
        SettingField("bcl", "Busy Channel Lockout", b + 23, ON_OFF),
        SettingField("autolk", "Automatic Key Lock", b + 24, ON_OFF),
        SettingField("wtled", "Standby LED Color", b + 29, COLOR_LIST),
        SettingField("rxled", "RX LED Color", b + 30, COLOR_LIST),
        SettingField("txled", "TX LED Color", b + 31, COLOR_LIST),
        SettingField("almod", "Alarm Mode", b + 32, ALMOD_LIST),
        SettingField("tdrab", "Dual Watch Priority", b + 34, TDRAB_LIST),
        SettingField("ste", "Squelch Tail Eliminate (HT to HT)", b + 35, ON_OFF),
        SettingField("rpste", "Squelch Tail Eliminate (repeater)", b + 36, RPSTE_LIST),
        SettingField("rptrl", "STE Repeater Delay", b + 37, STEDELAY_LIST),
        SettingField("ponmsg", "Power-On Message", b + 38, PONMSG_LIST),
        SettingField("roger", "Roger Beep", b + 39, ON_OFF),
        SettingField("mrcha", "Channel (A)", CURRENT_CHANNEL, numbered(0, 127), width=7),
        SettingField("mrchb", "Channel (B)", CURRENT_CHANNEL + 1, numbered(0, 127), width=7),
    ]


def ani_code(mem) -> str:
    return "".join(
        _HEX_DIGITS[mem[ANI_OFFSET + i] & 0x0F] for i in range(ANI_LEN)
    )


def decode_settings(session) -> SettingsRecord:
    values = decode_fields(session.mem, _settings_fields(session.revision))
    values.append(SettingValue("ani", "ANI Code", None, ani_code(session.mem)))
    return SettingsRecord(values)


def encode_settings(session, values: Dict[str, int]) -> None:
    encode_fields(session.mem, _settings_fields(session.revision), values)
