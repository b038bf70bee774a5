"""
Model registry for Baofeng radios.

Provides a single source of truth for:
- Clone protocol parameters (magic bytes, block tags, ack bytes)
- Transfer spans for download and upload
- Image file layout
- Codec functions decoding the memory buffer
- Capabilities (what operations are supported and why)

Usage:
    from baoclone.models import list_models, get_model, probe_candidates

    # List all known models
    models = list_models()

    # Get config for a specific model
    config = get_model("UV-5R")

    # Pick a model for an image file
    config = detect_image_model(len(data))
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from ..codec import bf888s, uv5r, uvb5
from ..codec.records import Band


class ModelId(Enum):
    """Closed set of supported memory layouts."""
    UV5R = "uv5r"
    UV5R_ORIGINAL = "uv5r_original"
    UV_B5 = "uv_b5"
    BF_888S = "bf_888s"


class Capability(Enum):
    """Supported operation capability flags."""
    READ_CLONE = auto()         # Can read full clone image
    WRITE_CLONE = auto()        # Can write full clone image
    CHANNEL_NAMES = auto()      # Channels carry a name
    BAND_LIMITS = auto()        # Band edge limits stored in memory
    FIRMWARE_INFO = auto()      # Firmware strings readable from memory
    CONFIGURE = auto()          # Apply a text configuration file


class SafetyLevel(Enum):
    """Safety level for operations."""
    SAFE = "safe"           # No risk, read-only or reversible
    MODERATE = "moderate"   # Low risk, can be undone with backup
    RISKY = "risky"         # High risk, may leave radio unusable


@dataclass(frozen=True)
class CapabilityInfo:
    """Information about a capability and its status for a model."""
    capability: Capability
    supported: bool
    reason: str
    safety: SafetyLevel = SafetyLevel.SAFE


@dataclass(frozen=True)
class TransferSpan:
    """Address range moved in fixed-size blocks."""
    start: int
    end: int
    block_size: int

    def addresses(self) -> range:
        return range(self.start, self.end, self.block_size)

    @property
    def blocks(self) -> int:
        return len(self.addresses())


@dataclass(frozen=True)
class ImageSegment:
    """
    One piece of the image file body.

    A memory segment copies ``start..end`` of the buffer; a filler segment
    (``fill`` set) writes constant bytes and is skipped when loading.
    """
    start: int = 0
    end: int = 0
    fill: bytes = b""

    @classmethod
    def filler(cls, length: int, byte: int = 0xFF) -> "ImageSegment":
        return cls(fill=bytes([byte]) * length)

    @property
    def length(self) -> int:
        return len(self.fill) if self.fill else self.end - self.start


@dataclass(frozen=True)
class ModelConfig:
    """
    Unified configuration for a radio model.

    Consolidates protocol parameters, transfer spans, image layout and the
    codec functions for one memory layout. Instances are never mutated.
    """
    # Basic identification
    name: str
    model_id: ModelId
    vendor: str = "Baofeng"
    family: str = ""
    revision: Optional[str] = None

    # Protocol configuration
    baud_rate: int = 9600
    magic: Tuple[bytes, ...] = ()
    magic_pause: float = 0.0
    ident_query: bytes = b"\x02"
    ident_len: int = 8
    read_tag: bytes = b"S"
    reply_tag: bytes = b"X"
    write_tag: bytes = b"X"
    read_acks: FrozenSet[int] = frozenset({0x06})
    write_acks: FrozenSet[int] = frozenset({0x06})
    progress_every: int = 1

    # Clone memory info
    mem_size: int = 0x2000
    read_spans: Tuple[TransferSpan, ...] = ()
    write_spans: Tuple[TransferSpan, ...] = ()

    # Image file layout
    header_pad: bytes = b""
    image_segments: Tuple[ImageSegment, ...] = ()

    # Channels
    channel_slots: Tuple[int, ...] = ()
    has_names: bool = False
    tx_as_offset: bool = False
    channel_label_offset: int = 0
    vfo_slots: Tuple[Tuple[str, int], ...] = ()
    bands: Tuple[Band, ...] = ()

    # Codec functions
    decode_channel: Optional[Callable] = None
    encode_channel: Optional[Callable] = None
    decode_limits: Optional[Callable] = None
    encode_limits: Optional[Callable] = None
    decode_settings: Optional[Callable] = None
    encode_settings: Optional[Callable] = None
    device_info: Optional[Callable] = None
    detect_revision: Optional[Callable] = None
    upload_check: Optional[Callable] = None

    # Notes and warnings
    notes: Tuple[str, ...] = ()

    @property
    def magic_bytes(self) -> bytes:
        return b"".join(self.magic)

    @property
    def image_size(self) -> int:
        """Size of an image file in this model's layout."""
        return (
            self.ident_len
            + len(self.header_pad)
            + sum(seg.length for seg in self.image_segments)
        )

    def read_blocks(self) -> int:
        return sum(span.blocks for span in self.read_spans)

    def write_blocks(self) -> int:
        return sum(span.blocks for span in self.write_spans)

    def channel_label(self, slot: int) -> int:
        """Channel number shown to the user for a slot."""
        return slot + self.channel_label_offset


# ============================================================================
# MODEL REGISTRY - All known models
# ============================================================================

_MODEL_REGISTRY: Dict[str, ModelConfig] = {}


def _register_model(config: ModelConfig) -> None:
    """Register a model configuration."""
    _MODEL_REGISTRY[config.name] = config


def _uv5r_config(name: str, model_id: ModelId, revision: str, magic: bytes,
                 notes: Tuple[str, ...]) -> ModelConfig:
    # Magic goes out one byte at a time, 10 ms apart
    return ModelConfig(
        name=name,
        model_id=model_id,
        family="uv5r",
        revision=revision,
        magic=tuple(magic[i:i + 1] for i in range(len(magic))),
        magic_pause=0.01,
        read_tag=b"S",
        reply_tag=b"X",
        write_tag=b"X",
        progress_every=2,
        mem_size=0x2000,
        read_spans=(
            TransferSpan(0x0000, 0x1800, 0x40),
            TransferSpan(0x1EC0, 0x2000, 0x40),
        ),
        write_spans=(
            TransferSpan(0x0000, 0x1800, 0x10),
            TransferSpan(0x1EC0, 0x2000, 0x10),
        ),
        image_segments=(
            ImageSegment(0x0000, 0x1800),
            ImageSegment(0x1EC0, 0x2000),
        ),
        channel_slots=tuple(range(uv5r.NUM_CHANNELS)),
        has_names=True,
        bands=(Band.VHF, Band.UHF),
        decode_channel=uv5r.decode_channel,
        encode_channel=uv5r.encode_channel,
        decode_limits=uv5r.decode_limits,
        encode_limits=uv5r.encode_limits,
        decode_settings=uv5r.decode_settings,
        encode_settings=uv5r.encode_settings,
        device_info=uv5r.device_info,
        detect_revision=uv5r.detect_revision,
        upload_check=uv5r.check_upload,
        notes=notes,
    )


def _init_registry() -> None:
    """Initialize the model registry in probe order."""

    # UV-5R (BFB291+ firmware)
    _register_model(_uv5r_config(
        "UV-5R", ModelId.UV5R, uv5r.REVISION_291,
        b"\x50\xBB\xFF\x20\x12\x07\x25",
        ("Firmware BFB291 and later", "Band limits at 0x1FC0"),
    ))

    # UV-5R Original (pre-BFB291)
    _register_model(_uv5r_config(
        "UV-5R-ORIG", ModelId.UV5R_ORIGINAL, uv5r.REVISION_ORIGINAL,
        b"\x50\xBB\xFF\x01\x25\x98\x4D",
        ("Original firmware, pre-BFB291", "Band limits at 0x1FCA"),
    ))

    # UV-B5 / UV-B6
    _register_model(ModelConfig(
        name="UV-B5",
        model_id=ModelId.UV_B5,
        family="uvb5",
        magic=(b"\x05PROGRAM",),
        read_tag=b"R",
        reply_tag=b"W",
        write_tag=b"W",
        read_acks=frozenset({0x74, 0x78, 0x1F}),
        progress_every=8,
        mem_size=0x1000,
        read_spans=(TransferSpan(0x0000, 0x1000, 0x10),),
        write_spans=(TransferSpan(0x0000, 0x1000, 0x10),),
        header_pad=b"Radio Program data v1.08".ljust(40, b"\x00"),
        image_segments=(ImageSegment(0x0000, 0x1000),),
        channel_slots=tuple(range(1, uvb5.NUM_CHANNELS + 1)),
        has_names=True,
        tx_as_offset=True,
        vfo_slots=(("A", uvb5.VFO_A_SLOT), ("B", uvb5.VFO_B_SLOT)),
        bands=(Band.VHF, Band.UHF),
        decode_channel=uvb5.decode_channel,
        encode_channel=uvb5.encode_channel,
        decode_limits=uvb5.decode_limits,
        encode_limits=uvb5.encode_limits,
        decode_settings=uvb5.decode_settings,
        encode_settings=uvb5.encode_settings,
        notes=(
            "Also sold as UV-B6",
            "Transmit stored as offset plus direction",
        ),
    ))

    # BF-888S
    _register_model(ModelConfig(
        name="BF-888S",
        model_id=ModelId.BF_888S,
        family="bf888s",
        magic=(b"\x02", b"PROGRAM"),
        magic_pause=0.1,
        read_tag=b"R",
        reply_tag=b"W",
        write_tag=b"W",
        progress_every=4,
        mem_size=0x400,
        read_spans=(
            TransferSpan(0x0010, 0x0110, 0x08),
            TransferSpan(0x02B0, 0x02C0, 0x08),
            TransferSpan(0x03C0, 0x03E0, 0x08),
        ),
        write_spans=(
            TransferSpan(0x0010, 0x0110, 0x08),
            TransferSpan(0x02B0, 0x02C0, 0x08),
            TransferSpan(0x03C0, 0x03E0, 0x08),
        ),
        header_pad=b"\xff" * 8,
        image_segments=(
            ImageSegment(0x0010, 0x02B0),
            ImageSegment.filler(16),
            ImageSegment(0x02C0, 0x0370),
            ImageSegment(0x02B0, 0x02C0),
            ImageSegment(0x0380, 0x03E0),
        ),
        channel_slots=tuple(range(bf888s.NUM_CHANNELS)),
        channel_label_offset=1,
        decode_channel=bf888s.decode_channel,
        encode_channel=bf888s.encode_channel,
        decode_limits=bf888s.decode_limits,
        encode_limits=bf888s.encode_limits,
        decode_settings=bf888s.decode_settings,
        encode_settings=bf888s.encode_settings,
        notes=(
            "16 channels, no names, no band limits",
            "Image layout compatible with the BF-480 software",
        ),
    ))


# Initialize registry on module load
_init_registry()


# ============================================================================
# PUBLIC API
# ============================================================================

def list_models() -> List[str]:
    """
    List all registered model names.

    Returns:
        Model names in probe order.
    """
    return list(_MODEL_REGISTRY.keys())


def get_model(name: str) -> Optional[ModelConfig]:
    """
    Get configuration for a specific model.

    Args:
        name: Model name (case-insensitive)

    Returns:
        ModelConfig or None if not found.
    """
    for config in _MODEL_REGISTRY.values():
        if config.name.lower() == name.lower():
            return config
    return None


def get_model_by_id(model_id: ModelId) -> ModelConfig:
    for config in _MODEL_REGISTRY.values():
        if config.model_id is model_id:
            return config
    raise KeyError(model_id)


def probe_candidates() -> List[Tuple[ModelConfig, bytes]]:
    """
    Handshake candidates in the order they are tried.

    Returns:
        List of (ModelConfig, magic bytes) pairs.
    """
    return [(config, config.magic_bytes) for config in _MODEL_REGISTRY.values()]


def refine_model(config: ModelConfig, mem) -> ModelConfig:
    """
    Pick the revision of a model family matching the memory contents.

    UV-5R images look the same for both firmware generations on disk; the
    firmware string decides which limits layout applies.
    """
    if config.detect_revision is None:
        return config
    revision = config.detect_revision(mem)
    for candidate in _MODEL_REGISTRY.values():
        if candidate.family == config.family and candidate.revision == revision:
            return candidate
    return config


def detect_image_model(size: int) -> Optional[ModelConfig]:
    """
    Detect model from the size of an image file.

    Args:
        size: Image file size in bytes

    Returns:
        First registered ModelConfig with that image size, or None.
    """
    for config in _MODEL_REGISTRY.values():
        if config.image_size == size:
            return config
    return None


def get_capabilities(model_name: str) -> List[CapabilityInfo]:
    """
    Get capabilities report for a model.

    Args:
        model_name: Model name to check

    Returns:
        List of CapabilityInfo, empty when the model is unknown.
    """
    config = get_model(model_name)
    if config is None:
        return []

    caps = [
        CapabilityInfo(
            Capability.READ_CLONE,
            True,
            f"{config.read_blocks()} blocks from {len(config.read_spans)} span(s)",
            SafetyLevel.SAFE,
        ),
        CapabilityInfo(
            Capability.WRITE_CLONE,
            True,
            f"{config.write_blocks()} blocks of {config.write_spans[0].block_size} bytes",
            SafetyLevel.MODERATE,
        ),
    ]

    caps.append(CapabilityInfo(
        Capability.CHANNEL_NAMES,
        config.has_names,
        "Stored beside channel records" if config.has_names
        else "Not stored by this model",
    ))

    caps.append(CapabilityInfo(
        Capability.BAND_LIMITS,
        bool(config.bands),
        f"{', '.join(b.value for b in config.bands)}" if config.bands
        else "Not stored by this model",
        SafetyLevel.RISKY,
    ))

    caps.append(CapabilityInfo(
        Capability.FIRMWARE_INFO,
        config.device_info is not None,
        "Version strings at 0x1EC0" if config.device_info is not None
        else "Not stored by this model",
    ))

    caps.append(CapabilityInfo(
        Capability.CONFIGURE,
        False,
        "Text configuration files are not supported",
    ))

    return caps
