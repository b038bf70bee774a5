"""
Radio session: one model's memory buffer and identity.

The buffer is the single source of truth; channel, limit and setting records
are decoded from it on demand and encoded straight back into it.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from baoclone.codec.records import Band, ChannelRecord, LimitsRecord, SettingsRecord
from baoclone.models import ModelConfig


@dataclass
class RadioSession:
    """
    Memory image of one radio.

    Attributes:
        model: Frozen model configuration, fixed for the session
        mem: Memory buffer sized to the model, 0xFF when fresh
        ident: 8-byte identifier returned by the handshake or read from file
        revision: Firmware generation ("original" / "291" for UV-5R)
    """
    model: ModelConfig
    mem: Optional[bytearray] = None
    ident: bytes = b"\xff" * 8
    revision: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        if self.mem is None:
            self.mem = bytearray(b"\xff" * self.model.mem_size)
        elif len(self.mem) != self.model.mem_size:
            raise ValueError(
                f"{self.model.name} memory is {self.model.mem_size} bytes, "
                f"got {len(self.mem)}"
            )
        else:
            self.mem = bytearray(self.mem)
        if self.revision is None:
            self.revision = self.model.revision

    # Channels

    def channel(self, slot: int) -> ChannelRecord:
        return self.model.decode_channel(self, slot)

    def set_channel(self, slot: int, record: ChannelRecord) -> None:
        self.model.encode_channel(self, slot, record)

    def channels(self) -> Iterator[Tuple[int, ChannelRecord]]:
        """Yield (slot, record) for every enabled memory channel."""
        for slot in self.model.channel_slots:
            record = self.channel(slot)
            if record.enabled:
                yield slot, record

    def vfos(self) -> Iterator[Tuple[str, ChannelRecord]]:
        for label, slot in self.model.vfo_slots:
            yield label, self.channel(slot)

    # Limits

    def limits(self, band: Band) -> LimitsRecord:
        return self.model.decode_limits(self, band)

    def set_limits(self, record: LimitsRecord) -> None:
        self.model.encode_limits(self, record)

    # Settings

    def settings(self) -> SettingsRecord:
        return self.model.decode_settings(self)

    def apply_settings(self, values: Dict[str, int]) -> None:
        self.model.encode_settings(self, values)

    def device_info(self) -> Dict[str, str]:
        if self.model.device_info is None:
            return {}
        return self.model.device_info(self)
