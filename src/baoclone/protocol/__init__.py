"""Radio protocol layer - serial link, handshake and block transfer."""

from .link import SerialLink, open_link, READ_TIMEOUT
from .handshake import (
    HandshakeProbe,
    ProbeResult,
    ProbeState,
    probe,
    PROBE_ROUNDS,
    PROBE_DELAY,
)
from .block_transfer import BlockTransfer

__all__ = [
    # Link
    "SerialLink",
    "open_link",
    "READ_TIMEOUT",
    # Handshake
    "HandshakeProbe",
    "ProbeResult",
    "ProbeState",
    "probe",
    "PROBE_ROUNDS",
    "PROBE_DELAY",
    # Block transfer
    "BlockTransfer",
]
