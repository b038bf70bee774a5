"""
Exception hierarchy for the clone protocol and image codec.

Every error is fatal to the operation that raised it: nothing in the
transport or codec layers retries or returns partial results.
"""

from typing import Optional


class RadioError(Exception):
    """Base exception for all clone failures"""

    def __init__(
        self,
        message: str,
        address: Optional[int] = None,
        expected: Optional[bytes] = None,
        actual: Optional[bytes] = None,
    ):
        super().__init__(message)
        self.address = address
        self.expected = expected
        self.actual = actual

    def diagnostic(self) -> str:
        """Message plus the block address and raw bytes, where known."""
        parts = [str(self)]
        if self.address is not None:
            parts.append(f"block 0x{self.address:04X}")
        if self.expected is not None:
            parts.append(f"expected {_hexdash(self.expected)}")
        if self.actual is not None:
            parts.append(f"got {_hexdash(self.actual) or '<nothing>'}")
        return "; ".join(parts)


class LinkError(RadioError):
    """Serial port could not be opened, read or written"""
    pass


class LinkTimeout(RadioError):
    """No data, or fewer bytes than requested, within the read window"""
    pass


class ProtocolMismatch(RadioError):
    """Reply tag, echoed address or echoed length disagree with the request"""
    pass


class AckRejected(RadioError):
    """Acknowledge byte outside the model's accepted set"""
    pass


class DeviceNotFound(RadioError):
    """Handshake exhausted every candidate magic and retry round"""
    pass


class ImageFormatError(RadioError):
    """Image file too short, or its contents cannot be decoded"""
    pass


class UnsupportedOperation(RadioError):
    """Operation not implemented for this model"""
    pass


def _hexdash(data: bytes) -> str:
    return "-".join(f"{b:02x}" for b in data)
