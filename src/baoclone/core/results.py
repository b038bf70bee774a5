"""
Outcome of a clone workflow.

Actions never raise for radio or file failures; they hand back a
CloneResult and the CLI decides how to report it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from baoclone.errors import RadioError
from baoclone.session import RadioSession


@dataclass
class CloneResult:
    """
    What a detect, dump or restore run produced.

    Attributes:
        ok: Whether the workflow completed
        operation: "detect", "dump" or "restore"
        model: Model name found by the handshake
        ident: 8-byte identifier the radio answered with
        attempts: Handshake attempts used
        image_path: Image file written or uploaded
        image_size: Size of that image in bytes
        sha256: Hex digest of the image bytes
        blocks: Blocks transferred
        session: Downloaded memory (dump only)
        warnings: Issues that did not stop the workflow
        error: Failure message, empty on success
        diagnostic: Failure message with address and byte context
        logs: Log lines captured while the workflow ran
    """
    ok: bool
    operation: str
    model: str = ""
    ident: bytes = b""
    attempts: int = 0
    image_path: Optional[Path] = None
    image_size: int = 0
    sha256: str = ""
    blocks: int = 0
    session: Optional[RadioSession] = None
    warnings: List[str] = field(default_factory=list)
    error: str = ""
    diagnostic: str = ""
    logs: List[str] = field(default_factory=list)

    @classmethod
    def failed(cls, operation: str, error: Exception, logs: List[str]) -> "CloneResult":
        if isinstance(error, RadioError):
            diagnostic = error.diagnostic()
        else:
            diagnostic = str(error)
        return cls(ok=False, operation=operation, error=str(error),
                   diagnostic=diagnostic, logs=logs)

    @property
    def device_info(self) -> Dict[str, str]:
        return self.session.device_info() if self.session is not None else {}

    def summary(self) -> str:
        """One line describing the outcome."""
        if not self.ok:
            return f"{self.operation} failed: {self.error}"
        if self.operation == "dump":
            return (f"Clone saved to {self.image_path} "
                    f"({self.image_size:,} bytes, {self.blocks} blocks)")
        if self.operation == "restore":
            return f"Uploaded {self.image_path} to {self.model} ({self.blocks} blocks)"
        return f"Found {self.model} after {self.attempts} attempt(s)"
