"""
Handshake Probe

Puts the radio into clone mode and works out which model is attached by
trying each registered magic sequence in turn.

Protocol per candidate:
    1. Send magic
    2. Receive ACK (0x06)
    3. Send ident query (0x02)
    4. Receive 8-byte identifier
    5. Send ACK (0x06)
    6. Receive ACK (0x06)
"""

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from baoclone.errors import DeviceNotFound, LinkTimeout, ProtocolMismatch
from baoclone.models import ModelConfig, probe_candidates
from baoclone.protocol.link import READ_TIMEOUT

logger = logging.getLogger(__name__)

ACK = b"\x06"

PROBE_ROUNDS = 10
PROBE_DELAY = 0.5


class ProbeState(enum.Enum):
    PROBING = "probing"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class ProbeResult:
    """Outcome of a successful handshake."""
    model: ModelConfig
    ident: bytes
    attempts: int


class HandshakeProbe:
    """
    Identify the radio on a link.

    Each round tries every candidate in order; a delay precedes every
    attempt except the very first. The probe gives up after ``rounds``
    full rounds.

    Example:
        probe = HandshakeProbe(link)
        result = probe.run()
        print(result.model.name, result.ident.hex())
    """

    def __init__(
        self,
        link,
        candidates: Optional[Sequence[Tuple[ModelConfig, bytes]]] = None,
        rounds: int = PROBE_ROUNDS,
        delay: float = PROBE_DELAY,
        timeout: float = READ_TIMEOUT,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Args:
            link: Object with write() and read_with_timeout()
            candidates: (ModelConfig, magic) pairs, registry probe order by default
            rounds: Number of full candidate cycles before giving up
            delay: Seconds to wait before each retry
            timeout: Read window per call in seconds
            sleep: Sleep function (time.sleep when None)
        """
        if candidates is None:
            candidates = probe_candidates()
        self.link = link
        self.candidates: List[Tuple[ModelConfig, bytes]] = list(candidates)
        self.rounds = rounds
        self.delay = delay
        self.timeout = timeout
        self.sleep = sleep if sleep is not None else time.sleep
        self.state = ProbeState.PROBING
        self.attempts = 0

    def _flush(self) -> None:
        flush = getattr(self.link, "flush_input", None)
        if flush is not None:
            flush()

    def _send_magic(self, model: ModelConfig, magic: bytes) -> None:
        chunks = model.magic if b"".join(model.magic) == magic else (magic,)
        for index, chunk in enumerate(chunks):
            if index and model.magic_pause:
                self.sleep(model.magic_pause)
            self.link.write(chunk)

    def _expect_ack(self, what: str) -> None:
        reply = self.link.read_with_timeout(1, self.timeout)
        if not reply:
            raise LinkTimeout(f"No reply to {what}")
        if reply != ACK:
            raise ProtocolMismatch(f"Unexpected reply to {what}", expected=ACK, actual=reply)

    def try_candidate(self, model: ModelConfig, magic: bytes) -> bytes:
        """
        Run the handshake once for one candidate.

        Returns:
            The 8-byte identifier

        Raises:
            LinkTimeout, ProtocolMismatch: If this candidate did not answer
        """
        self._flush()
        logger.debug(f"Sending magic bytes: {magic.hex().upper()}")
        self._send_magic(model, magic)
        self._expect_ack("magic")

        self.link.write(model.ident_query)
        ident = self.link.read_with_timeout(model.ident_len, self.timeout)
        if len(ident) != model.ident_len:
            raise LinkTimeout(
                f"Short identifier ({len(ident)} of {model.ident_len} bytes)", actual=ident
            )

        self.link.write(ACK)
        self._expect_ack("identifier")
        return ident

    def run(self) -> ProbeResult:
        """
        Probe until a candidate confirms or the rounds run out.

        Raises:
            DeviceNotFound: If no candidate answered in any round
        """
        self.state = ProbeState.PROBING
        self.attempts = 0
        for round_no in range(1, self.rounds + 1):
            for model, magic in self.candidates:
                if self.attempts:
                    self.sleep(self.delay)
                self.attempts += 1
                try:
                    ident = self.try_candidate(model, magic)
                except (LinkTimeout, ProtocolMismatch) as e:
                    logger.debug(f"{model.name}: {e}")
                    continue
                self.state = ProbeState.CONFIRMED
                logger.info(
                    f"Detected {model.name}, "
                    f"ident: {ident.hex().upper()}"
                )
                return ProbeResult(model=model, ident=bytes(ident), attempts=self.attempts)
            if round_no < self.rounds:
                logger.warning(f"No answer in round {round_no}/{self.rounds}, retrying...")

        self.state = ProbeState.FAILED
        raise DeviceNotFound(
            f"Radio did not answer after {self.rounds} rounds of "
            f"{len(self.candidates)} candidate(s)"
        )


def probe(link, **kwargs) -> ProbeResult:
    """Shortcut for HandshakeProbe(link, **kwargs).run()."""
    return HandshakeProbe(link, **kwargs).run()
