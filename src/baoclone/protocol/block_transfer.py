"""
Block Transfer Protocol

Framed block reads and writes over a link that has completed the handshake,
plus span-driven download and upload of a whole memory image.

Frames:
    READ REQUEST:  [read tag | addr hi | addr lo | len]
    READ REPLY:    [reply tag | addr hi | addr lo | len | data...]
    READ ACK:      0x06 -->, one ack byte <-- (must be in the model's set)

    WRITE REQUEST: [write tag | addr hi | addr lo | len | data...]
    WRITE ACK:     one byte <-- (must be 0x06)

Every failure is fatal: no block is retried.
"""

import logging
import struct
from typing import Callable, Optional

from baoclone.errors import AckRejected, LinkTimeout, ProtocolMismatch
from baoclone.protocol.link import READ_TIMEOUT

logger = logging.getLogger(__name__)

ACK = b"\x06"

ProgressCallback = Callable[[int, int], None]


class BlockTransfer:
    """
    Block-level clone protocol for one model.

    Example:
        transfer = BlockTransfer(link, get_model("UV-5R"))
        data = transfer.read_block(0x0000, 0x40)
    """

    def __init__(
        self,
        link,
        model,
        timeout: float = READ_TIMEOUT,
        progress_cb: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            link: Object with write() and read_with_timeout()
            model: ModelConfig supplying tags, ack set and spans
            timeout: Read window per call in seconds
            progress_cb: Optional progress callback(blocks_done, blocks_total)
        """
        self.link = link
        self.model = model
        self.timeout = timeout
        self.progress_cb = progress_cb

    def _read_exact(self, length: int, address: int, what: str) -> bytes:
        data = self.link.read_with_timeout(length, self.timeout)
        if len(data) != length:
            raise LinkTimeout(
                f"Timed out waiting for {what} ({len(data)} of {length} bytes)",
                address=address,
                actual=data,
            )
        return data

    def read_block(self, address: int, length: int) -> bytes:
        """
        Read one block of radio memory.

        Args:
            address: 16-bit memory address
            length: Block size in bytes

        Returns:
            Exactly ``length`` bytes

        Raises:
            LinkTimeout: If the reply or data is short
            ProtocolMismatch: If the reply tag, address or length differ
            AckRejected: If the final ack is outside the model's set
        """
        request = self.model.read_tag + struct.pack(">HB", address, length)
        self.link.write(request)

        reply = self._read_exact(4, address, "block reply")
        expected = self.model.reply_tag + struct.pack(">HB", address, length)
        if reply != expected:
            raise ProtocolMismatch(
                f"Bad reply to read at 0x{address:04X}",
                address=address,
                expected=expected,
                actual=reply,
            )

        data = self._read_exact(length, address, "block data")

        self.link.write(ACK)
        ack = self.link.read_with_timeout(1, self.timeout)
        if not ack:
            raise LinkTimeout(f"No ack after read at 0x{address:04X}", address=address)
        if ack[0] not in self.model.read_acks:
            raise AckRejected(
                f"Unexpected ack after read at 0x{address:04X}",
                address=address,
                actual=ack,
            )

        logger.debug(f"Read block at {address:04X}: {len(data)} bytes")
        return data

    def write_block(self, address: int, data: bytes) -> None:
        """
        Write one block of radio memory.

        Raises:
            LinkTimeout: If the radio does not answer
            AckRejected: If the answer is not an ack
        """
        if len(data) > 0xFF:
            raise ValueError(f"Block too large: {len(data)} bytes (max 255)")
        request = self.model.write_tag + struct.pack(">HB", address, len(data)) + bytes(data)
        self.link.write(request)

        ack = self.link.read_with_timeout(1, self.timeout)
        if not ack:
            raise LinkTimeout(f"No ack for write at 0x{address:04X}", address=address)
        if ack[0] not in self.model.write_acks:
            raise AckRejected(
                f"Write rejected at 0x{address:04X}",
                address=address,
                expected=ACK,
                actual=ack,
            )

        logger.debug(f"Write block at {address:04X}: {len(data)} bytes")

    def _report(self, done: int, total: int) -> None:
        if self.progress_cb and (done % self.model.progress_every == 0 or done == total):
            self.progress_cb(done, total)

    def download(self, session) -> None:
        """
        Read every read span of the model into ``session.mem``.

        The buffer is only updated block by block; callers must not save
        the session if this raises.
        """
        total = self.model.read_blocks()
        done = 0
        logger.info(f"Downloading {total} blocks from {self.model.name}")
        for span in self.model.read_spans:
            for address in span.addresses():
                session.mem[address:address + span.block_size] = self.read_block(
                    address, span.block_size
                )
                done += 1
                self._report(done, total)
        logger.info("Download complete")

    def upload(self, session) -> None:
        """
        Write every write span of ``session.mem`` to the radio.

        Models with an upload check run it first, before any block is written.
        """
        if self.model.upload_check is not None:
            self.model.upload_check(session, self)

        total = self.model.write_blocks()
        done = 0
        logger.info(f"Uploading {total} blocks to {self.model.name}")
        for span in self.model.write_spans:
            for address in span.addresses():
                self.write_block(address, session.mem[address:address + span.block_size])
                done += 1
                self._report(done, total)
        logger.info("Upload complete")
