"""Shared fixtures: a scripted in-memory link and a radio simulator."""

import pytest

from baoclone.models import get_model

ACK = b"\x06"
DEFAULT_IDENT = b"\xAA\x30\x76\x04\x00\x05\x20\xDD"


class FakeLink:
    """
    In-memory link with the SerialLink read/write interface.

    Every write is recorded; an optional responder turns each write into
    bytes queued for later reads. Bytes can also be queued up front with
    feed().
    """

    def __init__(self, responder=None):
        self.responder = responder
        self.written = []
        self.rx = bytearray()
        self.flushes = 0
        self.closed = False

    def feed(self, data: bytes) -> None:
        self.rx += data

    def write(self, data) -> int:
        data = bytes(data)
        self.written.append(data)
        if self.responder is not None:
            reply = self.responder(data)
            if reply:
                self.rx += reply
        return len(data)

    def read_with_timeout(self, max_len: int, timeout=None) -> bytes:
        chunk = bytes(self.rx[:max_len])
        del self.rx[:max_len]
        return chunk

    def flush_input(self) -> None:
        self.flushes += 1
        self.rx.clear()

    def close(self) -> None:
        self.closed = True


class RadioSim:
    """
    Radio side of the clone protocol for one model.

    Args:
        model: ModelConfig to emulate
        mem: Initial radio memory (0xFF filled when None)
        ident: Identifier returned to the ident query
        ignore_magic: Number of correct magics to ignore before answering
    """

    def __init__(self, model, mem=None, ident=DEFAULT_IDENT, ignore_magic=0):
        self.model = model
        self.mem = bytearray(mem) if mem is not None else bytearray(b"\xff" * model.mem_size)
        self.ident = ident
        self.ignore_magic = ignore_magic
        self.magic_seen = 0
        self.state = "idle"
        self.pending = b""
        self.reads = 0
        self.writes = 0
        self.read_ack = bytes([sorted(model.read_acks)[-1]])

    def _idle(self, data: bytes) -> bytes:
        self.state = "idle"
        self.pending = (self.pending + data)[-32:]
        if self.pending.endswith(self.model.magic_bytes):
            self.pending = b""
            self.magic_seen += 1
            if self.magic_seen > self.ignore_magic:
                self.state = "magic"
                return ACK
        return b""

    def __call__(self, data: bytes) -> bytes:
        if self.state == "magic" and data == self.model.ident_query:
            self.state = "ident"
            return self.ident
        if self.state == "ident" and data == ACK:
            self.state = "clone"
            return ACK
        if self.state == "clone":
            return self._clone(data)
        return self._idle(data)

    def _clone(self, data: bytes) -> bytes:
        tag = data[:1]
        if tag == self.model.read_tag and len(data) == 4:
            addr = int.from_bytes(data[1:3], "big")
            length = data[3]
            self.reads += 1
            return self.model.reply_tag + data[1:4] + bytes(self.mem[addr:addr + length])
        if data == ACK:
            return self.read_ack
        if tag == self.model.write_tag and len(data) > 4:
            addr = int.from_bytes(data[1:3], "big")
            length = data[3]
            self.mem[addr:addr + length] = data[4:4 + length]
            self.writes += 1
            return ACK
        return b""


@pytest.fixture
def no_sleep(monkeypatch):
    """Replace time.sleep with a recorder so probes run instantly."""
    calls = []
    monkeypatch.setattr("time.sleep", lambda seconds: calls.append(seconds))
    return calls


@pytest.fixture
def uv5r():
    return get_model("UV-5R")


@pytest.fixture
def uv5r_orig():
    return get_model("UV-5R-ORIG")


@pytest.fixture
def uvb5():
    return get_model("UV-B5")


@pytest.fixture
def bf888s():
    return get_model("BF-888S")
