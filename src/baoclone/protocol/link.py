"""
Serial Link Layer

Byte-oriented duplex channel to a Baofeng radio in clone mode.

This module provides:
- Serial port initialization and configuration (9600 8N1, raw)
- Raw writes
- Bounded-wait reads where a short read is returned, not retried
"""

import time
import logging
from typing import Optional

import serial

from baoclone.errors import LinkError

logger = logging.getLogger(__name__)

# Per-read window; re-armed on every call
READ_TIMEOUT = 0.2


class SerialLink:
    """
    Raw serial transport for clone-mode radios.

    Any object offering ``write(data) -> int`` and
    ``read_with_timeout(max_len, timeout) -> bytes`` can stand in for this
    class; the protocol layers never touch pyserial directly.

    Example:
        with SerialLink("/dev/ttyUSB0") as link:
            link.write(b"\\x02")
            reply = link.read_with_timeout(8)
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 9600,
        timeout: float = READ_TIMEOUT,
    ):
        """
        Initialize link.

        Args:
            port: Serial port (e.g., "/dev/ttyUSB0", "COM3")
            baudrate: Serial baud rate (default 9600)
            timeout: Default read window in seconds (default 0.2)
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.ser: Optional[serial.Serial] = None

    def __enter__(self) -> "SerialLink":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        """
        Open serial port in raw mode without hardware flow control.

        Raises:
            LinkError: If port cannot be opened
        """
        try:
            self.ser = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.timeout,
                write_timeout=self.timeout * 10,
                rtscts=False,
                xonxoff=False,
            )
            self.ser.reset_input_buffer()

            logger.debug(f"Opened {self.port} at {self.baudrate} bps")
        except serial.SerialException as e:
            raise LinkError(f"Cannot open port {self.port}: {e}")

    def close(self, settle: float = 2.0) -> None:
        """
        Close serial port.

        The radio needs a pause after the port closes before it returns to
        normal operation, so ``settle`` seconds are waited.
        """
        if self.ser and self.ser.is_open:
            self.ser.close()
            logger.debug(f"Closed {self.port}")
            if settle:
                time.sleep(settle)

    def _require_open(self) -> serial.Serial:
        if not self.ser or not self.ser.is_open:
            raise LinkError("Serial port not open")
        return self.ser

    def flush_input(self) -> None:
        """Discard any pending received bytes."""
        self._require_open().reset_input_buffer()

    def write(self, data: bytes) -> int:
        """
        Send raw bytes to radio.

        Returns:
            Number of bytes written

        Raises:
            LinkError: If write fails
        """
        ser = self._require_open()
        try:
            written = ser.write(data)
        except serial.SerialException as e:
            raise LinkError(f"Write error: {e}")
        logger.debug(f">>> {data.hex().upper()}")
        return written

    def read_with_timeout(self, max_len: int, timeout: Optional[float] = None) -> bytes:
        """
        Read up to ``max_len`` bytes, waiting at most ``timeout`` seconds.

        A short read is returned as is; callers decide that it is a failure.

        Raises:
            LinkError: If the port reports an error
        """
        ser = self._require_open()
        ser.timeout = self.timeout if timeout is None else timeout
        try:
            data = ser.read(max_len)
        except serial.SerialException as e:
            raise LinkError(f"Read error: {e}")
        if data:
            logger.debug(f"<<< {data.hex().upper()}")
        return data


def open_link(port: str, baudrate: int = 9600) -> SerialLink:
    """
    Open a serial link.

    Returns:
        SerialLink instance (already open)
    """
    link = SerialLink(port, baudrate)
    link.open()
    return link
