"""
Unified clone workflows.

Each action opens what it needs, runs to completion or failure, and returns
a CloneResult. A failed download never writes an image file; a failed
precondition never writes a radio block.
"""

import hashlib
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional, Union

from baoclone.errors import RadioError, UnsupportedOperation
from baoclone.image import image_bytes, load_image_file
from baoclone.models import get_model
from baoclone.protocol import BlockTransfer, HandshakeProbe, open_link
from baoclone.session import RadioSession
from .results import CloneResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
LinkFactory = Callable[[str, int], object]


class _ListLogHandler(logging.Handler):
    """Capture log records into a list of formatted strings."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.records = []
        self.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(self.format(record))


@contextmanager
def _capture_logs(logger_name: str = "baoclone"):
    """Capture logs for core operations into a list."""
    target_logger = logging.getLogger(logger_name)
    handler = _ListLogHandler()
    previous_level = target_logger.level
    if previous_level in (logging.NOTSET, logging.WARNING, logging.ERROR, logging.CRITICAL):
        target_logger.setLevel(logging.INFO)
    target_logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        target_logger.removeHandler(handler)
        target_logger.setLevel(previous_level)


def _fail(operation: str, error: Exception, logs) -> CloneResult:
    logger.exception(f"{operation} failed")
    return CloneResult.failed(operation, error, logs)


def _close(link) -> None:
    close = getattr(link, "close", None)
    if close is not None:
        close()


def read_radio(
    link,
    progress_cb: Optional[ProgressCallback] = None,
    probe_kwargs: Optional[dict] = None,
) -> RadioSession:
    """
    Identify the radio on ``link`` and download its memory.

    Raises:
        RadioError: On any handshake or transfer failure
    """
    probed = HandshakeProbe(link, **(probe_kwargs or {})).run()
    session = RadioSession(model=probed.model, ident=probed.ident)
    BlockTransfer(link, probed.model, progress_cb=progress_cb).download(session)
    return session


def detect(
    port: str,
    baud: int = 9600,
    link_factory: LinkFactory = open_link,
    probe_kwargs: Optional[dict] = None,
) -> CloneResult:
    """
    Probe the radio without transferring memory.

    Returns:
        CloneResult with model, ident and attempts filled in
    """
    with _capture_logs() as logs:
        try:
            link = link_factory(port, baud)
            try:
                probed = HandshakeProbe(link, **(probe_kwargs or {})).run()
            finally:
                _close(link)
            return CloneResult(
                ok=True,
                operation="detect",
                model=probed.model.name,
                ident=probed.ident,
                attempts=probed.attempts,
                logs=logs,
            )
        except (RadioError, OSError) as e:
            return _fail("detect", e, logs)


def dump(
    port: str,
    image_path: Union[str, Path],
    baud: int = 9600,
    progress_cb: Optional[ProgressCallback] = None,
    link_factory: LinkFactory = open_link,
    probe_kwargs: Optional[dict] = None,
) -> CloneResult:
    """
    Download the radio memory and save it as an image file.

    The file is written only after the whole download succeeded.

    Returns:
        CloneResult carrying the downloaded session and the image digest
    """
    with _capture_logs() as logs:
        try:
            link = link_factory(port, baud)
            try:
                session = read_radio(link, progress_cb, probe_kwargs)
            finally:
                _close(link)

            data = image_bytes(session)
            Path(image_path).write_bytes(data)
            logger.info(f"Wrote {len(data)} bytes to {image_path}")

            return CloneResult(
                ok=True,
                operation="dump",
                model=session.model.name,
                ident=session.ident,
                image_path=Path(image_path),
                image_size=len(data),
                sha256=hashlib.sha256(data).hexdigest(),
                blocks=session.model.read_blocks(),
                session=session,
                logs=logs,
            )
        except (RadioError, OSError) as e:
            return _fail("dump", e, logs)


def restore(
    port: str,
    image_path: Union[str, Path],
    model_name: Optional[str] = None,
    baud: int = 9600,
    progress_cb: Optional[ProgressCallback] = None,
    link_factory: LinkFactory = open_link,
    probe_kwargs: Optional[dict] = None,
) -> CloneResult:
    """
    Upload an image file to the radio.

    The image model must belong to the same family as the radio found by
    the handshake; otherwise nothing is written.
    """
    with _capture_logs() as logs:
        try:
            model = None
            if model_name:
                model = get_model(model_name)
                if model is None:
                    raise UnsupportedOperation(f"Unknown model '{model_name}'")
            session = load_image_file(image_path, model)

            link = link_factory(port, baud)
            try:
                probed = HandshakeProbe(link, **(probe_kwargs or {})).run()
                if probed.model.family != session.model.family:
                    raise UnsupportedOperation(
                        f"Image is for {session.model.name}, radio is {probed.model.name}"
                    )
                BlockTransfer(link, probed.model, progress_cb=progress_cb).upload(session)
            finally:
                _close(link)

            data = image_bytes(session)
            result = CloneResult(
                ok=True,
                operation="restore",
                model=probed.model.name,
                ident=probed.ident,
                attempts=probed.attempts,
                image_path=Path(image_path),
                image_size=len(data),
                sha256=hashlib.sha256(data).hexdigest(),
                blocks=probed.model.write_blocks(),
                logs=logs,
            )
            if session.ident != probed.ident:
                result.warnings.append(
                    f"Image identifier {session.ident.hex()} differs from "
                    f"radio identifier {probed.ident.hex()}"
                )
            return result
        except (RadioError, OSError) as e:
            return _fail("restore", e, logs)


def open_session(
    target: Union[str, Path],
    model_name: Optional[str] = None,
    baud: int = 9600,
    progress_cb: Optional[ProgressCallback] = None,
    link_factory: LinkFactory = open_link,
    probe_kwargs: Optional[dict] = None,
) -> RadioSession:
    """
    Load a session from an image file, or read it from a radio.

    ``target`` is treated as an image file when it is a regular file,
    otherwise as a serial port.

    Raises:
        RadioError: On load or transfer failure
    """
    path = Path(target)
    if path.is_file():
        model = None
        if model_name:
            model = get_model(model_name)
            if model is None:
                raise UnsupportedOperation(f"Unknown model '{model_name}'")
        return load_image_file(path, model)

    link = link_factory(str(target), baud)
    try:
        return read_radio(link, progress_cb, probe_kwargs)
    finally:
        _close(link)


def configure(port: str, config_path: Union[str, Path]) -> None:
    """Apply a text configuration file; not supported by any model."""
    raise UnsupportedOperation("Configuration files are not supported")
