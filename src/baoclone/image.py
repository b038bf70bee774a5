"""
Image file persistence.

File layout: 8-byte identifier, the model's header pad, then the model's
image segments in order. Segments need not follow memory order (BF-888S
stores 0x02B0-0x02C0 after 0x0370 for compatibility with the vendor
software).
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from baoclone.errors import ImageFormatError
from baoclone.models import ModelConfig, detect_image_model, refine_model
from baoclone.session import RadioSession

logger = logging.getLogger(__name__)


def image_bytes(session: RadioSession) -> bytes:
    """Serialize a session in its model's image file layout."""
    model = session.model
    out = bytearray(bytes(session.ident[:model.ident_len]).ljust(model.ident_len, b"\xff"))
    out += model.header_pad
    for segment in model.image_segments:
        if segment.fill:
            out += segment.fill
        else:
            out += session.mem[segment.start:segment.end]
    return bytes(out)


def save_image(session: RadioSession, fileobj: BinaryIO) -> int:
    """
    Write the session to an open binary file.

    Returns:
        Number of bytes written
    """
    data = image_bytes(session)
    fileobj.write(data)
    logger.info(f"Saved {session.model.name} image ({len(data)} bytes)")
    return len(data)


def parse_image(data: bytes, model: Optional[ModelConfig] = None) -> RadioSession:
    """
    Build a session from image file contents.

    Args:
        data: Whole image file
        model: Force a model; detected from the file size when None

    Raises:
        ImageFormatError: If the size matches no model or the file is short
    """
    detected = model is None
    if model is None:
        model = detect_image_model(len(data))
        if model is None:
            raise ImageFormatError(f"Unrecognized image size: {len(data)} bytes")

    if len(data) < model.image_size:
        raise ImageFormatError(
            f"Image too short for {model.name}: {len(data)} bytes, "
            f"expected {model.image_size}"
        )
    if len(data) > model.image_size:
        logger.warning(
            f"Ignoring {len(data) - model.image_size} trailing bytes in image"
        )

    ident = data[:model.ident_len]
    pos = model.ident_len + len(model.header_pad)
    mem = bytearray(b"\xff" * model.mem_size)
    for segment in model.image_segments:
        if not segment.fill:
            mem[segment.start:segment.end] = data[pos:pos + segment.length]
        pos += segment.length

    if detected:
        model = refine_model(model, mem)
    logger.info(f"Loaded {model.name} image, ident {ident.hex().upper()}")
    return RadioSession(model=model, mem=mem, ident=bytes(ident))


def load_image(fileobj: BinaryIO, model: Optional[ModelConfig] = None) -> RadioSession:
    """Read a session from an open binary file."""
    return parse_image(fileobj.read(), model)


def save_image_file(session: RadioSession, path: Union[str, Path]) -> int:
    with open(path, "wb") as f:
        return save_image(session, f)


def load_image_file(
    path: Union[str, Path],
    model: Optional[ModelConfig] = None,
) -> RadioSession:
    with open(path, "rb") as f:
        return load_image(f, model)
