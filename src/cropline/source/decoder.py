"""Source image decoding using Pillow.

Turns caller-supplied bytes into a SourceImage, wrapping every Pillow
failure in SourceDecodeError so the pipeline can abort before any crop
UI is shown.
"""

from __future__ import annotations

import asyncio
from io import BytesIO

from PIL import Image, ImageOps

from cropline.exceptions import SourceDecodeError
from cropline.geometry.primitives import Size
from cropline.source.types import SourceImage
from cropline.utils.logging import get_logger

logger = get_logger(__name__)

# Pillow raises these (or subclasses) for unreadable, truncated or hostile input
_DECODE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    ValueError,
    SyntaxError,
    Image.DecompressionBombError,
)

# Modes that carry transparency and therefore decode to RGBA
_ALPHA_MODES: frozenset[str] = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


def _check_declared_type(mime_type: str | None, name: str | None) -> None:
    if mime_type is not None and not mime_type.lower().startswith("image/"):
        raise SourceDecodeError(
            "Declared type is not an image",
            source_name=name,
            mime_type=mime_type,
        )


def _normalize_mode(image: Image.Image) -> Image.Image:
    """Convert to RGB, or RGBA when the image carries transparency."""
    if image.mode in ("RGB", "RGBA"):
        return image
    has_alpha = image.mode in _ALPHA_MODES or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def sniff_mime_type(data: bytes) -> str | None:
    """Detect the MIME type of encoded image bytes, or None if unknown."""
    try:
        with Image.open(BytesIO(data)) as image:
            return Image.MIME.get(image.format or "")
    except _DECODE_ERRORS:
        return None


def probe_dimensions(data: bytes, *, name: str | None = None) -> Size:
    """Read image dimensions from the header without decoding pixels.

    Dimensions are as stored; EXIF orientation is not applied.

    Raises:
        SourceDecodeError: If the bytes are not a recognizable image.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            return Size.from_tuple(image.size)
    except _DECODE_ERRORS as e:
        raise SourceDecodeError(
            f"Failed to read image header: {e}", source_name=name
        ) from e


def decode_source(
    data: bytes,
    *,
    mime_type: str | None = None,
    name: str | None = None,
) -> SourceImage:
    """Decode image bytes into a SourceImage.

    The image is fully loaded, rotated to its EXIF orientation (the
    orientation a browser displays), and normalized to RGB or RGBA.

    Args:
        data: Encoded image bytes.
        mime_type: Declared MIME type, if known. Must be an image type.
        name: Original file name, for error context and output naming.

    Returns:
        SourceImage owning the decoded pixels.

    Raises:
        SourceDecodeError: If the declared type is not an image, the bytes
            are empty, or Pillow cannot decode them.
    """
    _check_declared_type(mime_type, name)
    if not data:
        raise SourceDecodeError("Empty image data", source_name=name, mime_type=mime_type)

    try:
        with Image.open(BytesIO(data)) as opened:
            detected = Image.MIME.get(opened.format or "")
            opened.load()
            oriented = ImageOps.exif_transpose(opened)
            image = _normalize_mode(oriented)
            if image is opened:
                # Detach from the context-managed file handle
                image = opened.copy()
    except _DECODE_ERRORS as e:
        logger.warning("Source decode failed", source=name, error=str(e))
        raise SourceDecodeError(
            f"Failed to decode image: {e}",
            source_name=name,
            mime_type=mime_type,
        ) from e

    source = SourceImage(
        image,
        mime_type=detected or mime_type,
        name=name,
        size_bytes=len(data),
    )
    logger.debug(
        "Decoded source",
        source=name,
        width=source.width,
        height=source.height,
        mime_type=source.mime_type,
    )
    return source


async def decode_source_async(
    data: bytes,
    *,
    mime_type: str | None = None,
    name: str | None = None,
) -> SourceImage:
    """Decode on a worker thread so the event loop stays responsive."""
    return await asyncio.to_thread(decode_source, data, mime_type=mime_type, name=name)
