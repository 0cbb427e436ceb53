"""Shared resample-and-encode primitive.

Both the crop engine and the batch engine end the same way: take a
rectangle of a source image, resample it to an output size, and encode
the result. This module is that shared step, so the lossy interpolation
and its encoder settings live in exactly one place.

Resampling:
    ``Image.resize(size, LANCZOS, box=...)`` reads the source rectangle and
    scales it in a single pass. Sampling the filter support from the full
    source (rather than cropping first) means pixels just outside the
    crop contribute to edge pixels the same way they would in the
    interior, so there is no seam at the crop boundary.

Encoding:
    JPEG has no alpha channel; transparent pixels are composited onto
    white before encoding. PNG ignores quality and is saved with
    ``optimize=True``.
"""

from __future__ import annotations

from io import BytesIO
from typing import Any

from PIL import Image

from cropline.core.types import Encoding, EncodedResult, OutputSpec
from cropline.exceptions import DimensionOverflowError, EncodeError
from cropline.geometry.primitives import PixelRect, Size
from cropline.utils.logging import get_logger

logger = get_logger(__name__)

# Background for flattening transparent pixels into JPEG
_JPEG_BACKGROUND = (255, 255, 255)


def _prepare_for_encoding(image: Image.Image, encoding: Encoding) -> Image.Image:
    """Convert the image to a mode the encoder accepts."""
    if encoding.supports_alpha:
        if image.mode in ("RGB", "RGBA"):
            return image
        return image.convert("RGBA")

    if image.mode == "RGB":
        return image
    if image.mode == "RGBA":
        background = Image.new("RGB", image.size, _JPEG_BACKGROUND)
        background.paste(image, mask=image.getchannel("A"))
        return background
    return image.convert("RGB")


def _save_options(spec: OutputSpec) -> dict[str, Any]:
    if spec.encoding is Encoding.JPEG:
        return {"quality": spec.pil_quality, "optimize": True}
    if spec.encoding is Encoding.WEBP:
        return {"quality": spec.pil_quality, "method": 4}
    return {"optimize": True}


def encode_image(
    image: Image.Image,
    spec: OutputSpec,
    *,
    source_name: str | None = None,
) -> bytes:
    """Encode image with the encoding and quality of spec.

    Args:
        image: Image to encode (RGB or RGBA).
        spec: Output specification.
        source_name: Source file name for error context.

    Returns:
        The encoded bytes. Never empty.

    Raises:
        EncodeError: If Pillow fails to serialize the image.
    """
    prepared = _prepare_for_encoding(image, spec.encoding)
    buffer = BytesIO()
    try:
        prepared.save(buffer, format=spec.encoding.pil_format, **_save_options(spec))
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(
            f"Failed to encode image: {e}",
            encoding=spec.encoding.value,
            source_name=source_name,
        ) from e

    data = buffer.getvalue()
    if not data:
        raise EncodeError(
            "Encoder produced no data",
            encoding=spec.encoding.value,
            source_name=source_name,
        )
    return data


def resample_and_encode(
    image: Image.Image,
    box: PixelRect,
    size: Size,
    spec: OutputSpec,
    *,
    filename: str,
    source_name: str | None = None,
    source_bytes: int | None = None,
) -> EncodedResult:
    """Resample a source rectangle to size and encode it.

    Args:
        image: Source pixels (not modified).
        box: Rectangle of image to read, in source pixels.
        size: Destination size in pixels.
        spec: Encoding and quality.
        filename: Name for the resulting upload file.
        source_name: Source file name for logs and error context.
        source_bytes: Encoded size of the source, for compression logging.

    Returns:
        EncodedResult with the given size.

    Raises:
        DimensionOverflowError: If box is empty or falls outside image.
        EncodeError: If encoding fails.
    """
    if box.is_empty:
        raise DimensionOverflowError(
            "Source rectangle has no pixels",
            size=(box.width, box.height),
            source_name=source_name,
        )
    if box.right > image.width or box.bottom > image.height:
        raise DimensionOverflowError(
            f"Source rectangle {box.to_tuple()} exceeds image {image.size}",
            size=(box.width, box.height),
            source_name=source_name,
        )

    resized = image.resize(
        size.to_tuple(),
        resample=Image.Resampling.LANCZOS,
        box=box.to_box(),
    )
    data = encode_image(resized, spec, source_name=source_name)

    log_kwargs: dict[str, Any] = {
        "source": source_name,
        "width": size.width,
        "height": size.height,
        "encoded_kb": round(len(data) / 1024),
        "mime_type": spec.encoding.value,
    }
    if source_bytes:
        log_kwargs["source_kb"] = round(source_bytes / 1024)
    logger.info("Image compressed", **log_kwargs)

    return EncodedResult(
        buffer=data,
        width=size.width,
        height=size.height,
        mime_type=spec.encoding.value,
        filename=filename,
    )
