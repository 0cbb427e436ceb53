"""Crop extraction and compression pipeline for cropline.

This module converts a committed crop into an upload-ready image:

1. Converts the percent-space CropRect to source pixels (round-half-up
   edges, see cropline.geometry.transforms).
2. Computes the output size: width is min(max_width, crop pixel width),
   height is width / target_aspect. Never upscales, and the output aspect
   follows the target exactly rather than the rounded pixel rectangle.
3. Resamples the crop into a fresh buffer with LANCZOS.
4. Encodes at the OutputSpec quality (JPEG by default).
5. Wraps the bytes with their dimensions and MIME type.

Degenerate or oversized geometry is rejected before any buffer is
allocated. Extraction is deterministic: the same source, rectangle and
OutputSpec produce byte-identical output.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from cropline.config import settings
from cropline.core.raster import resample_and_encode
from cropline.core.types import EncodedResult, OutputSpec, crop_filename
from cropline.exceptions import DimensionOverflowError
from cropline.geometry.aspect import validate_aspect
from cropline.geometry.primitives import PixelRect, Size
from cropline.geometry.transforms import crop_to_pixels, round_half_up

if TYPE_CHECKING:
    from cropline.geometry.primitives import CropRect
    from cropline.source.types import SourceImage


def compute_crop_output_size(
    pixel_rect: PixelRect,
    max_width: int,
    target_aspect: float,
    *,
    max_dimension: int | None = None,
    source_name: str | None = None,
) -> Size:
    """Compute the output size of a crop.

    Args:
        pixel_rect: Crop rectangle in source pixels.
        max_width: Largest allowed output width.
        target_aspect: Required output width/height ratio.
        max_dimension: Largest allowed output side; None or <= 0 disables
            the check.
        source_name: Source file name for error context.

    Returns:
        Output Size with width <= min(max_width, pixel_rect.width).

    Raises:
        DimensionOverflowError: If the crop has no pixels, the derived
            height rounds to zero, or a side exceeds max_dimension.
    """
    if pixel_rect.is_empty:
        raise DimensionOverflowError(
            "Crop rectangle is degenerate at source resolution",
            size=(pixel_rect.width, pixel_rect.height),
            source_name=source_name,
        )

    out_width = min(max_width, pixel_rect.width)
    out_height = round_half_up(out_width / target_aspect)

    if out_height < 1:
        raise DimensionOverflowError(
            "Output height rounds to zero",
            size=(out_width, out_height),
            source_name=source_name,
        )
    if max_dimension is not None and max_dimension > 0:
        if max(out_width, out_height) > max_dimension:
            raise DimensionOverflowError(
                f"Output exceeds maximum dimension {max_dimension}px",
                size=(out_width, out_height),
                source_name=source_name,
            )

    return Size(width=out_width, height=out_height)


class CropEngine:
    """Extracts, resizes and encodes committed crops.

    Example:
        >>> with decode_source(data, name="hero.jpg") as source:
        ...     rect = initial_crop(source.width, source.height, 16 / 9)
        ...     result = CropEngine().extract(source, rect, OutputSpec(max_width=1920))
        ...     # result.buffer ready for upload
    """

    __slots__ = ("_max_output_dimension",)

    def __init__(self, max_output_dimension: int | None = None) -> None:
        """Initialize the crop engine.

        Args:
            max_output_dimension: Largest output side in pixels. Defaults to
                settings.MAX_OUTPUT_DIMENSION; 0 disables the check.
        """
        self._max_output_dimension = (
            settings.MAX_OUTPUT_DIMENSION
            if max_output_dimension is None
            else max_output_dimension
        )

    def extract(
        self,
        source: SourceImage,
        rect: CropRect,
        spec: OutputSpec,
        *,
        target_aspect: float | None = None,
        filename: str | None = None,
    ) -> EncodedResult:
        """Extract rect from source and encode it per spec.

        Args:
            source: Decoded source image.
            rect: Committed crop rectangle in percent.
            spec: Output specification; max_height is ignored.
            target_aspect: Output aspect. Defaults to the crop's unrounded
                pixel aspect, which equals the session's target aspect.
            filename: Upload file name. Defaults to cropped-<epoch ms>.<ext>.

        Returns:
            EncodedResult of the crop.

        Raises:
            InvalidAspectError: If target_aspect is not positive and finite.
            DimensionOverflowError: If the crop is degenerate or too large.
            EncodeError: If encoding fails.
            SourceClosedError: If source has been released.
        """
        image = source.image
        aspect = (
            rect.pixel_aspect(source.width, source.height)
            if target_aspect is None
            else target_aspect
        )
        aspect = validate_aspect(aspect)

        pixel_rect = crop_to_pixels(rect, source.width, source.height)
        out_size = compute_crop_output_size(
            pixel_rect,
            spec.max_width,
            aspect,
            max_dimension=self._max_output_dimension,
            source_name=source.name,
        )

        return resample_and_encode(
            image,
            pixel_rect,
            out_size,
            spec,
            filename=filename or crop_filename(spec.encoding),
            source_name=source.name,
            source_bytes=source.size_bytes,
        )

    async def extract_async(
        self,
        source: SourceImage,
        rect: CropRect,
        spec: OutputSpec,
        *,
        target_aspect: float | None = None,
        filename: str | None = None,
    ) -> EncodedResult:
        """Run extract() on a worker thread."""
        return await asyncio.to_thread(
            self.extract,
            source,
            rect,
            spec,
            target_aspect=target_aspect,
            filename=filename,
        )


def extract_and_encode(
    source: SourceImage,
    rect: CropRect,
    spec: OutputSpec,
    *,
    target_aspect: float | None = None,
    filename: str | None = None,
) -> EncodedResult:
    """Extract and encode a crop with a default CropEngine."""
    return CropEngine().extract(
        source, rect, spec, target_aspect=target_aspect, filename=filename
    )


async def extract_and_encode_async(
    source: SourceImage,
    rect: CropRect,
    spec: OutputSpec,
    *,
    target_aspect: float | None = None,
    filename: str | None = None,
) -> EncodedResult:
    """Async variant of extract_and_encode; encoding runs off the event loop."""
    return await CropEngine().extract_async(
        source, rect, spec, target_aspect=target_aspect, filename=filename
    )
