"""Percent-to-pixel conversion for cropline.

Crop state lives in percent space; pixel coordinates are computed only
at extraction time, and only here, so that rounding is centralized.

Rounding Rule:
    Round-half-up (``floor(v + 0.5)``) applied to the rectangle's *edges*,
    not to its size. The pixel width is ``right_edge - left_edge``, so two
    crops that share an edge in percent space share it in pixel space too,
    and repeated conversion of the same rectangle is deterministic.
"""

from __future__ import annotations

import math

from cropline.geometry.primitives import CropRect, PixelRect


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity.

    Unlike the built-in ``round`` (banker's rounding), 0.5 -> 1, 1.5 -> 2,
    2.5 -> 3.
    """
    return math.floor(value + 0.5)


def _edge(percent: float, extent: int) -> int:
    return max(0, min(extent, round_half_up(percent / 100.0 * extent)))


def crop_to_pixels(
    rect: CropRect,
    source_width: int,
    source_height: int,
) -> PixelRect:
    """Convert a percent-space crop to source pixel coordinates.

    Args:
        rect: Crop rectangle in percent of the source.
        source_width: Source image width in pixels.
        source_height: Source image height in pixels.

    Returns:
        PixelRect inside [0, source_width] x [0, source_height]. Its width
        or height can be 0 for a crop thinner than half a pixel.

    Raises:
        ValueError: If source dimensions are not positive.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(
            f"Source dimensions must be positive, got {source_width}x{source_height}"
        )

    left = _edge(rect.x, source_width)
    top = _edge(rect.y, source_height)
    right = max(left, _edge(rect.right, source_width))
    bottom = max(top, _edge(rect.bottom, source_height))

    return PixelRect(x=left, y=top, width=right - left, height=bottom - top)
