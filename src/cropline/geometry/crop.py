"""Initial crop placement.

Computes the largest centered rectangle of a target aspect ratio that fits
inside a source image, expressed in percent-of-image coordinates.
"""

from __future__ import annotations

from cropline.exceptions import InvalidAspectError
from cropline.geometry.aspect import validate_aspect
from cropline.geometry.primitives import CropRect


def initial_crop(
    source_width: int,
    source_height: int,
    target_aspect: float,
) -> CropRect:
    """Compute the largest centered crop of target_aspect inside the source.

    If the source is wider than the target, height is the limiting
    dimension and the crop spans the full height; otherwise it spans the
    full width.

    Args:
        source_width: Source image width in pixels.
        source_height: Source image height in pixels.
        target_aspect: Required width/height ratio of the crop in pixels.

    Returns:
        Centered CropRect whose pixel aspect equals target_aspect.

    Raises:
        InvalidAspectError: If target_aspect is not positive and finite, or
            the source dimensions are not positive.

    Example:
        >>> initial_crop(2000, 1000, 1.0).to_tuple()
        (25.0, 0.0, 50.0, 100.0)
    """
    target_aspect = validate_aspect(target_aspect)
    if source_width <= 0 or source_height <= 0:
        raise InvalidAspectError(
            "Source dimensions must be positive",
            aspect=(source_width, source_height),
        )

    source_aspect = source_width / source_height

    if source_aspect > target_aspect:
        height = 100.0
        width = 100.0 * target_aspect / source_aspect
    else:
        width = 100.0
        height = 100.0 * source_aspect / target_aspect

    return CropRect(
        x=(100.0 - width) / 2,
        y=(100.0 - height) / 2,
        width=width,
        height=height,
    )


def reset_crop(
    rect: CropRect,
    source_width: int,
    source_height: int,
    target_aspect: float,
) -> CropRect:
    """Reset a crop to its initial centered position.

    The current rectangle is ignored, so applying this twice gives the
    same result as applying it once.
    """
    del rect
    return initial_crop(source_width, source_height, target_aspect)
