"""Geometry module for cropline.

This package provides the crop-rectangle model in percent-of-image space,
the initial placement algorithm, the single percent-to-pixel conversion,
invariant checks, and the preview overlay.

Key Components:
    - Primitives: CropRect, PercentPoint, PixelRect, Size models
    - Crop: initial_crop / reset_crop placement
    - Aspect: target aspect parsing and operator labels
    - Transforms: percent -> pixel conversion (round-half-up edges)
    - Validators: bounds and aspect invariant checks
    - Overlay: dimmed preview with rule-of-thirds grid

Example:
    from cropline.geometry import crop_to_pixels, initial_crop

    rect = initial_crop(3000, 2000, 16 / 9)   # full width, centered
    box = crop_to_pixels(rect, 3000, 2000)    # PixelRect in source pixels
"""

from cropline.geometry.aspect import aspect_label, parse_aspect, validate_aspect
from cropline.geometry.crop import initial_crop, reset_crop
from cropline.geometry.overlay import CropOverlayRenderer, OverlayStyle
from cropline.geometry.primitives import CropRect, PercentPoint, PixelRect, Size
from cropline.geometry.transforms import crop_to_pixels, round_half_up
from cropline.geometry.validators import (
    ASPECT_TOLERANCE,
    check_crop_invariants,
    is_within_bounds,
)

__all__ = [
    "ASPECT_TOLERANCE",
    "CropOverlayRenderer",
    "CropRect",
    "OverlayStyle",
    "PercentPoint",
    "PixelRect",
    "Size",
    "aspect_label",
    "check_crop_invariants",
    "crop_to_pixels",
    "initial_crop",
    "is_within_bounds",
    "parse_aspect",
    "reset_crop",
    "round_half_up",
    "validate_aspect",
]
