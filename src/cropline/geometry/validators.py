"""Crop invariant checks for cropline.

The interactive controller only ever moves a rectangle; it never repairs
one. A rectangle that reaches it out of bounds, or with the wrong aspect,
was produced by a bug upstream, so these checks raise instead of
clamping.
"""

from __future__ import annotations

from cropline.exceptions import CropInvariantError
from cropline.geometry.primitives import PERCENT_EPSILON, CropRect, Size

ASPECT_TOLERANCE = 1e-6


def check_crop_invariants(
    rect: CropRect,
    target_aspect: float | None = None,
    source_size: Size | None = None,
) -> None:
    """Check that a crop rectangle satisfies the bounds and aspect invariants.

    Checks that:
    1. 0 <= x and 0 <= y
    2. 0 < width <= 100 and 0 < height <= 100
    3. x + width <= 100 and y + height <= 100
    4. If target_aspect and source_size are given, the pixel aspect of the
       rectangle equals target_aspect within ASPECT_TOLERANCE (absolute).

    CropRect's own validation covers 1-3 on construction; this re-checks
    them for rectangles built with ``model_construct`` or ``model_copy``.

    Raises:
        CropInvariantError: On the first violated invariant.
    """
    violations: list[str] = []
    if rect.x < 0 or rect.y < 0:
        violations.append(f"origin ({rect.x}, {rect.y}) is negative")
    if not 0 < rect.width <= 100 or not 0 < rect.height <= 100:
        violations.append(f"size ({rect.width}, {rect.height}) outside (0, 100]")
    if rect.right > 100 + PERCENT_EPSILON:
        violations.append(f"right edge ({rect.right}) exceeds 100")
    if rect.bottom > 100 + PERCENT_EPSILON:
        violations.append(f"bottom edge ({rect.bottom}) exceeds 100")

    if target_aspect is not None and source_size is not None:
        actual = rect.pixel_aspect(source_size.width, source_size.height)
        if abs(actual - target_aspect) > ASPECT_TOLERANCE:
            violations.append(
                f"pixel aspect {actual:.9f} != target aspect {target_aspect:.9f}"
            )

    if violations:
        raise CropInvariantError(
            f"Crop invariant violated: {'; '.join(violations)} "
            f"(rect={rect.to_tuple()})"
        )


def is_within_bounds(rect: CropRect) -> bool:
    """Check the bounds invariants without raising."""
    try:
        check_crop_invariants(rect)
    except CropInvariantError:
        return False
    return True
