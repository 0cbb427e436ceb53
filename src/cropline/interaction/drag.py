"""Interactive crop repositioning.

Turns pointer positions into bounded moves of a crop rectangle's origin.
The functions here are pure and O(1): they run on every pointer-move
event. Only x and y ever change; width and height are copied through, so
the aspect ratio is preserved by construction.

Drag model:
    begin:  anchor = pointer - origin
    update: origin' = clamp(pointer - anchor, 0, 100 - size)  (per axis)
    end:    the session is discarded

Clamping applies to the rectangle, not to the pointer: a pointer that
overshoots the image edge during a fast drag simply pins the rectangle
against that edge.
"""

from __future__ import annotations

from dataclasses import dataclass

from cropline.geometry.primitives import CropRect, PercentPoint
from cropline.geometry.validators import check_crop_invariants


@dataclass(frozen=True)
class DragSession:
    """Ephemeral state of one drag gesture.

    Attributes:
        anchor_offset: Pointer position minus crop origin at drag start, in
            percent. Keeps the grabbed point under the pointer.
    """

    anchor_offset: PercentPoint


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def begin_drag(pointer: PercentPoint, rect: CropRect) -> DragSession:
    """Start a drag gesture at pointer on rect.

    Args:
        pointer: Pointer position in percent of the image.
        rect: Crop rectangle being dragged.

    Returns:
        DragSession holding the anchor offset.
    """
    return DragSession(anchor_offset=pointer - rect.origin)


def update_drag(
    session: DragSession,
    pointer: PercentPoint,
    rect: CropRect,
) -> CropRect:
    """Move rect so the anchored point follows pointer, clamped to the image.

    When the rectangle spans the full width (or height), the clamp range on
    that axis collapses to 0..0 and the rectangle stays pinned at the
    origin.

    Args:
        session: Drag session from begin_drag.
        pointer: Current pointer position in percent; may lie outside 0..100.
        rect: Current crop rectangle.

    Returns:
        New CropRect with x and y replaced; width and height unchanged.

    Raises:
        CropInvariantError: If rect is already out of bounds.
    """
    check_crop_invariants(rect)

    raw_x = pointer.x - session.anchor_offset.x
    raw_y = pointer.y - session.anchor_offset.y

    x = _clamp(raw_x, 0.0, max(0.0, 100.0 - rect.width))
    y = _clamp(raw_y, 0.0, max(0.0, 100.0 - rect.height))

    return rect.with_origin(x, y)


def end_drag(session: DragSession) -> None:
    """End a drag gesture. Has no effect beyond discarding the session."""
    del session
