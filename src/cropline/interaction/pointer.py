"""Pointer stream adapter for crop dragging.

Bridges raw mouse/touch events to the pure drag functions: converts
on-screen coordinates to percent of the image, and keeps the one piece of
state a gesture needs (the current DragSession).
"""

from __future__ import annotations

from typing import NamedTuple

from cropline.geometry.primitives import CropRect, PercentPoint
from cropline.interaction.drag import (
    DragSession,
    begin_drag,
    end_drag,
    update_drag,
)


class Viewport(NamedTuple):
    """On-screen box the source image is rendered into.

    Attributes:
        left: Left edge in client coordinates.
        top: Top edge in client coordinates.
        width: Rendered width in client units (> 0).
        height: Rendered height in client units (> 0).
    """

    left: float
    top: float
    width: float
    height: float

    def to_percent(self, client_x: float, client_y: float) -> PercentPoint:
        """Convert a client-space pointer position to percent of the image.

        Raises:
            ValueError: If the viewport has no area.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Viewport must have positive size, got {self.width}x{self.height}"
            )
        return PercentPoint(
            x=(client_x - self.left) / self.width * 100.0,
            y=(client_y - self.top) / self.height * 100.0,
        )


class PointerSample(NamedTuple):
    """One pointer event in percent of the image.

    Attributes:
        x: Horizontal position (percent).
        y: Vertical position (percent).
        touch_count: Active touch points; 1 for a mouse.
    """

    x: float
    y: float
    touch_count: int = 1

    @property
    def point(self) -> PercentPoint:
        return PercentPoint(x=self.x, y=self.y)

    @property
    def is_single(self) -> bool:
        return self.touch_count == 1


class DragController:
    """Applies a stream of pointer samples to a crop rectangle.

    Samples must be fed in arrival order. Moves received while no drag is
    active are ignored, and multi-touch samples (pinch gestures) neither
    start nor advance a drag.

    Example:
        >>> rect = CropRect(x=0, y=0, width=50, height=50)
        >>> controller = DragController()
        >>> controller.press(PointerSample(10, 10), rect)
        True
        >>> controller.move(PointerSample(30, 20), rect).to_tuple()
        (20.0, 10.0, 50.0, 50.0)
    """

    __slots__ = ("_session",)

    def __init__(self) -> None:
        self._session: DragSession | None = None

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    def press(self, sample: PointerSample, rect: CropRect) -> bool:
        """Start a drag. Returns False if the sample was ignored."""
        if not sample.is_single:
            return False
        self._session = begin_drag(sample.point, rect)
        return True

    def move(self, sample: PointerSample, rect: CropRect) -> CropRect:
        """Advance the drag, returning the (possibly unchanged) rectangle."""
        if self._session is None or not sample.is_single:
            return rect
        return update_drag(self._session, sample.point, rect)

    def release(self) -> None:
        """End the drag, if any."""
        if self._session is not None:
            end_drag(self._session)
            self._session = None
