"""Tests for the pointer stream adapter."""

from __future__ import annotations

import pytest

from cropline.geometry.primitives import CropRect, PercentPoint
from cropline.interaction.pointer import DragController, PointerSample, Viewport


class TestViewport:
    """Tests for Viewport.to_percent."""

    def test_converts_client_coordinates(self) -> None:
        viewport = Viewport(left=100, top=50, width=400, height=200)
        assert viewport.to_percent(300, 100) == PercentPoint(x=50, y=25)

    def test_outside_viewport_is_allowed(self) -> None:
        viewport = Viewport(left=0, top=0, width=100, height=100)
        assert viewport.to_percent(-20, 150) == PercentPoint(x=-20, y=150)

    def test_rejects_zero_area(self) -> None:
        with pytest.raises(ValueError, match="positive size"):
            Viewport(left=0, top=0, width=0, height=100).to_percent(1, 1)


class TestPointerSample:
    """Tests for PointerSample."""

    def test_defaults_to_single_touch(self) -> None:
        sample = PointerSample(10, 20)
        assert sample.is_single
        assert sample.point == PercentPoint(x=10, y=20)

    def test_pinch_is_not_single(self) -> None:
        assert not PointerSample(10, 20, touch_count=2).is_single


class TestDragController:
    """Tests for DragController."""

    @pytest.fixture
    def rect(self) -> CropRect:
        return CropRect(x=0, y=0, width=50, height=50)

    def test_press_move_release(self, rect: CropRect) -> None:
        controller = DragController()
        assert controller.press(PointerSample(10, 10), rect)
        assert controller.is_dragging
        moved = controller.move(PointerSample(30, 20), rect)
        assert moved.to_tuple() == (20.0, 10.0, 50.0, 50.0)
        controller.release()
        assert not controller.is_dragging

    def test_move_without_press_is_ignored(self, rect: CropRect) -> None:
        controller = DragController()
        assert controller.move(PointerSample(30, 20), rect) is rect

    def test_multi_touch_does_not_start_drag(self, rect: CropRect) -> None:
        controller = DragController()
        assert not controller.press(PointerSample(10, 10, touch_count=2), rect)
        assert not controller.is_dragging

    def test_multi_touch_move_is_ignored(self, rect: CropRect) -> None:
        controller = DragController()
        controller.press(PointerSample(10, 10), rect)
        assert controller.move(PointerSample(40, 40, touch_count=2), rect) is rect

    def test_release_without_drag_is_safe(self) -> None:
        DragController().release()
