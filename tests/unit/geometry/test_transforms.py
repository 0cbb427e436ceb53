"""Tests for cropline.geometry.transforms module."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cropline.geometry.crop import initial_crop
from cropline.geometry.primitives import CropRect
from cropline.geometry.transforms import crop_to_pixels, round_half_up


class TestRoundHalfUp:
    """Tests for round_half_up."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (-0.5, 0), (-1.5, -1), (7.0, 7)],
    )
    def test_halves_round_up(self, value: float, expected: int) -> None:
        """Unlike round(), 2.5 goes to 3 rather than to the even neighbor."""
        assert round_half_up(value) == expected


class TestCropToPixels:
    """Tests for crop_to_pixels."""

    def test_full_image(self) -> None:
        rect = CropRect(x=0, y=0, width=100, height=100)
        assert crop_to_pixels(rect, 640, 480).to_tuple() == (0, 0, 640, 480)

    def test_landscape_photo_at_16_9(self) -> None:
        """7.8125% of 2000 is 156.25, so the top edge lands on row 156."""
        rect = initial_crop(3000, 2000, 16 / 9)
        assert crop_to_pixels(rect, 3000, 2000).to_tuple() == (0, 156, 3000, 1688)

    def test_size_comes_from_rounded_edges(self) -> None:
        """Edges are rounded independently; the size is their difference."""
        # left edge 0.5px -> 1, right edge 2.5px -> 3
        rect = CropRect(x=5, y=0, width=20, height=100)
        pixels = crop_to_pixels(rect, 10, 10)
        assert (pixels.x, pixels.right) == (1, 3)
        assert pixels.width == 2

    def test_adjacent_crops_share_an_edge(self) -> None:
        left = CropRect(x=0, y=0, width=33.3, height=100)
        right = CropRect(x=33.3, y=0, width=66.7, height=100)
        assert crop_to_pixels(left, 999, 10).right == crop_to_pixels(right, 999, 10).x

    def test_thin_crop_can_be_degenerate(self) -> None:
        rect = CropRect(x=10, y=10, width=0.01, height=50)
        assert crop_to_pixels(rect, 100, 100).is_empty

    @pytest.mark.parametrize(("width", "height"), [(0, 100), (100, 0), (-5, 5)])
    def test_rejects_non_positive_source(self, width: int, height: int) -> None:
        with pytest.raises(ValueError, match="positive"):
            crop_to_pixels(CropRect(x=0, y=0, width=10, height=10), width, height)

    @given(
        x=st.floats(min_value=0, max_value=90),
        y=st.floats(min_value=0, max_value=90),
        width=st.integers(min_value=1, max_value=10_000),
        height=st.integers(min_value=1, max_value=10_000),
    )
    def test_always_inside_source(self, x: float, y: float, width: int, height: int) -> None:
        rect = CropRect(x=x, y=y, width=10, height=10)
        pixels = crop_to_pixels(rect, width, height)
        assert pixels.right <= width
        assert pixels.bottom <= height

    def test_is_deterministic(self) -> None:
        rect = initial_crop(4032, 3024, 4 / 5)
        assert crop_to_pixels(rect, 4032, 3024) == crop_to_pixels(rect, 4032, 3024)
