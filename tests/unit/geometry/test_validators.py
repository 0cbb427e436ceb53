"""Tests for cropline.geometry.validators module."""

from __future__ import annotations

import pytest

from cropline.exceptions import CropInvariantError
from cropline.geometry.crop import initial_crop
from cropline.geometry.primitives import CropRect, Size
from cropline.geometry.validators import check_crop_invariants, is_within_bounds


class TestCheckCropInvariants:
    """Tests for check_crop_invariants."""

    def test_valid_rect_passes(self) -> None:
        check_crop_invariants(CropRect(x=10, y=10, width=50, height=50))

    def test_matching_aspect_passes(self) -> None:
        rect = initial_crop(3000, 2000, 16 / 9)
        check_crop_invariants(rect, 16 / 9, Size(width=3000, height=2000))

    def test_wrong_aspect_fails(self) -> None:
        rect = CropRect(x=0, y=0, width=50, height=50)
        with pytest.raises(CropInvariantError, match="pixel aspect"):
            check_crop_invariants(rect, 16 / 9, Size(width=1000, height=1000))

    def test_aspect_tolerance_is_absolute(self) -> None:
        """A 5e-6 miss at aspect 10 fails even though it is only 5e-7 relative."""
        rect = CropRect(x=0, y=0, width=100, height=100 / (10 - 5e-6))
        with pytest.raises(CropInvariantError, match="pixel aspect"):
            check_crop_invariants(rect, 10.0, Size(width=1000, height=1000))

    def test_aspect_within_tolerance_passes(self) -> None:
        rect = CropRect(x=0, y=0, width=100, height=100 / (10 - 5e-7))
        check_crop_invariants(rect, 10.0, Size(width=1000, height=1000))

    def test_aspect_skipped_without_source_size(self) -> None:
        check_crop_invariants(CropRect(x=0, y=0, width=50, height=50), 16 / 9)

    def test_unvalidated_rect_out_of_bounds(self) -> None:
        """Rectangles built without validation are still caught."""
        rect = CropRect.model_construct(x=70.0, y=-1.0, width=50.0, height=20.0)
        with pytest.raises(CropInvariantError) as exc_info:
            check_crop_invariants(rect)
        message = str(exc_info.value)
        assert "negative" in message
        assert "right edge" in message

    def test_is_assertion_error(self) -> None:
        rect = CropRect.model_construct(x=0.0, y=0.0, width=0.0, height=10.0)
        with pytest.raises(AssertionError):
            check_crop_invariants(rect)


class TestIsWithinBounds:
    """Tests for is_within_bounds."""

    def test_true_for_valid(self) -> None:
        assert is_within_bounds(CropRect(x=0, y=0, width=100, height=100))

    def test_false_for_overflow(self) -> None:
        rect = CropRect.model_construct(x=0.0, y=60.0, width=10.0, height=50.0)
        assert not is_within_bounds(rect)
