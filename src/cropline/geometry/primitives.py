"""Geometry primitives for cropline.

This module provides immutable Pydantic models for the two coordinate
spaces of the crop pipeline:

- Percent space: crop state relative to the source image, 0..100 on both
  axes. Resolution-independent and what the interactive controller moves.
- Pixel space: integer source pixels, produced only at extraction time.

All coordinates follow the convention where (0, 0) is the top-left corner.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator

# Float slack for x + width <= 100 after (100 - width) / 2 + width style sums
PERCENT_EPSILON = 1e-9


class PercentPoint(BaseModel, frozen=True):
    """A 2D point in percent-of-image coordinates.

    Unbounded on purpose: pointer samples from a fast drag can land
    outside the image (below 0 or above 100) and are still valid input.

    Attributes:
        x: Horizontal position (percent of image width from left edge).
        y: Vertical position (percent of image height from top edge).
    """

    x: float
    y: float

    def __sub__(self, other: PercentPoint) -> PercentPoint:
        return PercentPoint(x=self.x - other.x, y=self.y - other.y)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to (x, y) tuple."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, coord: tuple[float, float]) -> Self:
        """Create PercentPoint from (x, y) tuple."""
        return cls(x=coord[0], y=coord[1])


class Size(BaseModel, frozen=True):
    """A 2D size in pixels.

    Both dimensions must be strictly positive (> 0).

    Attributes:
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
    """

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    @property
    def area(self) -> int:
        """Calculate the area in square pixels."""
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Return width/height aspect ratio."""
        return self.width / self.height

    def to_tuple(self) -> tuple[int, int]:
        """Convert to (width, height) tuple."""
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, size: tuple[int, int]) -> Self:
        """Create Size from (width, height) tuple."""
        return cls(width=size[0], height=size[1])


class PixelRect(BaseModel, frozen=True):
    """A rectangular region in source pixel coordinates.

    Defined by top-left corner (x, y) and dimensions (width, height).
    Width and height may be zero here: a degenerate rectangle is a valid
    result of rounding a tiny crop, and is rejected by the extraction
    engine rather than at construction.

    Attributes:
        x: Left edge X coordinate (>= 0).
        y: Top edge Y coordinate (>= 0).
        width: Horizontal extent in pixels (>= 0).
        height: Vertical extent in pixels (>= 0).
    """

    x: int = Field(..., ge=0, description="Left edge X coordinate")
    y: int = Field(..., ge=0, description="Top edge Y coordinate")
    width: int = Field(..., ge=0, description="Width in pixels")
    height: int = Field(..., ge=0, description="Height in pixels")

    @property
    def right(self) -> int:
        """Return the X coordinate of the right edge (exclusive)."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Return the Y coordinate of the bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def to_tuple(self) -> tuple[int, int, int, int]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def to_box(self) -> tuple[int, int, int, int]:
        """Convert to a Pillow (left, upper, right, lower) box."""
        return (self.x, self.y, self.right, self.bottom)


class CropRect(BaseModel, frozen=True):
    """A crop rectangle in percent-of-image coordinates.

    Invariants (checked on construction):
    - 0 <= x, 0 <= y
    - 0 < width <= 100, 0 < height <= 100
    - x + width <= 100, y + height <= 100

    The aspect invariant is relative to the source image, so it cannot be
    checked here; see ``pixel_aspect`` and
    ``cropline.geometry.validators.check_crop_invariants``.

    Attributes:
        x: Left edge, percent of source width.
        y: Top edge, percent of source height.
        width: Horizontal extent, percent of source width.
        height: Vertical extent, percent of source height.
    """

    x: float = Field(..., ge=0, le=100, description="Left edge (percent)")
    y: float = Field(..., ge=0, le=100, description="Top edge (percent)")
    width: float = Field(..., gt=0, le=100, description="Width (percent)")
    height: float = Field(..., gt=0, le=100, description="Height (percent)")

    @model_validator(mode="after")
    def _validate_extent(self) -> Self:
        if self.x + self.width > 100 + PERCENT_EPSILON:
            raise ValueError(
                f"Crop right edge {self.x + self.width} exceeds 100 percent"
            )
        if self.y + self.height > 100 + PERCENT_EPSILON:
            raise ValueError(
                f"Crop bottom edge {self.y + self.height} exceeds 100 percent"
            )
        return self

    @property
    def right(self) -> float:
        """Return the right edge in percent."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Return the bottom edge in percent."""
        return self.y + self.height

    @property
    def origin(self) -> PercentPoint:
        """Return the top-left corner as a PercentPoint."""
        return PercentPoint(x=self.x, y=self.y)

    def pixel_aspect(self, source_width: int, source_height: int) -> float:
        """Return the width/height ratio of this crop in source pixels.

        Args:
            source_width: Source image width in pixels.
            source_height: Source image height in pixels.
        """
        return (self.width * source_width) / (self.height * source_height)

    def with_origin(self, x: float, y: float) -> CropRect:
        """Return a copy moved to (x, y) with the same size.

        The caller is responsible for keeping (x, y) inside the valid range;
        this is the hot path of every pointer move and skips revalidation.
        """
        return self.model_copy(update={"x": x, "y": y})

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_tuple(cls, rect: tuple[float, float, float, float]) -> Self:
        """Create CropRect from (x, y, width, height) tuple."""
        return cls(x=rect[0], y=rect[1], width=rect[2], height=rect[3])
