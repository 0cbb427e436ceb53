"""Crop preview overlay generation for cropline.

Renders what the operator sees while positioning a crop: the source image
dimmed outside the crop rectangle, a border with corner handles around
it, and a rule-of-thirds grid inside it. Used for previews and debugging;
the extraction engine never draws an overlay into its output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from cropline.geometry.transforms import crop_to_pixels

if TYPE_CHECKING:
    from cropline.geometry.primitives import CropRect, PixelRect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlayStyle:
    """Configuration for the crop preview styling.

    Attributes:
        mask_color: RGBA color laid over the area outside the crop.
        border_color: RGBA color of the crop border.
        border_width: Width of the crop border in pixels.
        grid_color: RGBA color of the rule-of-thirds lines.
        grid_width: Width of the grid lines in pixels.
        handle_radius: Radius of the corner handles in pixels (0 disables).
        grid_divisions: Cells per side of the grid (3 = rule of thirds).
    """

    mask_color: tuple[int, int, int, int] = (0, 0, 0, 153)  # 60% black
    border_color: tuple[int, int, int, int] = (255, 255, 255, 255)
    border_width: int = 2
    grid_color: tuple[int, int, int, int] = (255, 255, 255, 77)  # 30% white
    grid_width: int = 1
    handle_radius: int = 6
    grid_divisions: int = 3


class CropOverlayRenderer:
    """Draws crop preview overlays onto source images."""

    def __init__(self, style: OverlayStyle | None = None) -> None:
        """Initialize the renderer with optional custom styling.

        Args:
            style: Visual styling configuration. Uses defaults if not provided.
        """
        self.style = style or OverlayStyle()

    def generate(self, image_size: tuple[int, int], rect: CropRect) -> Image.Image:
        """Generate a transparent RGBA overlay for a crop.

        Args:
            image_size: (width, height) of the image the overlay covers.
            rect: Crop rectangle in percent of that image.

        Returns:
            RGBA image of the given size.

        Raises:
            ValueError: If image_size contains non-positive values.
        """
        if image_size[0] <= 0 or image_size[1] <= 0:
            raise ValueError(f"image_size must be positive, got {image_size}")

        width, height = image_size
        box = crop_to_pixels(rect, width, height)

        overlay = Image.new("RGBA", image_size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)

        self._draw_mask(draw, box, image_size)
        if not box.is_empty:
            self._draw_grid(draw, box)
            draw.rectangle(
                [box.x, box.y, box.right - 1, box.bottom - 1],
                outline=self.style.border_color,
                width=self.style.border_width,
            )
            self._draw_handles(draw, box)

        return overlay

    def render(self, image: Image.Image, rect: CropRect) -> Image.Image:
        """Composite the crop overlay onto an image.

        Args:
            image: Source image (any mode).
            rect: Crop rectangle in percent of the image.

        Returns:
            RGB image with the overlay applied.
        """
        overlay = self.generate(image.size, rect)
        base = image if image.mode == "RGBA" else image.convert("RGBA")
        composited = Image.alpha_composite(base, overlay)
        logger.debug("Rendered crop overlay size=%s rect=%s", image.size, rect)
        return composited.convert("RGB")

    def _draw_mask(
        self,
        draw: ImageDraw.ImageDraw,
        box: PixelRect,
        image_size: tuple[int, int],
    ) -> None:
        """Fill the four bands around the crop with the mask color."""
        width, height = image_size
        bands = [
            (0, 0, width, box.y),  # above
            (0, box.bottom, width, height),  # below
            (0, box.y, box.x, box.bottom),  # left
            (box.right, box.y, width, box.bottom),  # right
        ]
        for left, top, right, bottom in bands:
            if right > left and bottom > top:
                draw.rectangle(
                    [left, top, right - 1, bottom - 1], fill=self.style.mask_color
                )

    def _draw_grid(self, draw: ImageDraw.ImageDraw, box: PixelRect) -> None:
        divisions = self.style.grid_divisions
        for i in range(1, divisions):
            x = box.x + round(box.width * i / divisions)
            y = box.y + round(box.height * i / divisions)
            draw.line(
                [(x, box.y), (x, box.bottom - 1)],
                fill=self.style.grid_color,
                width=self.style.grid_width,
            )
            draw.line(
                [(box.x, y), (box.right - 1, y)],
                fill=self.style.grid_color,
                width=self.style.grid_width,
            )

    def _draw_handles(self, draw: ImageDraw.ImageDraw, box: PixelRect) -> None:
        r = self.style.handle_radius
        if r <= 0:
            return
        corners = [
            (box.x, box.y),
            (box.right - 1, box.y),
            (box.x, box.bottom - 1),
            (box.right - 1, box.bottom - 1),
        ]
        for cx, cy in corners:
            draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=self.style.border_color)
