"""Unit tests for CropEngine extraction and compression.

Tests CropEngine including:
- Output size math (width cap, no upscaling, exact target aspect)
- End-to-end extraction of a centered crop
- Determinism of encoded output
- Degenerate and oversized geometry
"""

from __future__ import annotations

from io import BytesIO

import pytest
from hypothesis import given
from hypothesis import strategies as st
from PIL import Image

from cropline.core.crop_engine import (
    CropEngine,
    compute_crop_output_size,
    extract_and_encode,
    extract_and_encode_async,
)
from cropline.core.types import Encoding, OutputSpec
from cropline.exceptions import (
    DimensionOverflowError,
    InvalidAspectError,
    SourceClosedError,
)
from cropline.geometry.crop import initial_crop
from cropline.geometry.primitives import CropRect, PixelRect
from cropline.source.decoder import decode_source
from cropline.source.types import SourceImage


def _source(size: tuple[int, int], name: str = "src.jpg") -> SourceImage:
    return SourceImage(Image.new("RGB", size, (90, 140, 200)), name=name, size_bytes=1024)


class TestComputeCropOutputSize:
    """Tests for compute_crop_output_size."""

    def test_caps_width(self) -> None:
        size = compute_crop_output_size(
            PixelRect(x=0, y=156, width=3000, height=1688), 1920, 16 / 9
        )
        assert size.to_tuple() == (1920, 1080)

    def test_never_upscales(self) -> None:
        size = compute_crop_output_size(PixelRect(x=0, y=0, width=800, height=800), 1920, 1.0)
        assert size.to_tuple() == (800, 800)

    def test_height_follows_target_not_rounded_rect(self) -> None:
        """A 1-pixel rounding error in the rect does not leak into the output."""
        size = compute_crop_output_size(PixelRect(x=0, y=0, width=1000, height=563), 1920, 16 / 9)
        assert size.to_tuple() == (1000, 563)
        size = compute_crop_output_size(PixelRect(x=0, y=0, width=1000, height=560), 1920, 16 / 9)
        assert size.height == 563

    def test_rejects_empty_rect(self) -> None:
        with pytest.raises(DimensionOverflowError, match="degenerate"):
            compute_crop_output_size(PixelRect(x=0, y=0, width=0, height=10), 100, 1.0)

    def test_rejects_zero_height(self) -> None:
        with pytest.raises(DimensionOverflowError, match="rounds to zero"):
            compute_crop_output_size(PixelRect(x=0, y=0, width=1, height=1), 100, 10.0)

    def test_rejects_oversized_output(self) -> None:
        with pytest.raises(DimensionOverflowError, match="maximum dimension") as exc_info:
            compute_crop_output_size(
                PixelRect(x=0, y=0, width=500, height=5000),
                1920,
                0.1,
                max_dimension=4000,
                source_name="tall.png",
            )
        assert exc_info.value.size == (500, 5000)
        assert exc_info.value.source_name == "tall.png"

    def test_zero_max_dimension_disables_check(self) -> None:
        size = compute_crop_output_size(
            PixelRect(x=0, y=0, width=500, height=5000), 1920, 0.1, max_dimension=0
        )
        assert size.height == 5000

    @given(
        px_w=st.integers(min_value=1, max_value=20_000),
        max_width=st.integers(min_value=1, max_value=4000),
        aspect=st.floats(min_value=0.05, max_value=1.0),
    )
    def test_width_bound(self, px_w: int, max_width: int, aspect: float) -> None:
        size = compute_crop_output_size(
            PixelRect(x=0, y=0, width=px_w, height=1), max_width, aspect
        )
        assert size.width == min(max_width, px_w)
        assert size.height >= 1


class TestCropEngine:
    """Tests for CropEngine.extract."""

    @pytest.fixture
    def spec(self) -> OutputSpec:
        return OutputSpec(max_width=1920, quality=0.92)

    def test_landscape_photo_to_1920x1080(self, landscape_jpeg: bytes, spec: OutputSpec) -> None:
        """3000x2000 at 16:9 with max width 1920 encodes a 1920x1080 JPEG."""
        with decode_source(landscape_jpeg, name="hero.jpg") as source:
            rect = initial_crop(source.width, source.height, 16 / 9)
            result = CropEngine().extract(source, rect, spec, target_aspect=16 / 9)

        assert result.dimensions == (1920, 1080)
        assert result.mime_type == "image/jpeg"
        assert result.buffer[:2] == b"\xff\xd8"
        assert Image.open(BytesIO(result.buffer)).size == (1920, 1080)
        assert result.filename.startswith("cropped-")
        assert result.filename.endswith(".jpg")

    def test_default_aspect_is_crop_pixel_aspect(self, spec: OutputSpec) -> None:
        source = _source((2000, 1000))
        result = CropEngine().extract(source, initial_crop(2000, 1000, 1.0), spec)
        assert result.dimensions == (1000, 1000)

    def test_is_deterministic(self, spec: OutputSpec) -> None:
        source = _source((1200, 900))
        rect = initial_crop(1200, 900, 4 / 5)
        first = extract_and_encode(source, rect, spec, filename="a.jpg")
        second = extract_and_encode(source, rect, spec, filename="a.jpg")
        assert first.buffer == second.buffer

    def test_png_output(self) -> None:
        source = _source((100, 100))
        spec = OutputSpec(max_width=50, encoding=Encoding.PNG)
        result = extract_and_encode(source, initial_crop(100, 100, 1.0), spec)
        assert result.mime_type == "image/png"
        assert result.filename.endswith(".png")

    def test_explicit_filename(self, spec: OutputSpec) -> None:
        source = _source((100, 100))
        result = extract_and_encode(
            source, initial_crop(100, 100, 1.0), spec, filename="cover.jpg"
        )
        assert result.filename == "cover.jpg"

    def test_degenerate_crop(self, spec: OutputSpec) -> None:
        source = _source((100, 100))
        rect = CropRect(x=50, y=50, width=0.1, height=0.1)
        with pytest.raises(DimensionOverflowError) as exc_info:
            CropEngine().extract(source, rect, spec, target_aspect=1.0)
        assert exc_info.value.source_name == "src.jpg"

    def test_output_limit(self) -> None:
        source = _source((400, 4000))
        rect = CropRect(x=0, y=0, width=100, height=100)
        with pytest.raises(DimensionOverflowError):
            CropEngine(max_output_dimension=1000).extract(
                source, rect, OutputSpec(max_width=1920)
            )

    def test_invalid_target_aspect(self, spec: OutputSpec) -> None:
        source = _source((100, 100))
        with pytest.raises(InvalidAspectError):
            CropEngine().extract(
                source, CropRect(x=0, y=0, width=100, height=100), spec, target_aspect=0.0
            )

    def test_closed_source(self, spec: OutputSpec) -> None:
        source = _source((100, 100))
        source.close()
        with pytest.raises(SourceClosedError):
            CropEngine().extract(source, CropRect(x=0, y=0, width=100, height=100), spec)

    @pytest.mark.asyncio
    async def test_async_matches_sync(self, spec: OutputSpec) -> None:
        source = _source((640, 480))
        rect = initial_crop(640, 480, 16 / 9)
        expected = extract_and_encode(source, rect, spec, filename="x.jpg")
        result = await extract_and_encode_async(source, rect, spec, filename="x.jpg")
        assert result == expected
