"""Shared pytest fixtures and configuration."""

from collections.abc import Callable, Iterator
from io import BytesIO

import pytest
from PIL import Image

from cropline.config import Settings
from cropline.utils.logging import clear_correlation_context, configure_logging

ImageBytesFactory = Callable[..., bytes]


def encode_test_image(
    size: tuple[int, int],
    *,
    mode: str = "RGB",
    color: tuple[int, ...] = (200, 120, 40),
    fmt: str = "JPEG",
) -> bytes:
    """Encode a solid-color image of the given size."""
    image = Image.new(mode, size, color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
        BATCH_CONCURRENCY=2,
        _env_file=None,
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def make_image_bytes() -> ImageBytesFactory:
    """Factory for encoded test images."""
    return encode_test_image


@pytest.fixture
def landscape_jpeg() -> bytes:
    """A 3000x2000 JPEG, the size of a typical camera upload."""
    return encode_test_image((3000, 2000))


@pytest.fixture
def square_png() -> bytes:
    """A 500x500 PNG, smaller than every batch bound."""
    return encode_test_image((500, 500), fmt="PNG")


@pytest.fixture
def transparent_png() -> bytes:
    """A 200x100 fully transparent RGBA PNG."""
    return encode_test_image((200, 100), mode="RGBA", color=(0, 0, 0, 0), fmt="PNG")


@pytest.fixture
def corrupt_bytes() -> bytes:
    """Bytes with a JPEG signature and nothing decodable after it."""
    return b"\xff\xd8\xff\xe0" + b"not really a jpeg" * 8
