"""Decoded source image container."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cropline.exceptions import SourceClosedError
from cropline.geometry.primitives import Size

if TYPE_CHECKING:
    from types import TracebackType

    from PIL import Image


class SourceImage:
    """An immutable decoded raster, owned by exactly one pipeline run.

    Wraps a fully loaded Pillow image in RGB or RGBA mode. The pixel buffer
    is never mutated; engines read from it and allocate their own
    destination buffers. ``close()`` releases it, after which any pixel
    access raises SourceClosedError.

    Usage:
        with decode_source(data) as source:
            result = extract_and_encode(source, rect, spec)

    Attributes:
        width: Width in pixels (>= 1).
        height: Height in pixels (>= 1).
        mime_type: Detected MIME type of the input bytes.
        name: Original file name, if known.
        size_bytes: Size of the encoded input.
    """

    __slots__ = ("_image", "height", "mime_type", "name", "size_bytes", "width")

    def __init__(
        self,
        image: Image.Image,
        *,
        mime_type: str | None = None,
        name: str | None = None,
        size_bytes: int = 0,
    ) -> None:
        self._image: Image.Image | None = image
        self.width, self.height = image.size
        self.mime_type = mime_type
        self.name = name
        self.size_bytes = size_bytes

    @property
    def size(self) -> Size:
        """Return dimensions as a Size."""
        return Size(width=self.width, height=self.height)

    @property
    def aspect_ratio(self) -> float:
        """Return width/height aspect ratio."""
        return self.width / self.height

    @property
    def closed(self) -> bool:
        return self._image is None

    @property
    def image(self) -> Image.Image:
        """Return the decoded pixels.

        Raises:
            SourceClosedError: If the source has been released.
        """
        if self._image is None:
            raise SourceClosedError("Source image is closed", source_name=self.name)
        return self._image

    def close(self) -> None:
        """Release the pixel buffer. Safe to call more than once."""
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self) -> SourceImage:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"SourceImage({self.width}x{self.height}, mime_type={self.mime_type!r}, "
            f"name={self.name!r}, {state})"
        )
