"""Output types for the extraction and batch engines."""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from pydantic import BaseModel, Field

from cropline.geometry.transforms import round_half_up

# Pillow quality bounds (PIL accepts 1-100)
_PIL_QUALITY_MIN = 1
_PIL_QUALITY_MAX = 100


class Encoding(str, Enum):
    """Supported output encodings, keyed by MIME type."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"

    @property
    def pil_format(self) -> str:
        """Pillow format name for Image.save()."""
        return {"image/jpeg": "JPEG", "image/png": "PNG", "image/webp": "WEBP"}[
            self.value
        ]

    @property
    def extension(self) -> str:
        """File extension without the dot."""
        return {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}[
            self.value
        ]

    @property
    def supports_alpha(self) -> bool:
        return self is not Encoding.JPEG

    @property
    def is_lossy(self) -> bool:
        return self is not Encoding.PNG

    @classmethod
    def from_name(cls, name: str) -> Encoding:
        """Resolve "jpeg", "jpg", "png", "webp" or a MIME type.

        Raises:
            ValueError: If the name is not a supported encoding.
        """
        key = name.strip().lower()
        aliases = {"jpg": cls.JPEG, "jpeg": cls.JPEG, "png": cls.PNG, "webp": cls.WEBP}
        if key in aliases:
            return aliases[key]
        return cls(key)


class OutputSpec(BaseModel, frozen=True):
    """Target size and encoding of an output image.

    Attributes:
        max_width: Largest output width in pixels. Output never upscales.
        max_height: Largest output height in pixels. Absent for the crop
            pipeline, where height follows from the target aspect.
        quality: Normalized compression quality, 0..1 (ignored for PNG).
        encoding: Output format.
    """

    max_width: int = Field(..., gt=0, description="Maximum output width")
    max_height: int | None = Field(None, gt=0, description="Maximum output height")
    quality: float = Field(0.92, ge=0.0, le=1.0, description="Quality 0..1")
    encoding: Encoding = Encoding.JPEG

    @property
    def pil_quality(self) -> int:
        """Quality on Pillow's 1..100 scale."""
        scaled = round_half_up(self.quality * 100)
        return max(_PIL_QUALITY_MIN, min(_PIL_QUALITY_MAX, scaled))


class EncodedFile(BytesIO):
    """In-memory file handed to the storage upload.

    Attributes:
        name: File name including extension.
        content_type: MIME type of the content.
    """

    def __init__(self, data: bytes, *, name: str, content_type: str) -> None:
        super().__init__(data)
        self.name = name
        self.content_type = content_type


@dataclass(frozen=True)
class EncodedResult:
    """One encoded output image; ownership transfers to the caller.

    Attributes:
        buffer: Encoded bytes.
        width: Output width in pixels.
        height: Output height in pixels.
        mime_type: MIME type of buffer.
        filename: Suggested upload file name.
    """

    buffer: bytes
    width: int
    height: int
    mime_type: str
    filename: str

    @property
    def size_bytes(self) -> int:
        return len(self.buffer)

    @property
    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def base64_content(self) -> str:
        """Standard Base64 of the buffer (no URL-safe alphabet, no newlines)."""
        return base64.b64encode(self.buffer).decode("ascii")

    @property
    def data_url(self) -> str:
        """Return the buffer as a ``data:`` URL."""
        return f"data:{self.mime_type};base64,{self.base64_content}"

    def as_file(self) -> EncodedFile:
        """Return a fresh file-like wrapper positioned at the start."""
        return EncodedFile(self.buffer, name=self.filename, content_type=self.mime_type)


def crop_filename(encoding: Encoding, *, now: float | None = None) -> str:
    """Name for an interactive crop: ``cropped-<epoch ms>.<ext>``."""
    millis = int((time.time() if now is None else now) * 1000)
    return f"cropped-{millis}.{encoding.extension}"


def batch_filename(
    name: str | None,
    index: int,
    size: tuple[int, int],
    encoding: Encoding,
) -> str:
    """Name for a batch item: ``<stem>-<W>x<H>.<ext>``.

    Falls back to ``image-<index>`` when the source has no name.
    """
    stem = name.rsplit("/", 1)[-1].rsplit(".", 1)[0] if name else ""
    stem = stem or f"image-{index}"
    return f"{stem}-{size[0]}x{size[1]}.{encoding.extension}"
