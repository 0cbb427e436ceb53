"""Custom exceptions for the crop pipeline.

These exceptions give each failure of the crop-and-compress pipeline a
typed, context-rich surface, wrapping low-level Pillow errors with
meaningful messages. Callers decide recovery per error kind:

- InvalidAspectError: programmer error, fail fast.
- SourceDecodeError: ask the operator for a different file.
- DimensionOverflowError: reset the crop rectangle.
- EncodeError: retry the whole commit.
"""

from __future__ import annotations

from typing import Any


class CropPipelineError(Exception):
    """Base exception for all crop pipeline errors."""

    def __init__(self, message: str, *, source_name: str | None = None) -> None:
        """Initialize pipeline error with optional source context.

        Args:
            message: Human-readable error description.
            source_name: Name of the source file that caused the error.
        """
        self.message = message
        self.source_name = source_name
        super().__init__(self._format_message())

    def _context(self) -> dict[str, Any]:
        return {"source": self.source_name}

    def _format_message(self) -> str:
        """Format error message with any available context."""
        parts = [f"{key}={value}" for key, value in self._context().items() if value]
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class InvalidAspectError(CropPipelineError, ValueError):
    """Raised when a target aspect ratio is zero, negative or not finite.

    This is a caller contract violation and is raised before any
    geometry is computed.
    """

    def __init__(self, message: str, *, aspect: object = None) -> None:
        self.aspect = aspect
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        return {"aspect": self.aspect}


class SourceDecodeError(CropPipelineError):
    """Raised when the input bytes are not a decodable image.

    This error is raised when:
    - The declared MIME type is not an image type
    - Pillow cannot identify the format
    - The file is truncated or corrupted
    - Pillow refuses the image as a decompression bomb
    """

    def __init__(
        self,
        message: str,
        *,
        source_name: str | None = None,
        mime_type: str | None = None,
    ) -> None:
        self.mime_type = mime_type
        super().__init__(message, source_name=source_name)

    def _context(self) -> dict[str, Any]:
        return {"source": self.source_name, "mime_type": self.mime_type}


class DimensionOverflowError(CropPipelineError):
    """Raised when a computed pixel size is zero or exceeds the output limit.

    Detected before any destination buffer is allocated.
    """

    def __init__(
        self,
        message: str,
        *,
        size: tuple[int, int] | None = None,
        source_name: str | None = None,
    ) -> None:
        self.size = size
        super().__init__(message, source_name=source_name)

    def _context(self) -> dict[str, Any]:
        return {"source": self.source_name, "size": self.size}


class EncodeError(CropPipelineError):
    """Raised when a pixel buffer cannot be serialized.

    Terminal for the commit that raised it; never retried automatically.
    """

    def __init__(
        self,
        message: str,
        *,
        encoding: str | None = None,
        source_name: str | None = None,
    ) -> None:
        self.encoding = encoding
        super().__init__(message, source_name=source_name)

    def _context(self) -> dict[str, Any]:
        return {"source": self.source_name, "encoding": self.encoding}


class SourceClosedError(CropPipelineError):
    """Raised when a released SourceImage is used again."""


class SessionStateError(CropPipelineError):
    """Raised when a crop session is asked for an illegal transition."""

    def __init__(self, message: str, *, state: str | None = None) -> None:
        self.state = state
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        return {"state": self.state}


class SessionCancelledError(CropPipelineError):
    """Raised when a pending decode or encode result is discarded.

    Happens when the session was cancelled, or a newer load started,
    while the operation was suspended.
    """

    def __init__(self, message: str, *, generation: int | None = None) -> None:
        self.generation = generation
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        return {"generation": self.generation}


class CropInvariantError(AssertionError):
    """Raised when a crop rectangle violates its bounds or aspect invariants.

    Signals a bug upstream of the caller (the rectangle should never have
    been produced), so it is an AssertionError rather than a recoverable
    pipeline error.
    """
