"""Crop session orchestration.

A CropSession sequences one interactive crop:

    IDLE -> DECODING -> READY <-> DRAGGING
                          READY -> COMMITTING -> DONE
    DECODING -> FAILED, COMMITTING -> FAILED
    DECODING | READY | DRAGGING | COMMITTING | FAILED --cancel--> IDLE

Decode and encode are the only suspension points; both run on worker
threads. Every load and every cancel bumps a generation counter, and an
operation that resumes under a stale generation discards its result
(releasing any pixels it holds) and raises SessionCancelledError, so a
cancelled or superseded session never produces output.

A failed commit keeps the source and crop, so the operator can retry or
reset the crop without picking the file again. A successful commit is
one-shot: the source is released and a new crop needs a new load.
"""

from __future__ import annotations

import asyncio
import uuid
from enum import Enum
from typing import TYPE_CHECKING

from cropline.config import settings
from cropline.core.crop_engine import CropEngine
from cropline.exceptions import (
    CropPipelineError,
    DimensionOverflowError,
    EncodeError,
    SessionCancelledError,
    SessionStateError,
    SourceDecodeError,
)
from cropline.geometry.aspect import aspect_label, parse_aspect
from cropline.geometry.crop import initial_crop, reset_crop
from cropline.geometry.overlay import CropOverlayRenderer
from cropline.interaction.pointer import DragController, PointerSample
from cropline.source.decoder import decode_source_async
from cropline.utils.logging import correlation_context, get_logger

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from numbers import Real

    from PIL import Image

    from cropline.core.types import EncodedResult, OutputSpec
    from cropline.geometry.primitives import CropRect, Size
    from cropline.source.types import SourceImage

logger = get_logger(__name__)


class SessionState(str, Enum):
    """Lifecycle state of a crop session."""

    IDLE = "idle"
    DECODING = "decoding"
    READY = "ready"
    DRAGGING = "dragging"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"


class CropSession:
    """One operator-driven crop of one source file.

    Example:
        >>> session = CropSession("16:9")
        >>> rect = await session.load(data, mime_type="image/jpeg")
        >>> session.press(PointerSample(50, 50))
        >>> session.move(PointerSample(40, 55))
        >>> session.release()
        >>> result = await session.commit()
    """

    def __init__(
        self,
        target_aspect: Real | str,
        spec: OutputSpec | None = None,
        *,
        engine: CropEngine | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize an idle session.

        Args:
            target_aspect: Crop aspect ratio, as a number or "16:9" style string.
            spec: Output spec. Defaults to the "crop" preset from settings.
            engine: Extraction engine. Defaults to CropEngine().
            session_id: Correlation id for logs. Generated if not given.

        Raises:
            InvalidAspectError: If target_aspect is not a positive ratio.
        """
        self._aspect = parse_aspect(target_aspect)
        self._spec = spec or settings.output_spec("crop")
        self._engine = engine or CropEngine()
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self._state = SessionState.IDLE
        self._generation = 0
        self._source: SourceImage | None = None
        self._crop: CropRect | None = None
        self._drag = DragController()
        self._last_error: CropPipelineError | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def target_aspect(self) -> float:
        return self._aspect

    @property
    def aspect_label(self) -> str:
        return aspect_label(self._aspect)

    @property
    def spec(self) -> OutputSpec:
        return self._spec

    @property
    def crop(self) -> CropRect | None:
        """Current crop rectangle, or None when no source is loaded."""
        return self._crop

    @property
    def source_size(self) -> Size | None:
        return self._source.size if self._source is not None else None

    @property
    def last_error(self) -> CropPipelineError | None:
        """Error that moved the session to FAILED, if any."""
        return self._last_error

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _set_state(self, new_state: SessionState) -> None:
        logger.debug(
            "Session transition",
            from_state=self._state.value,
            to_state=new_state.value,
        )
        self._state = new_state

    def _log_context(self) -> AbstractContextManager[None]:
        return correlation_context(
            session_id=self.session_id, generation=self._generation
        )

    def _require(self, *allowed: SessionState, action: str) -> None:
        if self._state not in allowed:
            expected = ", ".join(s.value for s in allowed)
            raise SessionStateError(
                f"Cannot {action} in state {self._state.value} (expected {expected})",
                state=self._state.value,
            )

    def _require_source(self) -> tuple[SourceImage, CropRect]:
        if self._source is None or self._crop is None:
            raise SessionStateError(
                "No source image loaded", state=self._state.value
            )
        return self._source, self._crop

    def _release_source(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None

    async def load(
        self,
        data: bytes,
        *,
        mime_type: str | None = None,
        name: str | None = None,
    ) -> CropRect:
        """Decode a new source file and place the initial crop.

        Replaces any source currently loaded. A load that is still decoding
        when another load or a cancel happens is discarded.

        Returns:
            The initial, centered CropRect.

        Raises:
            SourceDecodeError: If data is not a decodable image (state FAILED).
            SessionCancelledError: If superseded while decoding.
            SessionStateError: If a commit is in progress.
        """
        if self._state is SessionState.COMMITTING:
            raise SessionStateError(
                "Cannot load while a commit is in progress; cancel first",
                state=self._state.value,
            )

        self._drag.release()
        self._release_source()
        self._crop = None
        self._last_error = None
        self._generation += 1
        with self._log_context():
            self._set_state(SessionState.DECODING)
            logger.info("Loading source", source=name, mime_type=mime_type)
            return await self._decode(data, mime_type=mime_type, name=name)

    async def _decode(
        self, data: bytes, *, mime_type: str | None, name: str | None
    ) -> CropRect:
        generation = self._generation
        try:
            source = await decode_source_async(data, mime_type=mime_type, name=name)
        except SourceDecodeError as e:
            if generation != self._generation:
                raise SessionCancelledError(
                    "Decode superseded", generation=generation
                ) from e
            self._last_error = e
            self._set_state(SessionState.FAILED)
            raise
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(SessionState.IDLE)
            raise

        if generation != self._generation:
            source.close()
            logger.info("Discarded stale decode", stale_generation=generation)
            raise SessionCancelledError("Decode superseded", generation=generation)

        self._source = source
        self._crop = initial_crop(source.width, source.height, self._aspect)
        self._set_state(SessionState.READY)
        return self._crop

    def press(self, sample: PointerSample) -> bool:
        """Start dragging the crop. Returns False if the sample was ignored."""
        self._require(SessionState.READY, action="start a drag")
        _, crop = self._require_source()
        if not self._drag.press(sample, crop):
            return False
        self._set_state(SessionState.DRAGGING)
        return True

    def move(self, sample: PointerSample) -> CropRect:
        """Apply a pointer move; ignored unless a drag is active."""
        self._require(SessionState.READY, SessionState.DRAGGING, action="move")
        _, crop = self._require_source()
        if self._state is SessionState.DRAGGING:
            crop = self._drag.move(sample, crop)
            self._crop = crop
        return crop

    def release(self) -> None:
        """End the current drag, if any."""
        if self._state is SessionState.DRAGGING:
            self._drag.release()
            self._set_state(SessionState.READY)

    def reset(self) -> CropRect:
        """Move the crop back to its initial centered position.

        Also recovers a session whose commit failed (state FAILED with the
        source still loaded) back to READY.
        """
        self._require(SessionState.READY, SessionState.FAILED, action="reset")
        source, crop = self._require_source()
        self._crop = reset_crop(crop, source.width, source.height, self._aspect)
        self._last_error = None
        if self._state is SessionState.FAILED:
            self._set_state(SessionState.READY)
        return self._crop

    async def commit(self, *, filename: str | None = None) -> EncodedResult:
        """Extract, resize and encode the current crop.

        Returns:
            The EncodedResult; the session is DONE and its source released.

        Raises:
            DimensionOverflowError: Degenerate or oversized crop (state FAILED,
                source kept).
            EncodeError: Encoding failed (state FAILED, source kept).
            SessionCancelledError: If cancelled or superseded while encoding.
            SessionStateError: If not READY (or FAILED with a source).
        """
        self._require(SessionState.READY, SessionState.FAILED, action="commit")
        source, crop = self._require_source()
        with self._log_context():
            self._set_state(SessionState.COMMITTING)
            return await self._encode(source, crop, filename=filename)

    async def _encode(
        self, source: SourceImage, crop: CropRect, *, filename: str | None
    ) -> EncodedResult:
        generation = self._generation
        try:
            result = await self._engine.extract_async(
                source,
                crop,
                self._spec,
                target_aspect=self._aspect,
                filename=filename,
            )
        except (EncodeError, DimensionOverflowError) as e:
            if generation != self._generation:
                source.close()
                raise SessionCancelledError(
                    "Commit superseded", generation=generation
                ) from e
            self._last_error = e
            self._set_state(SessionState.FAILED)
            logger.warning("Commit failed", error=str(e))
            raise
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(SessionState.READY)
            else:
                source.close()
            raise

        if generation != self._generation:
            source.close()
            logger.info("Discarded stale commit", stale_generation=generation)
            raise SessionCancelledError("Commit superseded", generation=generation)

        self._release_source()
        self._crop = None
        self._last_error = None
        self._set_state(SessionState.DONE)
        logger.info(
            "Crop committed",
            width=result.width,
            height=result.height,
            size_bytes=result.size_bytes,
        )
        return result

    def cancel(self) -> None:
        """Abandon the session without producing output.

        In-flight decode or encode results are discarded when they resume.

        Raises:
            SessionStateError: If the session already committed.
        """
        if self._state is SessionState.IDLE:
            return
        self._require(
            SessionState.DECODING,
            SessionState.READY,
            SessionState.DRAGGING,
            SessionState.COMMITTING,
            SessionState.FAILED,
            action="cancel",
        )

        self._generation += 1
        self._drag.release()
        if self._state is SessionState.COMMITTING:
            # The commit coroutine still reads these pixels; it releases them
            self._source = None
        else:
            self._release_source()
        self._crop = None
        self._last_error = None
        with self._log_context():
            self._set_state(SessionState.IDLE)
            logger.info("Session cancelled")

    def render_preview(self, renderer: CropOverlayRenderer | None = None) -> Image.Image:
        """Render the source with the current crop overlay.

        Raises:
            SessionStateError: If no source is loaded.
        """
        source, crop = self._require_source()
        return (renderer or CropOverlayRenderer()).render(source.image, crop)
