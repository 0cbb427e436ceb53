"""Batch downscale-and-recompress for bulk uploads.

Sibling of the crop engine without a crop step: every image in a batch is
scaled to fit inside (max_width, max_height), preserving its aspect ratio
and never upscaling, then re-encoded with the shared resample-and-encode
primitive.

Items are independent. A decode or encode failure is captured in that
item's BatchOutcome and the rest of the batch carries on; outcomes are
always returned in input order, one per input.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from cropline.config import settings
from cropline.core.raster import resample_and_encode
from cropline.core.types import EncodedResult, OutputSpec, batch_filename
from cropline.exceptions import CropPipelineError
from cropline.geometry.primitives import PixelRect, Size
from cropline.geometry.transforms import round_half_up
from cropline.source.decoder import decode_source
from cropline.source.types import SourceImage
from cropline.utils.logging import correlation_context, get_logger

logger = get_logger(__name__)


class BatchItem(NamedTuple):
    """One encoded input of a batch.

    Attributes:
        data: Encoded image bytes.
        name: Original file name, if known.
        mime_type: Declared MIME type, if known.
    """

    data: bytes
    name: str | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class BatchOutcome:
    """Result of one batch item: exactly one of result and error is set.

    Attributes:
        index: Position of the item in the input sequence.
        name: Original file name of the item, if known.
        result: Encoded output on success.
        error: Typed failure otherwise.
    """

    index: int
    name: str | None
    result: EncodedResult | None = None
    error: CropPipelineError | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("BatchOutcome needs exactly one of result or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> EncodedResult:
        """Return the result, or raise the captured error."""
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


def compute_downscale_size(source_size: Size, max_width: int, max_height: int) -> Size:
    """Scale source_size to fit inside max_width x max_height.

    The scale factor is capped at 1, so images already inside the box keep
    their size.

    Example:
        >>> compute_downscale_size(Size(width=4000, height=3000), 1200, 1200).to_tuple()
        (1200, 900)
        >>> compute_downscale_size(Size(width=500, height=500), 1200, 1200).to_tuple()
        (500, 500)
    """
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Bounds must be positive, got {max_width}x{max_height}")

    scale = min(1.0, max_width / source_size.width, max_height / source_size.height)
    return Size(
        width=max(1, round_half_up(source_size.width * scale)),
        height=max(1, round_half_up(source_size.height * scale)),
    )


def _require_max_height(spec: OutputSpec) -> int:
    if spec.max_height is None:
        raise ValueError("Batch downscale requires OutputSpec.max_height")
    return spec.max_height


def downscale_and_encode(
    source: SourceImage,
    spec: OutputSpec,
    *,
    index: int = 0,
    filename: str | None = None,
) -> EncodedResult:
    """Downscale and re-encode a whole source image.

    Args:
        source: Decoded source image.
        spec: Output spec; max_height is required.
        index: Position in a batch, used for the fallback file name.
        filename: Upload file name. Defaults to <stem>-<W>x<H>.<ext>.

    Raises:
        ValueError: If spec.max_height is missing.
        EncodeError: If encoding fails.
    """
    max_height = _require_max_height(spec)
    out_size = compute_downscale_size(source.size, spec.max_width, max_height)
    full = PixelRect(x=0, y=0, width=source.width, height=source.height)

    return resample_and_encode(
        source.image,
        full,
        out_size,
        spec,
        filename=filename
        or batch_filename(source.name, index, out_size.to_tuple(), spec.encoding),
        source_name=source.name,
        source_bytes=source.size_bytes,
    )


def _as_item(item: BatchItem | bytes) -> BatchItem:
    return item if isinstance(item, BatchItem) else BatchItem(data=item)


def _process_item(index: int, item: BatchItem, spec: OutputSpec) -> BatchOutcome:
    with correlation_context(item_index=index):
        try:
            with decode_source(
                item.data, mime_type=item.mime_type, name=item.name
            ) as source:
                result = downscale_and_encode(source, spec, index=index)
        except CropPipelineError as e:
            logger.warning("Batch item failed", name=item.name, error=str(e))
            return BatchOutcome(index=index, name=item.name, error=e)
    return BatchOutcome(index=index, name=item.name, result=result)


def _log_summary(outcomes: Sequence[BatchOutcome]) -> None:
    failed = sum(1 for o in outcomes if not o.ok)
    logger.info(
        "Batch complete",
        total=len(outcomes),
        succeeded=len(outcomes) - failed,
        failed=failed,
    )


def downscale_and_encode_batch(
    items: Sequence[BatchItem | bytes],
    spec: OutputSpec,
) -> list[BatchOutcome]:
    """Downscale and re-encode every item, sequentially.

    Args:
        items: Encoded inputs (BatchItem or raw bytes).
        spec: Output spec shared by all items; max_height is required.

    Returns:
        One BatchOutcome per input, in input order.

    Raises:
        ValueError: If spec.max_height is missing.
    """
    _require_max_height(spec)
    outcomes = [
        _process_item(index, _as_item(item), spec) for index, item in enumerate(items)
    ]
    _log_summary(outcomes)
    return outcomes


async def downscale_and_encode_batch_async(
    items: Sequence[BatchItem | bytes],
    spec: OutputSpec,
    *,
    concurrency: int | None = None,
) -> list[BatchOutcome]:
    """Downscale and re-encode items concurrently on worker threads.

    Items share no state, so they need no locking; the semaphore only
    bounds how many decoded images are held in memory at once.

    Args:
        items: Encoded inputs (BatchItem or raw bytes).
        spec: Output spec shared by all items; max_height is required.
        concurrency: Maximum items in flight. Defaults to
            settings.BATCH_CONCURRENCY.

    Returns:
        One BatchOutcome per input, in input order.
    """
    _require_max_height(spec)
    limit = concurrency if concurrency is not None else settings.BATCH_CONCURRENCY
    if limit < 1:
        raise ValueError(f"concurrency must be >= 1, got {limit}")
    semaphore = asyncio.Semaphore(limit)

    async def run_one(index: int, item: BatchItem) -> BatchOutcome:
        async with semaphore:
            return await asyncio.to_thread(_process_item, index, item, spec)

    outcomes = await asyncio.gather(
        *(run_one(index, _as_item(item)) for index, item in enumerate(items))
    )
    _log_summary(outcomes)
    return list(outcomes)


def create_thumbnail(
    data: bytes,
    *,
    name: str | None = None,
    mime_type: str | None = None,
) -> EncodedResult:
    """Create a small, more compressed JPEG version of an image.

    Uses the "thumbnail" preset (400x400 box, quality 0.7 by default).

    Raises:
        SourceDecodeError: If data cannot be decoded.
        EncodeError: If encoding fails.
    """
    spec = settings.output_spec("thumbnail")
    with decode_source(data, mime_type=mime_type, name=name) as source:
        return downscale_and_encode(source, spec)
