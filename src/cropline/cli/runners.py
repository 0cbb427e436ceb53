"""CLI runners for crop, downscale and preview commands.

This module provides the execution logic for the CLI commands, bridging
the CLI interface to the cropline engines. It reads and writes files;
the engines themselves never touch the filesystem.
"""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from cropline.core.batch import BatchItem, create_thumbnail, downscale_and_encode_batch_async
from cropline.core.crop_engine import extract_and_encode
from cropline.core.types import EncodedResult
from cropline.geometry.crop import initial_crop
from cropline.geometry.overlay import CropOverlayRenderer
from cropline.geometry.primitives import CropRect, PercentPoint
from cropline.interaction.drag import begin_drag, update_drag
from cropline.source.decoder import decode_source
from cropline.utils.logging import get_logger

if TYPE_CHECKING:
    from cropline.core.types import OutputSpec

logger = get_logger(__name__)


@dataclass
class CropRunResult:
    """Result of `cropline crop`."""

    output_path: Path
    crop: CropRect
    width: int
    height: int
    size_bytes: int


@dataclass
class DownscaleRunResult:
    """Result of `cropline downscale`."""

    written: list[Path] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def n_errors(self) -> int:
        return len(self.failures)


def _guess_mime(path: Path) -> str | None:
    return mimetypes.guess_type(path.name)[0]


def _position_crop(rect: CropRect, x: float | None, y: float | None) -> CropRect:
    """Move rect to the requested origin using the drag clamp rules."""
    if x is None and y is None:
        return rect
    session = begin_drag(rect.origin, rect)
    target = PercentPoint(
        x=rect.x if x is None else x,
        y=rect.y if y is None else y,
    )
    return update_drag(session, target, rect)


def _write(result: EncodedResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(result.buffer)
    logger.info("Wrote output", path=str(path), size_bytes=result.size_bytes)
    return path


def run_crop(
    *,
    source_path: Path,
    output_path: Path,
    aspect: float,
    spec: OutputSpec,
    x: float | None = None,
    y: float | None = None,
) -> CropRunResult:
    """Crop one file at the centered (or given) position and write it."""
    data = source_path.read_bytes()
    with decode_source(
        data, mime_type=_guess_mime(source_path), name=source_path.name
    ) as source:
        rect = initial_crop(source.width, source.height, aspect)
        rect = _position_crop(rect, x, y)
        result = extract_and_encode(
            source, rect, spec, target_aspect=aspect, filename=output_path.name
        )

    _write(result, output_path)
    return CropRunResult(
        output_path=output_path,
        crop=rect,
        width=result.width,
        height=result.height,
        size_bytes=result.size_bytes,
    )


def run_downscale(
    *,
    source_paths: list[Path],
    output_dir: Path,
    spec: OutputSpec,
    concurrency: int | None = None,
) -> DownscaleRunResult:
    """Downscale many files concurrently and write the successes."""
    items = [
        BatchItem(data=p.read_bytes(), name=p.name, mime_type=_guess_mime(p))
        for p in source_paths
    ]

    outcomes = asyncio.run(
        downscale_and_encode_batch_async(items, spec, concurrency=concurrency)
    )

    run_result = DownscaleRunResult()
    for path, outcome in zip(source_paths, outcomes, strict=True):
        if outcome.result is not None:
            run_result.written.append(
                _write(outcome.result, output_dir / outcome.result.filename)
            )
        else:
            run_result.failures[str(path)] = str(outcome.error)
    return run_result


def run_thumbnail(*, source_path: Path, output_path: Path) -> EncodedResult:
    """Write a thumbnail of one file."""
    result = create_thumbnail(
        source_path.read_bytes(),
        name=source_path.name,
        mime_type=_guess_mime(source_path),
    )
    _write(result, output_path)
    return result


def run_preview(
    *,
    source_path: Path,
    output_path: Path,
    aspect: float,
    x: float | None = None,
    y: float | None = None,
) -> CropRect:
    """Render the crop overlay for a file and save it as PNG."""
    data = source_path.read_bytes()
    with decode_source(
        data, mime_type=_guess_mime(source_path), name=source_path.name
    ) as source:
        rect = _position_crop(initial_crop(source.width, source.height, aspect), x, y)
        preview = CropOverlayRenderer().render(source.image, rect)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    preview.save(output_path, format="PNG")
    logger.info("Wrote preview", path=str(output_path))
    return rect
