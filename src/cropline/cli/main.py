"""cropline CLI - crop and compress images from the command line.

Developer tooling around the library: the admin UI drives the same
engines interactively, these commands run them with a fixed position.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from cropline import __version__
from cropline.config import settings
from cropline.core.types import Encoding, OutputSpec
from cropline.exceptions import CropPipelineError
from cropline.geometry.aspect import aspect_label, parse_aspect
from cropline.utils.logging import configure_logging, get_logger

app = typer.Typer(
    name="cropline",
    help="cropline: crop, downscale and compress images for upload",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output encoding."""

    jpeg = "jpeg"
    png = "png"
    webp = "webp"


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose >= 2:  # noqa: PLR2004
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    else:
        level = "WARNING"
    configure_logging(level=level)


def _parse_aspect_option(value: str) -> float:
    try:
        return parse_aspect(value)
    except CropPipelineError as e:
        raise typer.BadParameter(str(e)) from None


def _fail(error: Exception, json_output: bool) -> typer.Exit:
    if json_output:
        typer.echo(json.dumps({"error": str(error)}))
    else:
        typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"cropline {__version__}")


@app.command()
def crop(  # noqa: PLR0913
    source: Annotated[
        Path,
        typer.Argument(
            exists=True, file_okay=True, dir_okay=False, readable=True,
            help="Source image",
        ),
    ],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output file")],
    aspect: Annotated[
        str, typer.Option("--aspect", "-a", help="Target aspect, e.g. 16:9 or 1")
    ] = "16:9",
    x: Annotated[
        float | None, typer.Option("--x", help="Crop left edge, percent of width")
    ] = None,
    y: Annotated[
        float | None, typer.Option("--y", help="Crop top edge, percent of height")
    ] = None,
    max_width: Annotated[
        int | None, typer.Option("--max-width", help="Maximum output width")
    ] = None,
    quality: Annotated[
        float | None, typer.Option("--quality", "-q", min=0.0, max=1.0, help="0..1")
    ] = None,
    output_format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output encoding")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity"),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Crop SOURCE to ASPECT (centered unless --x/--y) and compress it."""
    from cropline.cli.runners import run_crop  # noqa: PLC0415

    _configure_logging(verbose)
    ratio = _parse_aspect_option(aspect)
    base = settings.output_spec("crop")
    spec = OutputSpec(
        max_width=max_width or base.max_width,
        quality=base.quality if quality is None else quality,
        encoding=Encoding.from_name(output_format.value) if output_format else base.encoding,
    )

    try:
        result = run_crop(
            source_path=source, output_path=output, aspect=ratio, spec=spec, x=x, y=y
        )
    except CropPipelineError as e:
        get_logger(__name__).error("Crop failed", error=str(e))
        raise _fail(e, json_output) from None

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "output": str(result.output_path),
                    "width": result.width,
                    "height": result.height,
                    "size_bytes": result.size_bytes,
                    "crop": list(result.crop.to_tuple()),
                },
                indent=2,
            )
        )
    else:
        typer.echo(f"Aspect: {aspect_label(ratio)}")
        typer.echo(f"Wrote {result.output_path} ({result.width}x{result.height})")


@app.command()
def downscale(  # noqa: PLR0913
    sources: Annotated[
        list[Path],
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Images"),
    ],
    output_dir: Annotated[
        Path, typer.Option("--output-dir", "-o", help="Directory for outputs")
    ],
    max_width: Annotated[int | None, typer.Option("--max-width")] = None,
    max_height: Annotated[int | None, typer.Option("--max-height")] = None,
    quality: Annotated[
        float | None, typer.Option("--quality", "-q", min=0.0, max=1.0, help="0..1")
    ] = None,
    output_format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output encoding")
    ] = None,
    concurrency: Annotated[
        int | None, typer.Option("--concurrency", "-c", min=1)
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity"),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Downscale and recompress SOURCES; one failure does not stop the rest."""
    from cropline.cli.runners import run_downscale  # noqa: PLC0415

    _configure_logging(verbose)
    base = settings.output_spec("batch")
    spec = OutputSpec(
        max_width=max_width or base.max_width,
        max_height=max_height or base.max_height,
        quality=base.quality if quality is None else quality,
        encoding=Encoding.from_name(output_format.value) if output_format else base.encoding,
    )

    result = run_downscale(
        source_paths=sources,
        output_dir=output_dir,
        spec=spec,
        concurrency=concurrency,
    )

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "written": [str(p) for p in result.written],
                    "failures": result.failures,
                },
                indent=2,
            )
        )
    else:
        for path in result.written:
            typer.echo(f"Wrote {path}")
        for path_str, error in result.failures.items():
            typer.echo(f"Failed {path_str}: {error}", err=True)

    raise typer.Exit(1 if result.n_errors else 0)


@app.command()
def thumbnail(
    source: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, readable=True)
    ],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output file")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Write a small, more compressed JPEG of SOURCE."""
    from cropline.cli.runners import run_thumbnail  # noqa: PLC0415

    try:
        result = run_thumbnail(source_path=source, output_path=output)
    except CropPipelineError as e:
        raise _fail(e, json_output) from None

    if json_output:
        typer.echo(json.dumps({"output": str(output), "width": result.width,
                               "height": result.height}))
    else:
        typer.echo(f"Wrote {output} ({result.width}x{result.height})")


@app.command()
def preview(
    source: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, readable=True)
    ],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output PNG")],
    aspect: Annotated[str, typer.Option("--aspect", "-a")] = "16:9",
    x: Annotated[float | None, typer.Option("--x")] = None,
    y: Annotated[float | None, typer.Option("--y")] = None,
) -> None:
    """Render the crop overlay (dimmed surround, rule-of-thirds grid)."""
    from cropline.cli.runners import run_preview  # noqa: PLC0415

    ratio = _parse_aspect_option(aspect)
    try:
        rect = run_preview(source_path=source, output_path=output, aspect=ratio, x=x, y=y)
    except CropPipelineError as e:
        raise _fail(e, False) from None

    typer.echo(
        f"Wrote {output} (crop x={rect.x:.2f} y={rect.y:.2f} "
        f"w={rect.width:.2f} h={rect.height:.2f})"
    )


if __name__ == "__main__":
    app()
