"""CLI module for cropline.

Provides the command-line interface for cropping, downscaling,
thumbnailing and previewing crops of local image files.
"""

from __future__ import annotations

from cropline.cli.main import OutputFormat, app

__all__ = ["OutputFormat", "app"]
