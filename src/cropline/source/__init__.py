"""Source image acquisition for cropline.

Public API:
    - SourceImage: decoded, exclusively owned raster.
    - decode_source / decode_source_async: bytes -> SourceImage.
    - probe_dimensions: header-only size read.
    - sniff_mime_type: format detection.
"""

from cropline.source.decoder import (
    decode_source,
    decode_source_async,
    probe_dimensions,
    sniff_mime_type,
)
from cropline.source.types import SourceImage

__all__ = [
    "SourceImage",
    "decode_source",
    "decode_source_async",
    "probe_dimensions",
    "sniff_mime_type",
]
