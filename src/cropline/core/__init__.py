"""Core raster engines for cropline.

This package contains the extraction engine for interactive crops, the
batch downscale engine, and the resample-and-encode primitive they share.

Public API:
    - CropEngine / extract_and_encode: crop -> resize -> encode.
    - downscale_and_encode_batch: crop-free resize for bulk uploads.
    - resample_and_encode: the shared primitive.
    - OutputSpec, Encoding, EncodedResult: output types.
"""

from cropline.core.batch import (
    BatchItem,
    BatchOutcome,
    compute_downscale_size,
    create_thumbnail,
    downscale_and_encode,
    downscale_and_encode_batch,
    downscale_and_encode_batch_async,
)
from cropline.core.crop_engine import (
    CropEngine,
    compute_crop_output_size,
    extract_and_encode,
    extract_and_encode_async,
)
from cropline.core.raster import encode_image, resample_and_encode
from cropline.core.types import EncodedFile, EncodedResult, Encoding, OutputSpec

__all__ = [
    "BatchItem",
    "BatchOutcome",
    "CropEngine",
    "EncodedFile",
    "EncodedResult",
    "Encoding",
    "OutputSpec",
    "compute_crop_output_size",
    "compute_downscale_size",
    "create_thumbnail",
    "downscale_and_encode",
    "downscale_and_encode_batch",
    "downscale_and_encode_batch_async",
    "encode_image",
    "extract_and_encode",
    "extract_and_encode_async",
    "resample_and_encode",
]
