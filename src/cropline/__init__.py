"""cropline: interactive image crop-and-compress pipeline.

Given a source image and a target aspect ratio, cropline places an
initial crop, moves it in response to pointer input while keeping it
inside the image, and extracts, rescales and re-encodes the selected
region into an upload-ready buffer. A batch engine applies the same
rescale/encode step, without cropping, to bulk uploads.
"""

from cropline.core import (
    BatchItem,
    BatchOutcome,
    CropEngine,
    EncodedResult,
    Encoding,
    OutputSpec,
    create_thumbnail,
    downscale_and_encode_batch,
    downscale_and_encode_batch_async,
    extract_and_encode,
    extract_and_encode_async,
)
from cropline.exceptions import (
    CropInvariantError,
    CropPipelineError,
    DimensionOverflowError,
    EncodeError,
    InvalidAspectError,
    SessionCancelledError,
    SessionStateError,
    SourceClosedError,
    SourceDecodeError,
)
from cropline.geometry import CropRect, PercentPoint, initial_crop, reset_crop
from cropline.interaction import (
    DragController,
    DragSession,
    PointerSample,
    begin_drag,
    end_drag,
    update_drag,
)
from cropline.pipeline import CropSession, SessionState
from cropline.source import SourceImage, decode_source, decode_source_async

__version__ = "0.1.0"

__all__ = [
    "BatchItem",
    "BatchOutcome",
    "CropEngine",
    "CropInvariantError",
    "CropPipelineError",
    "CropRect",
    "CropSession",
    "DimensionOverflowError",
    "DragController",
    "DragSession",
    "EncodeError",
    "EncodedResult",
    "Encoding",
    "InvalidAspectError",
    "OutputSpec",
    "PercentPoint",
    "PointerSample",
    "SessionCancelledError",
    "SessionState",
    "SessionStateError",
    "SourceClosedError",
    "SourceDecodeError",
    "SourceImage",
    "__version__",
    "begin_drag",
    "create_thumbnail",
    "decode_source",
    "decode_source_async",
    "downscale_and_encode_batch",
    "downscale_and_encode_batch_async",
    "end_drag",
    "extract_and_encode",
    "extract_and_encode_async",
    "initial_crop",
    "reset_crop",
    "update_drag",
]
