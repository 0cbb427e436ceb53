"""Interactive crop repositioning for cropline.

Public API:
    - begin_drag / update_drag / end_drag: pure drag functions.
    - DragSession: anchor offset captured at drag start.
    - DragController: stateful adapter for mouse/touch event streams.
    - PointerSample, Viewport: pointer input types.
"""

from cropline.interaction.drag import DragSession, begin_drag, end_drag, update_drag
from cropline.interaction.pointer import DragController, PointerSample, Viewport

__all__ = [
    "DragController",
    "DragSession",
    "PointerSample",
    "Viewport",
    "begin_drag",
    "end_drag",
    "update_drag",
]
