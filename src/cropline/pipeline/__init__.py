"""Crop session orchestration for cropline.

Public API:
    - CropSession: decode -> interactive crop -> extract/encode state machine.
    - SessionState: lifecycle states.
"""

from cropline.pipeline.session import CropSession, SessionState

__all__ = ["CropSession", "SessionState"]
