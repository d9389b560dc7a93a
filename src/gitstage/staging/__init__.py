"""Line selection, partial patch synthesis, and the diff session."""

from gitstage.staging.patch import PatchDirection, patch_has_hunks, synthesize_patch
from gitstage.staging.selection import Selection
from gitstage.staging.session import DiffSession, StagingError

__all__ = [
    "DiffSession",
    "PatchDirection",
    "Selection",
    "StagingError",
    "patch_has_hunks",
    "synthesize_patch",
]
