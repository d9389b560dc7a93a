"""Partial patch synthesis — rebuild a smaller diff from selected lines.

``git apply`` checks that each hunk's declared counts match the lines that
follow it, so the counts are recomputed from the filtered lines rather than
copied from the source hunk header. Unselected lines are either turned into
context or dropped depending on the direction, which keeps them in their
current staged state:

=========  =========  ======================  ======================
kind       selected   stage                   unstage
=========  =========  ======================  ======================
context    -          context                 context
addition   yes        addition                addition
addition   no         dropped                 context
removal    yes        removal                 removal
removal    no         context                 dropped
=========  =========  ======================  ======================

The unstage patch is applied with ``--reverse``.
"""

from __future__ import annotations

from enum import Enum
from typing import Container, List, Optional, Tuple

from gitstage.git.diff_parser import parse_hunk_header
from gitstage.git.models import DiffHunk, DiffLineKind, FileDiff


class PatchDirection(str, Enum):
    STAGE = "stage"
    UNSTAGE = "unstage"


def _file_header(path: str) -> str:
    return f"diff --git a/{path} b/{path}\n--- a/{path}\n+++ b/{path}\n"


def _rebuild_hunk(
    hunk: DiffHunk,
    selected: Container[int],
    direction: PatchDirection,
) -> Optional[str]:
    """Return the rebuilt hunk text, or None if it contributes nothing."""
    body = hunk.body
    if not any(line.is_change and line.id in selected for line in body):
        return None

    staging = direction == PatchDirection.STAGE
    out: List[Tuple[str, str]] = []
    old_count = new_count = 0

    for line in body:
        is_selected = line.id in selected

        if line.kind == DiffLineKind.CONTEXT:
            out.append((" ", line.content))
            old_count += 1
            new_count += 1
        elif line.kind == DiffLineKind.ADDITION:
            if is_selected:
                out.append(("+", line.content))
                new_count += 1
            elif not staging:
                out.append((" ", line.content))
                old_count += 1
                new_count += 1
        elif line.kind == DiffLineKind.REMOVAL:
            if is_selected:
                out.append(("-", line.content))
                old_count += 1
            elif staging:
                out.append((" ", line.content))
                old_count += 1
                new_count += 1

    if not out:
        return None

    old_start, new_start = parse_hunk_header(hunk.header)
    parts = [f"@@ -{old_start},{old_count} +{new_start},{new_count} @@\n"]
    parts.extend(f"{marker}{content}\n" for marker, content in out)
    return "".join(parts)


def synthesize_patch(
    diff: FileDiff,
    selected: Container[int],
    direction: PatchDirection,
    path: str,
) -> str:
    """Build a patch for *path* that only changes the *selected* line ids.

    With nothing selected the result is the three file header lines and no
    hunk; see :func:`patch_has_hunks`.
    """
    hunks = (_rebuild_hunk(h, selected, direction) for h in diff.hunks)
    return _file_header(path) + "".join(h for h in hunks if h is not None)


def patch_has_hunks(patch: str) -> bool:
    """True if *patch* carries at least one hunk and is worth applying."""
    return any(line.startswith("@@") for line in patch.split("\n"))
