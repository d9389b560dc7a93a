"""JSON reporter for scripts and editor integrations."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from gitstage.git.models import DiffLine, FileChange, FileDiff


def _change_to_dict(change: FileChange) -> Dict[str, Any]:
    return {
        "path": change.path,
        "status": change.status.label,
        "code": change.status.value,
    }


def status_to_dict(staged: Sequence[FileChange], unstaged: Sequence[FileChange]) -> Dict[str, Any]:
    """Convert the two change lists to a JSON-serialisable dict."""
    return {
        "version": "1.0",
        "staged": [_change_to_dict(c) for c in staged],
        "unstaged": [_change_to_dict(c) for c in unstaged],
    }


def _line_to_dict(row: int, line: DiffLine) -> Dict[str, Any]:
    return {
        "row": row,
        "kind": line.kind.value,
        "old": line.old_line_no,
        "new": line.new_line_no,
        "content": line.content,
    }


def diff_to_dict(diff: FileDiff, *, path: str, staged: bool) -> Dict[str, Any]:
    """Convert a FileDiff to a dict; rows are numbered across all hunks."""
    hunks: List[Dict[str, Any]] = []
    row = 0
    for hunk in diff.hunks:
        lines = []
        for line in hunk.lines:
            row += 1
            lines.append(_line_to_dict(row, line))
        hunks.append({"header": hunk.header, "lines": lines})

    return {
        "version": "1.0",
        "path": path,
        "filename": diff.filename,
        "staged": staged,
        "empty": diff.is_empty,
        "hunks": hunks,
    }


def render_status(staged: Sequence[FileChange], unstaged: Sequence[FileChange]) -> str:
    return json.dumps(status_to_dict(staged, unstaged), indent=2)


def render_diff(diff: FileDiff, *, path: str, staged: bool) -> str:
    return json.dumps(diff_to_dict(diff, path=path, staged=staged), indent=2)
