"""Unified diff parser for the output of ``git diff -- <path>``.

Builds a FileDiff whose lines carry recomputed old/new line numbers. The
parser is total: malformed input degrades to fewer hunks or default start
lines, never to an exception.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from gitstage.git.models import DiffHunk, DiffLine, DiffLineKind, FileDiff

_NEW_FILE_PREFIX = "+++ b/"
_METADATA_PREFIXES = ("--- ", "+++ ", "diff ", "index ")
_DEFAULT_START = (1, 1)


def _scan_number(text: str, marker: str, start: int) -> Optional[Tuple[int, int]]:
    """Find *marker* at or after *start* and read the digit run behind it.

    Returns ``(value, end_index)`` or None when no digits follow the marker.
    """
    idx = text.find(marker, start)
    if idx < 0:
        return None
    end = idx + 1
    while end < len(text) and text[end] in "0123456789":
        end += 1
    if end == idx + 1:
        return None
    return int(text[idx + 1:end]), end


def parse_hunk_header(header: str) -> Tuple[int, int]:
    """Return ``(old_start, new_start)`` from an ``@@ -O[,n] +P[,m] @@`` header.

    Counts are ignored; they are recomputed when a patch is synthesized.
    Falls back to ``(1, 1)`` when the header cannot be read.
    """
    if not header.startswith("@@"):
        return _DEFAULT_START
    old = _scan_number(header, "-", 2)
    if old is None:
        return _DEFAULT_START
    new = _scan_number(header, "+", old[1])
    if new is None:
        return _DEFAULT_START
    return old[0], new[0]


class DiffParser:
    """Parse the diff text of a single file into a FileDiff.

    Usage::

        diff = DiffParser(raw_text).parse()
        for hunk in diff.hunks:
            ...

    Line ids start at 0 for every call to :meth:`parse`.
    """

    def __init__(self, diff_text: str) -> None:
        self._lines = diff_text.split("\n")

    def parse(self) -> FileDiff:
        next_id = 0
        filename = ""
        hunks: List[DiffHunk] = []
        header: Optional[str] = None  # header of the open hunk
        current: List[DiffLine] = []
        old_no = new_no = 0

        def line(old: Optional[int], new: Optional[int], kind: DiffLineKind, content: str) -> DiffLine:
            nonlocal next_id
            item = DiffLine(id=next_id, old_line_no=old, new_line_no=new, kind=kind, content=content)
            next_id += 1
            return item

        for raw in self._lines:
            # --- File headers ---
            if raw.startswith(_NEW_FILE_PREFIX):
                filename = raw[len(_NEW_FILE_PREFIX):]
                continue
            if raw.startswith(_METADATA_PREFIXES):
                continue

            # --- Hunk header ---
            if raw.startswith("@@"):
                if header is not None and current:
                    hunks.append(DiffHunk(header=header, lines=tuple(current)))
                header = raw
                old_no, new_no = parse_hunk_header(raw)
                current = [line(None, None, DiffLineKind.HEADER, raw)]
                continue

            # Anything before the first hunk is extended header noise
            # (mode changes, rename info, binary notices).
            if header is None:
                continue

            # --- Content lines ---
            if raw.startswith("+"):
                current.append(line(None, new_no, DiffLineKind.ADDITION, raw[1:]))
                new_no += 1
            elif raw.startswith("-"):
                current.append(line(old_no, None, DiffLineKind.REMOVAL, raw[1:]))
                old_no += 1
            elif raw.startswith(" ") or (raw and not raw.startswith("\\")):
                content = raw[1:] if raw.startswith(" ") else raw
                current.append(line(old_no, new_no, DiffLineKind.CONTEXT, content))
                old_no += 1
                new_no += 1
            # "\ No newline at end of file" and blank separators are dropped

        if header is not None and current:
            hunks.append(DiffHunk(header=header, lines=tuple(current)))

        return FileDiff(filename=filename, hunks=tuple(hunks))


def parse_diff(diff_text: str) -> FileDiff:
    """Shortcut for ``DiffParser(diff_text).parse()``."""
    return DiffParser(diff_text).parse()
