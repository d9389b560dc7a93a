"""Data models for status and diff parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ChangeStatus(str, Enum):
    """Change state of a path; the value is the one-letter wire code."""

    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"
    CONFLICTED = "C"
    UNTRACKED = "?"
    RENAMED = "R"

    @property
    def label(self) -> str:
        return self.name.lower()


class DiffLineKind(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    REMOVAL = "removal"
    HEADER = "header"


_MARKERS = {
    DiffLineKind.CONTEXT: " ",
    DiffLineKind.ADDITION: "+",
    DiffLineKind.REMOVAL: "-",
    DiffLineKind.HEADER: "",
}


@dataclass(frozen=True)
class FileChange:
    """A changed path as reported by ``git status``."""

    path: str
    status: ChangeStatus

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def directory(self) -> str:
        head, sep, _ = self.path.rpartition("/")
        return head + sep if head else ""


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single parsed line from a unified diff.

    ``id`` is only unique within the parse that produced the line.
    """

    id: int
    old_line_no: Optional[int]
    new_line_no: Optional[int]
    kind: DiffLineKind
    content: str  # without the leading marker

    @property
    def is_change(self) -> bool:
        return self.kind in (DiffLineKind.ADDITION, DiffLineKind.REMOVAL)

    @property
    def marker(self) -> str:
        return _MARKERS[self.kind]


@dataclass(frozen=True)
class DiffHunk:
    """One ``@@`` block; ``lines[0]`` is always the header line."""

    header: str
    lines: Tuple[DiffLine, ...]

    @property
    def body(self) -> Tuple[DiffLine, ...]:
        return tuple(line for line in self.lines if line.kind != DiffLineKind.HEADER)


@dataclass(frozen=True)
class FileDiff:
    """Parsed diff of a single file. No hunks means no textual change."""

    filename: str = ""
    hunks: Tuple[DiffHunk, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.hunks

    @property
    def lines(self) -> Tuple[DiffLine, ...]:
        """All lines of all hunks, in display order."""
        return tuple(line for hunk in self.hunks for line in hunk.lines)

    def line_by_id(self, line_id: int) -> Optional[DiffLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None
