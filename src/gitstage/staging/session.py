"""Diff session — one open file diff, its selection, and line staging."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import structlog

from gitstage.git import adapter
from gitstage.git.diff_parser import DiffParser
from gitstage.git.models import ChangeStatus, DiffLine, FileChange, FileDiff
from gitstage.staging.patch import PatchDirection, patch_has_hunks, synthesize_patch
from gitstage.staging.selection import Selection

logger = structlog.get_logger(__name__)


class StagingError(Exception):
    """Raised when a line-level operation is not possible for the open file."""


class DiffSession:
    """Holds the diff currently being viewed and the lines picked in it.

    A patch built from the selection must be applied before the diff is
    reloaded; every load starts a fresh selection.
    """

    def __init__(
        self,
        repo_root: Path,
        *,
        context_lines: Optional[int] = None,
        timeout: int = 30,
    ) -> None:
        self.repo_root = repo_root
        self.context_lines = context_lines
        self.timeout = timeout
        self.selection = Selection()
        self.diff: Optional[FileDiff] = None
        self.change: Optional[FileChange] = None
        self.staged = False

    # ---- loading ----

    def load(self, change: FileChange, *, staged: bool) -> FileDiff:
        """Fetch and parse the diff of *change*; drops any previous selection."""
        self.clear()
        if change.status == ChangeStatus.UNTRACKED:
            raw = adapter.get_untracked_diff(self.repo_root, change.path)
        else:
            raw = adapter.get_diff(
                self.repo_root,
                change.path,
                staged=staged,
                context_lines=self.context_lines,
                timeout=self.timeout,
            )
        diff = DiffParser(raw).parse()
        logger.debug("diff loaded", path=change.path, staged=staged, hunks=len(diff.hunks))

        self.diff = diff
        self.change = change
        self.staged = staged
        return diff

    def clear(self) -> None:
        self.selection.clear()
        self.diff = None
        self.change = None
        self.staged = False

    def refresh_files(self, staged: Sequence[FileChange], unstaged: Sequence[FileChange]) -> None:
        """Drop the open diff if its file left the list it was opened from."""
        if self.change is None:
            return
        paths = {c.path for c in (staged if self.staged else unstaged)}
        if self.change.path not in paths:
            logger.debug("open file no longer changed", path=self.change.path)
            self.clear()

    # ---- selection ----

    @property
    def lines(self) -> List[DiffLine]:
        return list(self.diff.lines) if self.diff else []

    @property
    def selected_lines(self) -> List[DiffLine]:
        return self.selection.lines(self.diff) if self.diff else []

    @property
    def can_stage_lines(self) -> bool:
        return not self.staged and bool(self.selection)

    @property
    def can_unstage_lines(self) -> bool:
        return self.staged and bool(self.selection)

    def toggle(self, line: DiffLine, extend: bool = False) -> None:
        self.selection.toggle(line, extend)

    def select_range(self, start_line: DiffLine, end_line: DiffLine, extend: bool = False) -> int:
        if self.diff is None:
            return 0
        return self.selection.select_range(self.diff, start_line, end_line, extend)

    def select_rows(self, start: int, end: Optional[int] = None, *, extend: bool = False) -> int:
        """Select change lines by 1-based row number into :attr:`lines`.

        *start* to *end* is an inclusive slice; context and header rows in
        it are skipped. The slice replaces the selection unless *extend* is
        set. Raises StagingError for rows outside the diff.
        """
        lines = self.lines
        end = start if end is None else end
        for row in (start, end):
            if not 1 <= row <= len(lines):
                raise StagingError(f"Row {row} is outside the diff (1-{len(lines)})")
        return self.select_range(lines[start - 1], lines[end - 1], extend)

    # ---- staging ----

    def build_patch(self, direction: PatchDirection) -> str:
        if self.diff is None or self.change is None:
            raise StagingError("No diff is loaded")
        return synthesize_patch(self.diff, self.selection, direction, self.change.path)

    def stage_selected(self, on_output: Optional[adapter.OutputCallback] = None) -> bool:
        """Stage the selected lines. Returns False if there was nothing to apply."""
        return self._apply(PatchDirection.STAGE, on_output)

    def unstage_selected(self, on_output: Optional[adapter.OutputCallback] = None) -> bool:
        """Unstage the selected lines. Returns False if there was nothing to apply."""
        return self._apply(PatchDirection.UNSTAGE, on_output)

    def _apply(self, direction: PatchDirection, on_output: Optional[adapter.OutputCallback]) -> bool:
        if self.diff is None or self.change is None:
            raise StagingError("No diff is loaded")
        if self.change.status == ChangeStatus.UNTRACKED:
            raise StagingError(
                f"{self.change.path} is untracked; stage the whole file before picking lines"
            )
        if direction == PatchDirection.STAGE and self.staged:
            raise StagingError("Lines can only be staged from the unstaged diff")
        if direction == PatchDirection.UNSTAGE and not self.staged:
            raise StagingError("Lines can only be unstaged from the staged diff")

        patch = self.build_patch(direction)
        if not patch_has_hunks(patch):
            logger.debug("nothing selected", path=self.change.path)
            return False

        adapter.apply_patch(
            self.repo_root,
            patch,
            reverse=direction == PatchDirection.UNSTAGE,
            on_output=on_output,
            timeout=self.timeout,
        )
        logger.info("patch applied", path=self.change.path, direction=direction.value, lines=len(self.selection))
        # Ids refer to a diff that no longer matches the index.
        self.selection.clear()
        return True
