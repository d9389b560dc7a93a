"""Parser for ``git status --porcelain=v1`` output."""

from __future__ import annotations

from typing import List, Optional, Tuple

from gitstage.git.models import ChangeStatus, FileChange

_INDEX_CODES = {
    "M": ChangeStatus.MODIFIED,
    "A": ChangeStatus.ADDED,
    "D": ChangeStatus.DELETED,
    "R": ChangeStatus.RENAMED,
    "U": ChangeStatus.CONFLICTED,
}

_WORKTREE_CODES = {
    "M": ChangeStatus.MODIFIED,
    "D": ChangeStatus.DELETED,
    "U": ChangeStatus.CONFLICTED,
}


def _index_status(code: str, worktree_code: str) -> Optional[ChangeStatus]:
    if code == " " and worktree_code == "A":
        # Intent-to-add entry (git add -N): listed as staged only, so it never
        # reaches line staging from the unstaged side.
        return ChangeStatus.ADDED
    return _INDEX_CODES.get(code)


def _worktree_status(code: str, index_code: str) -> Optional[ChangeStatus]:
    if code == "A" and index_code == "A":
        return ChangeStatus.CONFLICTED  # both added
    return _WORKTREE_CODES.get(code)


def _sort_key(change: FileChange) -> str:
    return change.path.casefold()


def parse_status(output: str) -> Tuple[List[FileChange], List[FileChange]]:
    """Split porcelain status lines into ``(staged, unstaged)`` change lists.

    Unknown code combinations are skipped. Both lists are sorted by path,
    case-insensitively.
    """
    staged: List[FileChange] = []
    unstaged: List[FileChange] = []

    for line in output.split("\n"):
        if len(line) < 3:
            continue
        index_code, worktree_code, path = line[0], line[1], line[3:]

        if worktree_code == "?":
            unstaged.append(FileChange(path=path, status=ChangeStatus.UNTRACKED))
            continue

        if (status := _index_status(index_code, worktree_code)) is not None:
            staged.append(FileChange(path=path, status=status))
        if (status := _worktree_status(worktree_code, index_code)) is not None:
            unstaged.append(FileChange(path=path, status=status))

    return sorted(staged, key=_sort_key), sorted(unstaged, key=_sort_key)
