"""Line selection for one open FileDiff."""

from __future__ import annotations

from typing import FrozenSet, Iterator, List, Optional, Set, Tuple, Union

from gitstage.git.models import DiffLine, FileDiff


class Selection:
    """Set of selected line ids.

    Ids are only meaningful for the FileDiff they were parsed with, so the
    owner must call :meth:`clear` whenever a new diff is loaded.
    """

    def __init__(self) -> None:
        self._ids: Set[int] = set()

    # ---- mutation ----

    def toggle(self, line: DiffLine, extend: bool = False) -> None:
        """Select only *line*, or flip its membership when *extend* is set.

        Context and header lines are not selectable and are ignored.
        """
        if not line.is_change:
            return
        if not extend:
            self._ids = {line.id}
        elif line.id in self._ids:
            self._ids.discard(line.id)
        else:
            self._ids.add(line.id)

    def select_range(
        self,
        diff: FileDiff,
        start_line: DiffLine,
        end_line: DiffLine,
        extend: bool = False,
    ) -> int:
        """Select every addition/removal between two lines of *diff*, inclusive.

        The bounds may come in either order. Without *extend* the slice
        replaces the current selection, and bounds outside *diff* clear it.
        Returns the number of lines picked from the slice.
        """
        lines = diff.lines
        start = _index_of(lines, start_line)
        end = _index_of(lines, end_line)
        if start is None or end is None:
            if not extend:
                self._ids = set()
            return 0
        if start > end:
            start, end = end, start

        picked = {line.id for line in lines[start:end + 1] if line.is_change}
        if extend:
            self._ids |= picked
        else:
            self._ids = picked
        return len(picked)

    def clear(self) -> None:
        self._ids = set()

    # ---- queries ----

    @property
    def ids(self) -> FrozenSet[int]:
        return frozenset(self._ids)

    def lines(self, diff: FileDiff) -> List[DiffLine]:
        """Selected lines of *diff* in display order."""
        return [line for line in diff.lines if line.id in self._ids]

    def __contains__(self, item: Union[DiffLine, int]) -> bool:
        line_id = item.id if isinstance(item, DiffLine) else item
        return line_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"Selection({sorted(self._ids)!r})"


def _index_of(lines: Tuple[DiffLine, ...], target: DiffLine) -> Optional[int]:
    for idx, line in enumerate(lines):
        if line == target:
            return idx
    return None
