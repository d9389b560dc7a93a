"""Rich terminal reporter — change tables and coloured diffs."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from gitstage.git.models import ChangeStatus, DiffLineKind, FileChange, FileDiff

_STATUS_STYLE = {
    ChangeStatus.MODIFIED: "bold yellow",
    ChangeStatus.ADDED: "bold green",
    ChangeStatus.DELETED: "bold red",
    ChangeStatus.CONFLICTED: "bold white on red",
    ChangeStatus.UNTRACKED: "bold bright_black",
    ChangeStatus.RENAMED: "bold cyan",
}

_LINE_STYLE = {
    DiffLineKind.ADDITION: "green",
    DiffLineKind.REMOVAL: "red",
    DiffLineKind.HEADER: "bold cyan",
    DiffLineKind.CONTEXT: "",
}


def _status_pill(status: ChangeStatus) -> Text:
    return Text(f" {status.value} ", style=_STATUS_STYLE.get(status, ""))


def _changes_table(title: str, changes: Sequence[FileChange]) -> Table:
    table = Table(title=title, title_style="bold", border_style="dim", show_header=False)
    table.add_column("Status", justify="center", width=5)
    table.add_column("Directory", style="dim")
    table.add_column("File", style="magenta")
    for change in changes:
        table.add_row(_status_pill(change.status), escape(change.directory), escape(change.filename))
    return table


def render_status(
    staged: Sequence[FileChange],
    unstaged: Sequence[FileChange],
    *,
    console: Optional[Console] = None,
) -> None:
    """Print staged and unstaged change lists."""
    console = console or Console()

    if not staged and not unstaged:
        console.print("[bold green]✓ Working tree clean.[/bold green]")
        return

    if staged:
        console.print(_changes_table(f"Staged ({len(staged)})", staged))
    if unstaged:
        console.print(_changes_table(f"Unstaged ({len(unstaged)})", unstaged))


def _number(value: Optional[int]) -> str:
    return "" if value is None else str(value)


def render_diff(
    diff: FileDiff,
    *,
    path: str,
    staged: bool = False,
    show_line_numbers: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print a parsed diff; the ``#`` column holds the row numbers used by --lines."""
    console = console or Console()
    side = "staged" if staged else "unstaged"

    if diff.is_empty:
        console.print(f"[dim]{escape(path)} ({side}): no textual changes.[/dim]")
        return

    table = Table(
        title=f"{escape(path)} ({side})",
        title_style="bold",
        border_style="dim",
        box=None,
        show_header=show_line_numbers,
    )
    table.add_column("#", justify="right", style="dim")
    if show_line_numbers:
        table.add_column("Old", justify="right", style="dim")
        table.add_column("New", justify="right", style="dim")
    table.add_column("", overflow="fold")

    for row, line in enumerate(diff.lines, start=1):
        text = Text(f"{line.marker}{line.content}", style=_LINE_STYLE[line.kind])
        if show_line_numbers:
            table.add_row(str(row), _number(line.old_line_no), _number(line.new_line_no), text)
        else:
            table.add_row(str(row), text)

    console.print(table)
