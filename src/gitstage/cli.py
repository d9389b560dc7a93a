"""gitstage CLI — Typer application for status, diffs, line staging, discard, and commit."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape

from gitstage import __version__

app = typer.Typer(
    name="gitstage",
    help="Stage and unstage individual lines of your changes.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

_ROW_RANGE_RE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")


def _resolve_repo_root() -> Path:
    """Find the git repo root, exit 2 on failure."""
    from gitstage.git.adapter import GitError, get_repo_root

    try:
        return get_repo_root()
    except GitError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc


def _setup(config: Optional[str], verbose: bool, format: Optional[str] = None):
    """Resolve the repo, load config, apply CLI overrides, configure logging."""
    from gitstage.config.loader import ConfigError, load_config
    from gitstage.config.schema import OUTPUT_FORMATS
    from gitstage.logging import configure_logging

    repo_root = _resolve_repo_root()
    try:
        cfg = load_config(repo_root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if format:
        if format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]
    if verbose and cfg.log.level not in ("DEBUG", "INFO"):
        cfg.log.level = "INFO"

    configure_logging(cfg.log.level, cfg.log.format)
    return repo_root, cfg


def parse_row_spec(spec: str) -> List[Tuple[int, int]]:
    """Turn ``"3,5-8"`` into ``[(3, 3), (5, 8)]``. Raises ValueError on bad input."""
    ranges: List[Tuple[int, int]] = []
    for part in spec.split(","):
        if not part.strip():
            continue
        m = _ROW_RANGE_RE.match(part)
        if m is None:
            raise ValueError(f"not a row or row range: {part.strip()!r}")
        start = int(m.group(1))
        end = int(m.group(2)) if m.group(2) else start
        ranges.append((start, end))
    if not ranges:
        raise ValueError("no rows given")
    return ranges


def _find_change(repo_root: Path, path: str, *, staged: bool, timeout: int):
    """Return the FileChange for *path* on the requested side, or exit 2."""
    from gitstage.git.adapter import GitError, get_status

    try:
        staged_changes, unstaged_changes = get_status(repo_root, timeout=timeout)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    for change in staged_changes if staged else unstaged_changes:
        if change.path == path:
            return change

    side = "staged" if staged else "unstaged"
    console.print(f"[bold red]Error:[/bold red] {escape(path)} has no {side} changes")
    raise typer.Exit(code=2)


# ── status ────────────────────────────────────────────────────────────────────


@app.command()
def status(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstage.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show staged and unstaged changes."""
    from gitstage.git.adapter import GitError, get_status
    from gitstage.output import json_report, terminal, yaml_report

    repo_root, cfg = _setup(config, verbose, format)

    try:
        staged, unstaged = get_status(repo_root, timeout=cfg.git.timeout)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if cfg.output.format == "json":
        print(json_report.render_status(staged, unstaged))
    elif cfg.output.format == "yaml":
        print(yaml_report.render_status(staged, unstaged), end="")
    else:
        terminal.render_status(staged, unstaged)


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command()
def diff(
    path: str = typer.Argument(..., help="Path relative to the repository root"),
    staged: bool = typer.Option(False, "--staged", "--cached", help="Show the staged diff"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstage.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show the diff of one file with the row numbers --lines refers to."""
    from gitstage.git.adapter import GitError
    from gitstage.output import json_report, terminal, yaml_report
    from gitstage.staging.session import DiffSession

    repo_root, cfg = _setup(config, verbose, format)
    change = _find_change(repo_root, path, staged=staged, timeout=cfg.git.timeout)

    session = DiffSession(repo_root, context_lines=cfg.git.context_lines, timeout=cfg.git.timeout)
    try:
        parsed = session.load(change, staged=staged)
    except (GitError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if cfg.output.format == "json":
        print(json_report.render_diff(parsed, path=path, staged=staged))
    elif cfg.output.format == "yaml":
        print(yaml_report.render_diff(parsed, path=path, staged=staged), end="")
    else:
        terminal.render_diff(
            parsed,
            path=path,
            staged=staged,
            show_line_numbers=cfg.output.show_line_numbers,
        )


# ── stage / unstage ───────────────────────────────────────────────────────────


def _apply_lines(
    path: str,
    lines: str,
    *,
    staged: bool,
    dry_run: bool,
    config: Optional[str],
    verbose: bool,
) -> None:
    """Shared body of ``stage --lines`` and ``unstage --lines``."""
    from gitstage.git.adapter import GitError
    from gitstage.staging.patch import PatchDirection
    from gitstage.staging.session import DiffSession, StagingError

    try:
        ranges = parse_row_spec(lines)
    except ValueError as exc:
        console.print(f"[bold red]Invalid --lines:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    repo_root, cfg = _setup(config, verbose)
    change = _find_change(repo_root, path, staged=staged, timeout=cfg.git.timeout)

    session = DiffSession(repo_root, context_lines=cfg.git.context_lines, timeout=cfg.git.timeout)
    try:
        session.load(change, staged=staged)
        for start, end in ranges:
            session.select_rows(start, end, extend=True)
    except (GitError, OSError, StagingError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    direction = PatchDirection.UNSTAGE if staged else PatchDirection.STAGE
    verb = "unstaged" if staged else "staged"

    if dry_run:
        print(session.build_patch(direction), end="")
        raise typer.Exit(code=0)

    def echo(text: str, is_stderr: bool) -> None:
        console.print(text.rstrip(), style="dim", markup=False, highlight=False)

    try:
        if staged:
            applied = session.unstage_selected(on_output=echo if verbose else None)
        else:
            applied = session.stage_selected(on_output=echo if verbose else None)
    except StagingError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    except GitError as exc:
        console.print(f"[bold red]git apply rejected the patch:[/bold red] {escape(str(exc))}")
        if _lacks_final_newline(repo_root / path):
            console.print(
                f"[dim]{escape(path)} does not end with a newline, which line patches "
                "cannot express. Stage the whole file instead.[/dim]"
            )
        else:
            console.print("[dim]Re-run `gitstage diff` and pick the rows again.[/dim]")
        raise typer.Exit(code=1) from exc

    if not applied:
        console.print("[yellow]Nothing selected: no change lines in the given rows.[/yellow]")
        raise typer.Exit(code=0)
    console.print(f"[green]✓[/green] {verb} selected lines of {escape(path)}")


def _lacks_final_newline(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            f.seek(0, 2)
            if f.tell() == 0:
                return False
            f.seek(-1, 2)
            return f.read(1) != b"\n"
    except OSError:
        return False


def _whole_file(
    path: Optional[str],
    all_files: bool,
    *,
    staged: bool,
    config: Optional[str],
    verbose: bool,
) -> None:
    """Shared body of whole-file and ``--all`` stage/unstage."""
    from gitstage.git.adapter import GitError, stage_all, stage_file, unstage_all, unstage_file

    if all_files == (path is not None):
        console.print("[bold red]Error:[/bold red] give either a PATH or --all")
        raise typer.Exit(code=2)

    repo_root, cfg = _setup(config, verbose)
    verb = "unstaged" if staged else "staged"
    try:
        if all_files:
            (unstage_all if staged else stage_all)(repo_root, timeout=cfg.git.timeout)
        else:
            (unstage_file if staged else stage_file)(repo_root, path, timeout=cfg.git.timeout)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    target = "all changes" if all_files else escape(path)
    console.print(f"[green]✓[/green] {verb} {target}")


@app.command()
def stage(
    path: Optional[str] = typer.Argument(None, help="Path relative to the repository root"),
    all_files: bool = typer.Option(False, "--all", "-A", help="Stage every change, untracked files included"),
    lines: Optional[str] = typer.Option(None, "--lines", "-l", help="Rows to stage, e.g. 3,5-8"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the patch instead of applying it"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstage.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Stage a whole file, only the given rows of its diff, or everything."""
    if lines is not None and path is not None and not all_files:
        _apply_lines(path, lines, staged=False, dry_run=dry_run, config=config, verbose=verbose)
        return
    if lines is not None:
        console.print("[bold red]Error:[/bold red] --lines needs exactly one PATH")
        raise typer.Exit(code=2)
    _whole_file(path, all_files, staged=False, config=config, verbose=verbose)


@app.command()
def unstage(
    path: Optional[str] = typer.Argument(None, help="Path relative to the repository root"),
    all_files: bool = typer.Option(False, "--all", "-A", help="Unstage every staged change"),
    lines: Optional[str] = typer.Option(None, "--lines", "-l", help="Rows to unstage, e.g. 3,5-8"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the patch instead of applying it"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstage.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Unstage a whole file, only the given rows of its staged diff, or everything."""
    if lines is not None and path is not None and not all_files:
        _apply_lines(path, lines, staged=True, dry_run=dry_run, config=config, verbose=verbose)
        return
    if lines is not None:
        console.print("[bold red]Error:[/bold red] --lines needs exactly one PATH")
        raise typer.Exit(code=2)
    _whole_file(path, all_files, staged=True, config=config, verbose=verbose)


# ── discard ───────────────────────────────────────────────────────────────────


@app.command()
def discard(
    paths: List[str] = typer.Argument(..., help="Paths relative to the repository root"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstage.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Throw away unstaged changes; untracked files are deleted."""
    from gitstage.git.adapter import GitError, discard_changes, get_status

    repo_root, cfg = _setup(config, verbose)
    try:
        _, unstaged = get_status(repo_root, timeout=cfg.git.timeout)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    changed = {c.path for c in unstaged}
    missing = [p for p in paths if p not in changed]
    if missing:
        console.print(f"[bold red]Error:[/bold red] no unstaged changes in {escape(', '.join(missing))}")
        raise typer.Exit(code=2)

    if not yes and not typer.confirm(f"Discard changes to {len(paths)} file(s)? This cannot be undone"):
        raise typer.Exit(code=1)

    try:
        discard_changes(repo_root, paths, timeout=cfg.git.timeout)
    except (GitError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]✓[/green] discarded changes to {len(paths)} file(s)")


# ── commit ────────────────────────────────────────────────────────────────────


@app.command()
def commit(
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstage.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Commit what is staged."""
    from gitstage.git.adapter import GitError
    from gitstage.git.adapter import commit as git_commit

    if not message.strip():
        console.print("[bold red]Error:[/bold red] commit message cannot be empty")
        raise typer.Exit(code=2)

    repo_root, cfg = _setup(config, verbose)

    def echo(text: str, is_stderr: bool) -> None:
        console.print(text.rstrip(), style="dim", markup=False, highlight=False)

    try:
        git_commit(repo_root, message, on_output=echo if verbose else None, timeout=cfg.git.timeout)
    except GitError as exc:
        console.print(f"[bold red]Commit failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print("[green]✓[/green] committed successfully")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .gitstage.toml in the repo root."""
    from gitstage.config.defaults import DEFAULT_TOML
    from gitstage.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root()
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"gitstage {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """gitstage — Stage and unstage individual lines of your changes."""
    from gitstage.logging import configure_logging

    # Warnings only until the repo config has been read.
    configure_logging()
