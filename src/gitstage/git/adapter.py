"""Git subprocess wrapper — status, diffs, index updates."""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import Callable, IO, List, Optional, Sequence, Tuple

import structlog

from gitstage.git.models import ChangeStatus, FileChange
from gitstage.git.status_parser import parse_status

logger = structlog.get_logger(__name__)

# Called with (text, is_stderr) for every chunk of streamed output.
OutputCallback = Callable[[str, bool], None]


class GitError(Exception):
    """Raised when git is unavailable or exits with a non-zero status.

    ``stderr`` holds the captured error stream so it can be shown verbatim.
    """

    def __init__(self, message: str, *, args: Sequence[str] = (), stderr: str = "") -> None:
        super().__init__(message)
        self.git_args = list(args)
        self.stderr = stderr


def _command_failed(args: Sequence[str], returncode: int, stderr: str) -> GitError:
    stderr = stderr.strip()
    logger.debug("git command failed", args=list(args), returncode=returncode, stderr=stderr)
    return GitError(stderr or f"git {' '.join(args)} exited with status {returncode}", args=args, stderr=stderr)


def run_git(
    args: Sequence[str],
    cwd: Path,
    *,
    input: Optional[str] = None,
    timeout: int = 30,
) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    logger.debug("running git", args=list(args), cwd=str(cwd))
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH", args=args)
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}", args=args)

    if result.returncode != 0:
        raise _command_failed(args, result.returncode, result.stderr)
    return result.stdout


def _pump(stream: IO[str], sink: List[str], on_output: OutputCallback, is_stderr: bool) -> None:
    for chunk in iter(stream.readline, ""):
        sink.append(chunk)
        on_output(chunk, is_stderr)
    stream.close()


def stream_git(
    args: Sequence[str],
    cwd: Path,
    on_output: OutputCallback,
    *,
    input: Optional[str] = None,
    timeout: int = 30,
) -> str:
    """Like :func:`run_git` but forwards output to *on_output* as it arrives.

    Returns the collected stdout.
    """
    logger.debug("streaming git", args=list(args), cwd=str(cwd))
    try:
        proc = subprocess.Popen(
            ["git", *args],
            cwd=cwd,
            stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH", args=args)

    out: List[str] = []
    err: List[str] = []
    readers = [
        threading.Thread(target=_pump, args=(proc.stdout, out, on_output, False), daemon=True),
        threading.Thread(target=_pump, args=(proc.stderr, err, on_output, True), daemon=True),
    ]
    for reader in readers:
        reader.start()

    if input is not None:
        assert proc.stdin is not None
        try:
            proc.stdin.write(input)
        except BrokenPipeError:
            pass  # git exited early; its stderr says why
        finally:
            proc.stdin.close()

    try:
        returncode = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}", args=args)
    finally:
        for reader in readers:
            reader.join()

    if returncode != 0:
        raise _command_failed(args, returncode, "".join(err))
    return "".join(out)


# ── repository ────────────────────────────────────────────────────────────────


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    return Path(out.strip())


def is_git_repository(path: Path) -> bool:
    try:
        run_git(["rev-parse", "--git-dir"], cwd=path)
    except GitError:
        return False
    return True


# ── status & diffs ────────────────────────────────────────────────────────────


def get_status(repo_root: Path, *, timeout: int = 30) -> Tuple[List[FileChange], List[FileChange]]:
    """Return ``(staged, unstaged)`` changes, untracked files included."""
    output = run_git(["status", "--porcelain=v1", "-u"], cwd=repo_root, timeout=timeout)
    return parse_status(output)


def get_diff(
    repo_root: Path,
    path: str,
    *,
    staged: bool = False,
    context_lines: Optional[int] = None,
    timeout: int = 30,
) -> str:
    """Return the unified diff of *path* against the index (or HEAD if *staged*)."""
    args = ["diff", "--no-color"]
    if staged:
        args.append("--cached")
    if context_lines is not None:
        args.append(f"--unified={context_lines}")
    args += ["--", path]
    return run_git(args, cwd=repo_root, timeout=timeout)


def get_untracked_diff(repo_root: Path, path: str) -> str:
    """Build an all-addition diff for a file git does not track yet."""
    content = (repo_root / path).read_text(encoding="utf-8", errors="replace")
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()

    result = f"--- /dev/null\n+++ b/{path}\n"
    if not content:
        return result
    result += f"@@ -0,0 +1,{len(lines)} @@\n"
    return result + "".join(f"+{line}\n" for line in lines)


# ── index updates ─────────────────────────────────────────────────────────────


def apply_patch(
    repo_root: Path,
    patch: str,
    *,
    reverse: bool = False,
    on_output: Optional[OutputCallback] = None,
    timeout: int = 30,
) -> None:
    """Apply *patch* to the index only, with zero-context hunks allowed."""
    args = ["apply", "--cached", "--unidiff-zero"]
    if reverse:
        args.append("--reverse")
    args.append("-")
    if on_output is not None:
        stream_git(args, cwd=repo_root, on_output=on_output, input=patch, timeout=timeout)
    else:
        run_git(args, cwd=repo_root, input=patch, timeout=timeout)


def stage_file(repo_root: Path, path: str, *, timeout: int = 30) -> None:
    run_git(["add", "--", path], cwd=repo_root, timeout=timeout)


def unstage_file(repo_root: Path, path: str, *, timeout: int = 30) -> None:
    run_git(["restore", "--staged", "--", path], cwd=repo_root, timeout=timeout)


def stage_all(repo_root: Path, *, timeout: int = 30) -> None:
    run_git(["add", "-A"], cwd=repo_root, timeout=timeout)


def unstage_all(repo_root: Path, *, timeout: int = 30) -> None:
    run_git(["reset", "-q", "HEAD"], cwd=repo_root, timeout=timeout)


def discard_changes(repo_root: Path, paths: Sequence[str], *, timeout: int = 30) -> None:
    """Throw away work-tree changes to *paths*.

    Tracked paths are checked out from the index; untracked files are
    deleted. Staged changes are left alone.
    """
    _, unstaged = get_status(repo_root, timeout=timeout)
    untracked = {c.path for c in unstaged if c.status == ChangeStatus.UNTRACKED}

    tracked = [p for p in paths if p not in untracked]
    if tracked:
        run_git(["checkout", "--", *tracked], cwd=repo_root, timeout=timeout)
    for path in paths:
        if path in untracked:
            (repo_root / path).unlink()
            logger.info("untracked file deleted", path=path)


# ── commit ────────────────────────────────────────────────────────────────────


def commit(
    repo_root: Path,
    message: str,
    *,
    on_output: Optional[OutputCallback] = None,
    timeout: int = 30,
) -> str:
    """Commit the index with *message*; returns git's stdout."""
    args = ["commit", "-m", message]
    if on_output is not None:
        return stream_git(args, cwd=repo_root, on_output=on_output, timeout=timeout)
    return run_git(args, cwd=repo_root, timeout=timeout)
