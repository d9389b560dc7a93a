"""Git interface layer — adapter, diff and status parsing, models."""

from gitstage.git.adapter import (
    GitError,
    apply_patch,
    commit,
    discard_changes,
    get_diff,
    get_repo_root,
    get_status,
    get_untracked_diff,
    run_git,
    stage_all,
    stage_file,
    stream_git,
    unstage_all,
    unstage_file,
)
from gitstage.git.diff_parser import DiffParser, parse_diff, parse_hunk_header
from gitstage.git.models import (
    ChangeStatus,
    DiffHunk,
    DiffLine,
    DiffLineKind,
    FileChange,
    FileDiff,
)
from gitstage.git.status_parser import parse_status

__all__ = [
    "ChangeStatus",
    "DiffHunk",
    "DiffLine",
    "DiffLineKind",
    "DiffParser",
    "FileChange",
    "FileDiff",
    "GitError",
    "apply_patch",
    "commit",
    "discard_changes",
    "get_diff",
    "get_repo_root",
    "get_status",
    "get_untracked_diff",
    "parse_diff",
    "parse_hunk_header",
    "parse_status",
    "run_git",
    "stage_all",
    "stage_file",
    "stream_git",
    "unstage_all",
    "unstage_file",
]
