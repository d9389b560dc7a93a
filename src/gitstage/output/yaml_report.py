"""YAML reporter — same document shape as the JSON reporter."""

from __future__ import annotations

from typing import Sequence

import yaml

from gitstage.git.models import FileChange, FileDiff
from gitstage.output.json_report import diff_to_dict, status_to_dict


def render_status(staged: Sequence[FileChange], unstaged: Sequence[FileChange]) -> str:
    return yaml.safe_dump(status_to_dict(staged, unstaged), sort_keys=False)


def render_diff(diff: FileDiff, *, path: str, staged: bool) -> str:
    return yaml.safe_dump(diff_to_dict(diff, path=path, staged=staged), sort_keys=False, allow_unicode=True)
