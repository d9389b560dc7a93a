"""Shared test fixtures — sample diffs, status output, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path

import pytest


def git(repo: Path, *args: str) -> str:
    """Run git in *repo* for test setup; fails the test on error."""
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True,
    )
    return result.stdout


@pytest.fixture
def sample_diff_single_addition() -> str:
    """One hunk: context, addition, context."""
    return (
        "diff --git a/x b/x\n"
        "--- a/x\n"
        "+++ b/x\n"
        "@@ -1,2 +1,3 @@\n"
        " line1\n"
        "+line2\n"
        " line3\n"
    )


@pytest.fixture
def sample_diff_two_removals() -> str:
    """One hunk removing two adjacent lines."""
    return textwrap.dedent("""\
        diff --git a/notes.txt b/notes.txt
        index 1234567..abcdef0 100644
        --- a/notes.txt
        +++ b/notes.txt
        @@ -1,4 +1,2 @@
         keep one
        -drop one
        -drop two
         keep two
    """)


@pytest.fixture
def sample_diff_multi_hunk() -> str:
    """Two hunks with mixed changes in the same file."""
    return (
        "diff --git a/app.py b/app.py\n"
        "index 1234567..abcdef0 100644\n"
        "--- a/app.py\n"
        "+++ b/app.py\n"
        "@@ -1,4 +1,4 @@\n"
        " import os\n"
        "-import sys\n"
        "+import json\n"
        " \n"
        " def main():\n"
        "@@ -20,3 +20,5 @@ def main():\n"
        "     run()\n"
        "+    log()\n"
        "+    flush()\n"
        "     return 0\n"
    )


@pytest.fixture
def sample_diff_untracked() -> str:
    """Synthetic all-addition diff for a file git does not know yet."""
    return (
        "--- /dev/null\n"
        "+++ b/new.txt\n"
        "@@ -0,0 +1,3 @@\n"
        "+alpha\n"
        "+beta\n"
        "+gamma\n"
    )


@pytest.fixture
def sample_diff_binary() -> str:
    return textwrap.dedent("""\
        diff --git a/image.png b/image.png
        new file mode 100644
        Binary files /dev/null and b/image.png differ
    """)


@pytest.fixture
def sample_diff_mode_only() -> str:
    return textwrap.dedent("""\
        diff --git a/script.sh b/script.sh
        old mode 100644
        new mode 100755
    """)


@pytest.fixture
def sample_diff_no_newline() -> str:
    return textwrap.dedent("""\
        diff --git a/data.txt b/data.txt
        index abc1234..def5678 100644
        --- a/data.txt
        +++ b/data.txt
        @@ -1 +1 @@
        -old last line
        \\ No newline at end of file
        +new last line
        \\ No newline at end of file
    """)


@pytest.fixture
def sample_status() -> str:
    return "M  foo.txt\n?? bar.txt\n A baz.txt\n"


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one committed file."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    git(tmp_path, "config", "user.email", "test@test.com")
    git(tmp_path, "config", "user.name", "Test")
    git(tmp_path, "config", "core.autocrlf", "false")
    (tmp_path / "notes.txt").write_text("one\ntwo\nthree\nfour\nfive\n")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-m", "init")
    return tmp_path
