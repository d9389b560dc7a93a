"""Tests for the diff session — line staging against a real index."""

from pathlib import Path

import pytest

from gitstage.git.adapter import GitError, get_diff
from gitstage.git.models import ChangeStatus, DiffLineKind, FileChange
from gitstage.staging.patch import PatchDirection
from gitstage.staging.session import DiffSession, StagingError

from conftest import git

NOTES = FileChange(path="notes.txt", status=ChangeStatus.MODIFIED)


@pytest.fixture
def edited_repo(tmp_git_repo: Path) -> Path:
    """notes.txt with 'two' replaced and a line appended (unstaged)."""
    (tmp_git_repo / "notes.txt").write_text("one\nTWO\nthree\nfour\nfive\nsix\n")
    return tmp_git_repo


def _row_of(session: DiffSession, kind: DiffLineKind, content: str) -> int:
    for row, line in enumerate(session.lines, start=1):
        if line.kind == kind and line.content == content:
            return row
    raise AssertionError(f"no {kind} line {content!r}")


class TestLoad:
    def test_load_parses_diff(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        diff = session.load(NOTES, staged=False)
        assert diff.filename == "notes.txt"
        assert len(diff.hunks) == 1
        assert session.diff is diff
        assert session.change == NOTES

    def test_load_clears_selection(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(1, len(session.lines))
        assert session.selection

        session.load(NOTES, staged=False)
        assert not session.selection

    def test_load_untracked_uses_synthetic_diff(self, tmp_git_repo: Path):
        (tmp_git_repo / "new.txt").write_text("a\nb\n")
        session = DiffSession(tmp_git_repo)
        diff = session.load(FileChange("new.txt", ChangeStatus.UNTRACKED), staged=False)
        assert [l.content for l in diff.hunks[0].body] == ["a", "b"]

    def test_load_failure_leaves_session_clear(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        with pytest.raises(OSError):
            session.load(FileChange("gone.txt", ChangeStatus.UNTRACKED), staged=False)
        assert session.diff is None
        assert session.change is None

    def test_clear(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.clear()
        assert session.lines == []
        assert session.selected_lines == []


class TestSelection:
    def test_select_rows_skips_context(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        assert session.select_rows(1, 2) == 0
        assert session.select_rows(_row_of(session, DiffLineKind.ADDITION, "six")) == 1
        assert [l.content for l in session.selected_lines] == ["six"]

    def test_select_rows_out_of_range(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        with pytest.raises(StagingError):
            session.select_rows(0)
        with pytest.raises(StagingError):
            session.select_rows(1, len(session.lines) + 1)

    def test_toggle_and_flags(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        assert not session.can_stage_lines

        line = session.lines[_row_of(session, DiffLineKind.REMOVAL, "two") - 1]
        session.toggle(line)
        assert session.can_stage_lines
        assert not session.can_unstage_lines

    def test_toggle_context_stages_nothing(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.toggle(session.lines[_row_of(session, DiffLineKind.CONTEXT, "one") - 1])
        session.toggle(session.lines[0], extend=True)

        assert not session.can_stage_lines
        assert session.stage_selected() is False
        assert get_diff(edited_repo, "notes.txt", staged=True) == ""

    def test_select_rows_replaces_unless_extended(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        two = _row_of(session, DiffLineKind.REMOVAL, "two")
        six = _row_of(session, DiffLineKind.ADDITION, "six")

        session.select_rows(two)
        session.select_rows(six)
        assert [l.content for l in session.selected_lines] == ["six"]

        session.select_rows(two, extend=True)
        assert [l.content for l in session.selected_lines] == ["two", "six"]

    def test_refresh_keeps_present_file(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.refresh_files([], [NOTES])
        assert session.diff is not None

    def test_refresh_drops_missing_file(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(1, len(session.lines))
        # Fully staged elsewhere: now only in the staged list
        session.refresh_files([NOTES], [])
        assert session.diff is None
        assert not session.selection


class TestStageLines:
    def test_stage_single_addition(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(_row_of(session, DiffLineKind.ADDITION, "six"))

        assert session.stage_selected() is True
        cached = get_diff(edited_repo, "notes.txt", staged=True)
        assert "+six" in cached
        assert "TWO" not in cached
        assert not session.selection

        remaining = get_diff(edited_repo, "notes.txt")
        assert "-two" in remaining and "+TWO" in remaining
        assert "+six" not in remaining

    def test_stage_single_removal(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(_row_of(session, DiffLineKind.REMOVAL, "two"))

        assert session.stage_selected() is True
        cached = get_diff(edited_repo, "notes.txt", staged=True)
        assert "-two" in cached
        assert "+TWO" not in cached
        assert "+six" not in cached

    def test_nothing_selected_is_noop(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        assert session.stage_selected() is False
        assert get_diff(edited_repo, "notes.txt", staged=True) == ""

    def test_stage_from_staged_view_refused(self, edited_repo: Path):
        git(edited_repo, "add", "notes.txt")
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=True)
        session.select_rows(1, len(session.lines))
        with pytest.raises(StagingError):
            session.stage_selected()

    def test_untracked_lines_refused(self, tmp_git_repo: Path):
        (tmp_git_repo / "new.txt").write_text("a\nb\n")
        session = DiffSession(tmp_git_repo)
        session.load(FileChange("new.txt", ChangeStatus.UNTRACKED), staged=False)
        session.select_rows(1, 3)
        with pytest.raises(StagingError):
            session.stage_selected()

    def test_nothing_loaded(self, tmp_git_repo: Path):
        session = DiffSession(tmp_git_repo)
        with pytest.raises(StagingError):
            session.stage_selected()
        with pytest.raises(StagingError):
            session.build_patch(PatchDirection.STAGE)

    def test_stale_diff_rejected(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(_row_of(session, DiffLineKind.ADDITION, "six"))
        # Index changes after the diff was read
        git(edited_repo, "add", "notes.txt")

        with pytest.raises(GitError):
            session.stage_selected()
        # Selection survives so the caller can decide to reload
        assert session.selection

    def test_streamed_output_callback(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(_row_of(session, DiffLineKind.ADDITION, "six"))
        seen = []
        assert session.stage_selected(on_output=lambda t, e: seen.append(t)) is True
        assert "+six" in get_diff(edited_repo, "notes.txt", staged=True)


class TestUnstageLines:
    def test_unstage_single_removal(self, edited_repo: Path):
        git(edited_repo, "add", "notes.txt")
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=True)
        assert not session.can_unstage_lines
        session.select_rows(_row_of(session, DiffLineKind.REMOVAL, "two"))
        assert session.can_unstage_lines

        assert session.unstage_selected() is True
        cached = get_diff(edited_repo, "notes.txt", staged=True)
        assert "-two" not in cached
        assert "+TWO" in cached
        assert "+six" in cached

    def test_unstage_single_addition(self, edited_repo: Path):
        git(edited_repo, "add", "notes.txt")
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=True)
        session.select_rows(_row_of(session, DiffLineKind.ADDITION, "six"))

        assert session.unstage_selected() is True
        cached = get_diff(edited_repo, "notes.txt", staged=True)
        assert "+six" not in cached
        assert "-two" in cached and "+TWO" in cached
        # Work tree untouched
        assert (edited_repo / "notes.txt").read_text().endswith("six\n")

    def test_unstage_from_unstaged_view_refused(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(1, len(session.lines))
        with pytest.raises(StagingError):
            session.unstage_selected()

    def test_stage_then_unstage_everything(self, edited_repo: Path):
        session = DiffSession(edited_repo)
        session.load(NOTES, staged=False)
        session.select_rows(1, len(session.lines))
        assert session.stage_selected() is True
        assert get_diff(edited_repo, "notes.txt") == ""

        session.load(NOTES, staged=True)
        session.select_rows(1, len(session.lines))
        assert session.unstage_selected() is True
        assert get_diff(edited_repo, "notes.txt", staged=True) == ""
