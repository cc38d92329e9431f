"""Tests for the git diff extractor."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from reviewplan.extractors.git_diff import (
    DiffRange,
    GitError,
    _expand_rename_path,
    _parse_name_status,
    _parse_numstat_line,
    changed_files,
    detect_language,
    file_churn,
    parse_diff,
    resolve_range,
)
from reviewplan.models import FileStatus


def _completed(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestExpandRenamePath:
    def test_simple_rename(self):
        assert _expand_rename_path("{old.go => new.go}", use_old=True) == "old.go"
        assert _expand_rename_path("{old.go => new.go}", use_old=False) == "new.go"

    def test_directory_rename(self):
        path = "pkg/{auth => login}/handler.go"
        assert _expand_rename_path(path, use_old=True) == "pkg/auth/handler.go"
        assert _expand_rename_path(path, use_old=False) == "pkg/login/handler.go"

    def test_empty_side(self):
        path = "src/{ => internal}/util.go"
        assert _expand_rename_path(path, use_old=True) == "src/util.go"
        assert _expand_rename_path(path, use_old=False) == "src/internal/util.go"


class TestParseNumstatLine:
    def test_normal_line(self):
        assert _parse_numstat_line("10\t5\tsrc/main.go") == ("src/main.go", 10, 5, None, False)

    def test_binary_file(self):
        assert _parse_numstat_line("-\t-\tlogo.png") == ("logo.png", 0, 0, None, True)

    def test_rename_with_braces(self):
        path, added, deleted, old_path, _ = _parse_numstat_line("5\t3\tsrc/{old.py => new.py}")
        assert path == "src/new.py"
        assert old_path == "src/old.py"
        assert (added, deleted) == (5, 3)

    def test_full_rename_without_braces(self):
        path, _, _, old_path, _ = _parse_numstat_line("0\t0\told.py => new.py")
        assert path == "new.py"
        assert old_path == "old.py"

    def test_malformed(self):
        assert _parse_numstat_line("garbage") is None


class TestParseNameStatus:
    def test_statuses(self):
        out = "M\tpkg/a.go\nA\tpkg/b.go\nD\tpkg/c.go\nR087\tpkg/old.go\tpkg/new.go\n"
        assert _parse_name_status(out) == {
            "pkg/a.go": FileStatus.MODIFIED,
            "pkg/b.go": FileStatus.ADDED,
            "pkg/c.go": FileStatus.DELETED,
            "pkg/new.go": FileStatus.RENAMED,
        }

    def test_skips_blank_lines(self):
        assert _parse_name_status("\n\n") == {}


class TestParseDiff:
    def test_combines_outputs(self):
        numstat = "12\t3\tpkg/auth/handler.go\n40\t0\tpkg/auth/handler_test.go\n-\t-\tassets/logo.png\n"
        name_status = "M\tpkg/auth/handler.go\nA\tpkg/auth/handler_test.go\nA\tassets/logo.png\n"
        files = parse_diff(numstat, name_status)

        assert [f.path for f in files] == [
            "pkg/auth/handler.go",
            "pkg/auth/handler_test.go",
            "assets/logo.png",
        ]
        handler = files[0]
        assert handler.lines_added == 12
        assert handler.lines_deleted == 3
        assert handler.lines_changed == 15
        assert handler.status is FileStatus.MODIFIED
        assert handler.language == "go"
        assert files[1].status is FileStatus.ADDED
        assert files[2].is_binary
        assert files[2].language == "text"

    def test_rename_without_name_status(self):
        files = parse_diff("1\t1\tpkg/{a.go => b.go}\n", "")
        assert files[0].path == "pkg/b.go"
        assert files[0].old_path == "pkg/a.go"
        assert files[0].status is FileStatus.RENAMED

    def test_empty(self):
        assert parse_diff("", "") == []


class TestDetectLanguage:
    @pytest.mark.parametrize(
        ("path", "language"),
        [
            ("main.go", "go"),
            ("app/models.py", "python"),
            ("src/App.TSX", "tsx"),
            ("lib/Auth.kt", "kotlin"),
            ("README.md", "markdown"),
            ("Makefile", "text"),
            ("data.bin", "text"),
        ],
    )
    def test_extensions(self, path, language):
        assert detect_language(path) == language


class TestDiffRange:
    def test_working_tree(self):
        assert DiffRange(base="HEAD").spec == ["HEAD"]

    def test_two_commits(self):
        assert DiffRange(base="abc", head="def").spec == ["abc", "def"]

    def test_branch_uses_merge_base(self):
        r = DiffRange(base="main", head="def", base_branch="main")
        assert r.spec == ["main...def"]


class TestResolveRange:
    def test_explicit_base_commit(self):
        r = resolve_range("/repo", base_commit="abc123")
        assert r == DiffRange(base="abc123", head="HEAD")

    def test_base_commit_beats_branch(self):
        r = resolve_range("/repo", base_commit="abc123", base_branch="main")
        assert r.base == "abc123"
        assert r.base_branch == ""

    @patch("reviewplan.extractors.git_diff.head_commit", return_value="f00d")
    def test_base_branch(self, _mock_head):
        r = resolve_range("/repo", base_branch="main")
        assert r == DiffRange(base="main", head="f00d", base_branch="main")

    def test_committed(self):
        assert resolve_range("/repo", review_type="committed") == DiffRange("HEAD~1", "HEAD")

    @pytest.mark.parametrize("review_type", ["all", "uncommitted"])
    def test_working_tree(self, review_type):
        assert resolve_range("/repo", review_type=review_type) == DiffRange("HEAD", "")


class TestGitCommands:
    @patch("reviewplan.extractors.git_diff.subprocess.run")
    def test_changed_files(self, mock_run):
        mock_run.side_effect = [
            _completed("3\t1\tmain.go\n"),
            _completed("M\tmain.go\n"),
        ]
        files = changed_files("/repo", DiffRange(base="abc", head="def"))
        assert [f.path for f in files] == ["main.go"]
        first_cmd = mock_run.call_args_list[0].args[0]
        assert first_cmd[:3] == ["git", "-C", "/repo"]
        assert first_cmd[-2:] == ["abc", "def"]

    @patch("reviewplan.extractors.git_diff.subprocess.run")
    def test_failure_raises(self, mock_run):
        mock_run.return_value = _completed(returncode=128, stderr="fatal: bad revision 'nope'\n")
        with pytest.raises(GitError, match="bad revision"):
            changed_files("/repo", DiffRange(base="nope"))

    @patch("reviewplan.extractors.git_diff.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_git(self, _mock_run):
        with pytest.raises(GitError, match="not found"):
            file_churn("/repo", "main.go")

    @patch("reviewplan.extractors.git_diff.subprocess.run")
    def test_file_churn(self, mock_run):
        mock_run.return_value = _completed("17\n")
        assert file_churn("/repo", "pkg/auth/handler.go") == 17
        cmd = mock_run.call_args.args[0]
        assert cmd[-2:] == ["--", "pkg/auth/handler.go"]

    def test_git_error_is_runtime_error(self):
        assert issubclass(GitError, RuntimeError)
