"""Diff extraction via the git CLI."""

from __future__ import annotations

import logging
import posixpath
import re
import subprocess
from dataclasses import dataclass

from reviewplan.models import FileChange, FileStatus

logger = logging.getLogger(__name__)

_RENAME_RE = re.compile(r"\{(.*?) => (.*?)\}")

_STATUS_CODES = {
    "A": FileStatus.ADDED,
    "M": FileStatus.MODIFIED,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
    "C": FileStatus.ADDED,  # copy
    "T": FileStatus.MODIFIED,  # type change
}

LANGUAGES = {
    ".go": "go",
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "jsx",
    ".tsx": "tsx",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".c": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".h": "c-header",
    ".hpp": "c-header",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".sh": "shell",
    ".bash": "shell",
    ".sql": "sql",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".sass": "scss",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".md": "markdown",
    ".markdown": "markdown",
    ".proto": "protobuf",
}


class GitError(RuntimeError):
    """A git command failed."""


@dataclass
class DiffRange:
    """The two sides of the diff under review.

    An empty ``head`` means the working tree.
    """

    base: str
    head: str = ""
    base_branch: str = ""

    @property
    def spec(self) -> list[str]:
        if self.base_branch:
            return [f"{self.base}...{self.head or 'HEAD'}"]
        if self.head:
            return [self.base, self.head]
        return [self.base]


def _git(repo_path: str, *args: str) -> str:
    cmd = ["git", "-C", repo_path, *args]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e
    if result.returncode != 0:
        raise GitError(f"git {args[0]} failed: {result.stderr.strip()}")
    return result.stdout


def detect_language(path: str) -> str:
    """Language tag from the file extension."""
    ext = posixpath.splitext(path)[1].lower()
    return LANGUAGES.get(ext, "text")


def repo_root(path: str) -> str:
    """Absolute path of the repository containing ``path``."""
    return _git(path, "rev-parse", "--show-toplevel").strip()


def head_commit(repo_path: str) -> str:
    return _git(repo_path, "rev-parse", "HEAD").strip()


def resolve_range(
    repo_path: str,
    base_commit: str | None = None,
    base_branch: str | None = None,
    review_type: str = "all",
    head: str = "HEAD",
) -> DiffRange:
    """Work out what to diff.

    An explicit base commit wins, then a base branch (compared from its merge
    base), then the review type: ``committed`` reviews the last commit,
    ``uncommitted`` and ``all`` review the working tree against HEAD.
    """
    if base_commit:
        return DiffRange(base=base_commit, head=head)
    if base_branch:
        return DiffRange(base=base_branch, head=head_commit(repo_path), base_branch=base_branch)
    if review_type == "committed":
        return DiffRange(base="HEAD~1", head="HEAD")
    return DiffRange(base="HEAD", head="")


def _expand_rename_path(path: str, use_old: bool) -> str:
    """Expand git's rename format: 'dir/{old.py => new.py}' -> full path."""

    def replace(m: re.Match[str]) -> str:
        old, new = m.group(1), m.group(2)
        return old if use_old else new

    expanded = _RENAME_RE.sub(replace, path)
    return expanded.replace("//", "/").strip("/")


def _parse_numstat_line(line: str) -> tuple[str, int, int, str | None, bool] | None:
    """Parse 'added\\tdeleted\\tpath' into (path, added, deleted, old_path, binary)."""
    parts = line.split("\t", 2)
    if len(parts) != 3:
        return None

    added_str, deleted_str, path = parts
    is_binary = added_str == "-" and deleted_str == "-"
    added = int(added_str) if added_str != "-" else 0
    deleted = int(deleted_str) if deleted_str != "-" else 0

    old_path = None
    if " => " in path and "{" in path:
        old_path = _expand_rename_path(path, use_old=True)
        path = _expand_rename_path(path, use_old=False)
    elif " => " in path:
        old_path, path = path.split(" => ", 1)

    return path, added, deleted, old_path, is_binary


def _parse_name_status(output: str) -> dict[str, FileStatus]:
    """Map each path in 'git diff --name-status' output to its status."""
    statuses: dict[str, FileStatus] = {}
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 2 or not parts[0]:
            continue
        code = parts[0][0]
        path = parts[-1]  # renames list old then new
        statuses[path] = _STATUS_CODES.get(code, FileStatus.MODIFIED)
    return statuses


def parse_diff(numstat: str, name_status: str) -> list[FileChange]:
    """Combine numstat and name-status output into FileChange records."""
    statuses = _parse_name_status(name_status)
    files: list[FileChange] = []
    for line in numstat.splitlines():
        line = line.strip()
        if not line:
            continue
        parsed = _parse_numstat_line(line)
        if parsed is None:
            continue
        path, added, deleted, old_path, is_binary = parsed
        status = statuses.get(path)
        if status is None:
            status = FileStatus.RENAMED if old_path else FileStatus.MODIFIED
        files.append(
            FileChange(
                path=path,
                lines_added=added,
                lines_deleted=deleted,
                status=status,
                language=detect_language(path),
                old_path=old_path,
                is_binary=is_binary,
            )
        )
    return files


def changed_files(repo_path: str, diff_range: DiffRange) -> list[FileChange]:
    """List the files changed in ``diff_range`` in diff order.

    Raises:
        GitError: if git cannot produce the diff.
    """
    numstat = _git(repo_path, "diff", "--numstat", "-M", *diff_range.spec)
    name_status = _git(repo_path, "diff", "--name-status", "-M", *diff_range.spec)
    files = parse_diff(numstat, name_status)
    logger.info("Found %d changed files in %s", len(files), " ".join(diff_range.spec))
    return files


def file_churn(repo_path: str, path: str) -> int:
    """Number of commits reachable from HEAD that touched ``path``."""
    out = _git(repo_path, "rev-list", "--count", "HEAD", "--", path)
    return int(out.strip() or 0)
