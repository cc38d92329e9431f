"""All shared data models for reviewplan."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# ── Diff extraction ─────────────────────────────────────────────────────────


class FileStatus(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class FileChange:
    """A single file in the diff under review."""

    path: str
    lines_added: int = 0
    lines_deleted: int = 0
    status: FileStatus = FileStatus.MODIFIED
    language: str = "text"
    old_path: str | None = None  # set if rename
    is_binary: bool = False

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted


# ── Priority scoring ────────────────────────────────────────────────────────


@dataclass
class Weights:
    """Fractions applied to each 0-100 score component.

    The defaults sum to 1.0, which keeps totals on a 0-100 scale. Custom
    weights are taken as-is.
    """

    lines_changed: float = 0.30
    criticality: float = 0.25
    churn: float = 0.20
    test_coverage: float = 0.15
    recency: float = 0.10

    @property
    def total(self) -> float:
        return (
            self.lines_changed
            + self.criticality
            + self.churn
            + self.test_coverage
            + self.recency
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """Weighted score components."""

    lines_changed: float = 0.0  # 0-30 with default weights
    criticality: float = 0.0  # 0-25
    churn: float = 0.0  # 0-20
    test_coverage: float = 0.0  # 0-15
    recency: float = 0.0  # 0-10

    @property
    def total(self) -> float:
        return (
            self.lines_changed
            + self.criticality
            + self.churn
            + self.test_coverage
            + self.recency
        )


@dataclass(frozen=True)
class Score:
    """A file's review priority."""

    path: str
    total: float
    lines_changed: int
    is_critical_path: bool
    churn_count: int
    has_tests: bool
    breakdown: ScoreBreakdown


# ── Batching ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Batch:
    """Files grouped to be reviewed together."""

    id: int
    files: tuple[str, ...]
    reason: str
    total_score: float = 0.0


# ── Sessions ────────────────────────────────────────────────────────────────


class SessionStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


_STATUS_ORDER = {
    SessionStatus.PENDING: 0,
    SessionStatus.IN_PROGRESS: 1,
    SessionStatus.COMPLETED: 2,
}


class SessionError(Exception):
    """A session could not be read, written or updated."""


class SessionNotFoundError(SessionError):
    """A referenced session does not exist on disk."""

    def __init__(self, session_id: int) -> None:
        super().__init__(f"session {session_id} not found")
        self.session_id = session_id


@dataclass
class Finding:
    """A single issue reported by a review."""

    file: str
    line: int
    severity: str  # error, warning, suggestion
    category: str  # bug, security, performance, style
    description: str
    suggested_fix: str = ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "file": self.file,
            "line": self.line,
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
        }
        if self.suggested_fix:
            d["suggested_fix"] = self.suggested_fix
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Finding:
        return cls(
            file=d["file"],
            line=int(d.get("line", 0)),
            severity=d.get("severity", ""),
            category=d.get("category", ""),
            description=d["description"],
            suggested_fix=d.get("suggested_fix", ""),
        )


@dataclass
class Session:
    """One review run's scope, progress and results.

    Sessions are working copies: the pipeline mutates them and hands them
    back to ``SessionStore.save``. Only ``SessionStore.create`` assigns
    ``id`` and ``created_at``.
    """

    id: int = 0
    created_at: datetime | None = None
    base_commit: str = ""
    head_commit: str = ""
    total_files_in_diff: int = 0
    files_remaining: int = 0
    status: SessionStatus | None = None
    continued_from: int = 0  # 0 for the root of a chain
    files: list[str] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    @property
    def files_reviewed(self) -> int:
        return len(self.files)

    @property
    def is_root(self) -> bool:
        return self.continued_from == 0

    def advance(self, status: SessionStatus) -> None:
        """Move to ``status``; sessions never move backwards."""
        if self.status is not None and _STATUS_ORDER[status] < _STATUS_ORDER[self.status]:
            raise SessionError(
                f"session {self.id}: cannot move from {self.status.value} to {status.value}"
            )
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        status = self.status or SessionStatus.PENDING
        d: dict[str, Any] = {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "base_commit": self.base_commit,
            "head_commit": self.head_commit,
            "total_files_in_diff": self.total_files_in_diff,
            "files_reviewed": self.files_reviewed,
            "files_remaining": self.files_remaining,
            "status": status.value,
        }
        if self.continued_from:
            d["continued_from"] = self.continued_from
        d["files"] = list(self.files)
        if self.findings:
            d["findings"] = [f.to_dict() for f in self.findings]
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Session:
        created = d.get("created_at")
        return cls(
            id=int(d["id"]),
            created_at=datetime.fromisoformat(created) if created else None,
            base_commit=d.get("base_commit", ""),
            head_commit=d.get("head_commit", ""),
            total_files_in_diff=d.get("total_files_in_diff", 0),
            files_remaining=d.get("files_remaining", 0),
            status=SessionStatus(d.get("status", "pending")),
            continued_from=d.get("continued_from", 0),
            files=list(d.get("files") or []),
            findings=[Finding.from_dict(f) for f in d.get("findings") or []],
        )
