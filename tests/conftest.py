"""Shared fixtures for reviewplan tests."""

from __future__ import annotations

import pytest

from reviewplan.models import FileChange, FileStatus, Score, ScoreBreakdown
from reviewplan.sessions import SessionStore


def make_score(path: str, total: float = 10.0) -> Score:
    return Score(
        path=path,
        total=total,
        lines_changed=0,
        is_critical_path=False,
        churn_count=0,
        has_tests=False,
        breakdown=ScoreBreakdown(lines_changed=total),
    )


def no_churn(repo_path: str, path: str) -> int:
    return 0


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore("/work/project", tmp_path / "state")


@pytest.fixture
def sample_changes() -> list[FileChange]:
    """A small Go changeset touching auth, payments and utilities."""
    return [
        FileChange("pkg/auth/handler.go", 120, 30, FileStatus.MODIFIED, "go"),
        FileChange("pkg/auth/handler_test.go", 40, 0, FileStatus.MODIFIED, "go"),
        FileChange("pkg/payment/stripe.go", 60, 10, FileStatus.ADDED, "go"),
        FileChange("pkg/utils/helper.go", 5, 5, FileStatus.MODIFIED, "go"),
        FileChange("main.go", 2, 1, FileStatus.MODIFIED, "go"),
    ]
