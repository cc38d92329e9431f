"""Tests for plan and session output formatting."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from rich.console import Console

from reviewplan.formatters import (
    format_plan,
    format_plan_json,
    format_session,
    format_session_list,
    format_sessions_json,
)
from reviewplan.models import Batch, Finding, Session, SessionStatus
from reviewplan.pipeline import ReviewPlan

from conftest import make_score


def _render(renderable) -> str:
    console = Console(width=200)
    with console.capture() as capture:
        console.print(renderable)
    return capture.get()


def _plan() -> ReviewPlan:
    scores = [make_score("pkg/auth/handler.go", 60), make_score("main.go", 20)]
    return ReviewPlan(
        session=Session(id=4, status=SessionStatus.IN_PROGRESS, files=["pkg/auth/handler.go"]),
        scores=scores,
        selected=scores[:1],
        batches=[Batch(1, ("pkg/auth/handler.go",), "same-package (pkg/auth)", 60.0)],
        excluded=["old.go"],
        base_commit="abc123",
        head_commit="HEAD",
    )


class TestFormatPlan:
    def test_tables(self):
        batches, files = format_plan(_plan())
        assert batches.title == "Session 4: batches"
        assert batches.row_count == 1
        assert files.row_count == 1
        out = _render(files)
        assert "pkg/auth/handler.go" in out
        assert "main.go" not in out

    def test_json(self):
        data = json.loads(format_plan_json(_plan()))
        assert data["session"]["id"] == 4
        assert data["files_remaining"] == 1
        assert data["excluded"] == ["old.go"]
        assert data["batches"][0]["files"] == ["pkg/auth/handler.go"]
        assert data["scores"][0]["path"] == "pkg/auth/handler.go"
        assert data["scores"][0]["breakdown"]["lines_changed"] == 60

    def test_json_without_session(self):
        data = json.loads(format_plan_json(ReviewPlan(session=None)))
        assert data["session"] is None
        assert data["batches"] == []


class TestFormatSessions:
    def _sessions(self) -> list[Session]:
        created = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        return [
            Session(id=1, created_at=created, status=SessionStatus.COMPLETED, files=["a", "b"]),
            Session(id=2, created_at=created, continued_from=1, files=["c"]),
        ]

    def test_list(self):
        table = format_session_list(self._sessions())
        assert table.row_count == 2
        out = _render(table)
        assert "2026-03-01 09:30:00" in out
        assert "completed" in out
        assert "pending" in out

    def test_findings(self):
        session = Session(
            id=1,
            base_commit="abc1234567890def",
            findings=[Finding("a.go", 3, "error", "bug", "nil deref")],
        )
        table = format_session(session)
        assert table.row_count == 1
        assert "abc1234567890"[:12] in table.title
        assert "worktree" in table.title
        assert "nil deref" in _render(table)

    def test_json(self):
        data = json.loads(format_sessions_json(self._sessions()))
        assert [s["id"] for s in data] == [1, 2]
        assert data[1]["continued_from"] == 1
        assert "continued_from" not in data[0]
