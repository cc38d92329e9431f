"""Render plans and sessions as JSON for piping into other tools."""

from __future__ import annotations

import json
from dataclasses import asdict

from reviewplan.models import Session
from reviewplan.pipeline import ReviewPlan


def format_plan_json(plan: ReviewPlan) -> str:
    data = {
        "session": plan.session.to_dict() if plan.session else None,
        "base_commit": plan.base_commit,
        "head_commit": plan.head_commit,
        "files_remaining": plan.files_remaining,
        "excluded": plan.excluded,
        "batches": [
            {
                "id": b.id,
                "reason": b.reason,
                "files": list(b.files),
                "total_score": round(b.total_score, 2),
            }
            for b in plan.batches
        ],
        "scores": [asdict(s) for s in plan.selected],
    }
    return json.dumps(data, indent=2)


def format_sessions_json(sessions: list[Session]) -> str:
    return json.dumps([s.to_dict() for s in sessions], indent=2)
