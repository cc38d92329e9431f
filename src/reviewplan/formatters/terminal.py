"""Render plans and sessions as rich tables."""

from __future__ import annotations

from rich.table import Table

from reviewplan.models import Session, SessionStatus
from reviewplan.pipeline import ReviewPlan

_STATUS_STYLES = {
    SessionStatus.PENDING: "dim",
    SessionStatus.IN_PROGRESS: "yellow",
    SessionStatus.COMPLETED: "green",
}

_SEVERITY_STYLES = {
    "error": "red",
    "warning": "yellow",
    "suggestion": "cyan",
}


def _status(session: Session) -> str:
    status = session.status or SessionStatus.PENDING
    style = _STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def format_plan(plan: ReviewPlan) -> list[Table]:
    """Batch table plus per-file priority table for a review plan."""
    title = f"Session {plan.session.id}" if plan.session else "Review plan"
    batches = Table(title=f"{title}: batches", show_header=True, header_style="bold cyan")
    batches.add_column("#", justify="right", width=4)
    batches.add_column("Reason")
    batches.add_column("Files", justify="right", width=6)
    batches.add_column("Score", justify="right", width=8)
    for b in plan.batches:
        batches.add_row(str(b.id), b.reason, str(len(b.files)), f"{b.total_score:.1f}")

    files = Table(title="Files by priority", show_header=True, header_style="bold cyan")
    files.add_column("Path")
    files.add_column("Score", justify="right", width=7)
    files.add_column("Lines", justify="right", width=7)
    files.add_column("Churn", justify="right", width=6)
    files.add_column("Critical", width=8)
    files.add_column("Tests", width=6)
    for s in plan.selected:
        files.add_row(
            s.path,
            f"{s.total:.1f}",
            str(s.lines_changed),
            str(s.churn_count),
            "[red]yes[/red]" if s.is_critical_path else "",
            "yes" if s.has_tests else "[yellow]no[/yellow]",
        )
    return [batches, files]


def format_session_list(sessions: list[Session]) -> Table:
    table = Table(title="Review sessions", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", width=4)
    table.add_column("Created", width=20)
    table.add_column("Status", width=12)
    table.add_column("Reviewed", justify="right", width=9)
    table.add_column("Remaining", justify="right", width=10)
    table.add_column("Findings", justify="right", width=9)
    table.add_column("From", justify="right", width=5)
    for s in sessions:
        created = s.created_at.isoformat()[:19].replace("T", " ") if s.created_at else ""
        table.add_row(
            str(s.id),
            created,
            _status(s),
            str(s.files_reviewed),
            str(s.files_remaining),
            str(len(s.findings)),
            str(s.continued_from) if s.continued_from else "",
        )
    return table


def format_session(session: Session) -> Table:
    table = Table(
        title=f"Session {session.id} ({session.base_commit[:12]}..{session.head_commit[:12] or 'worktree'})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("File")
    table.add_column("Line", justify="right", width=6)
    table.add_column("Severity", width=10)
    table.add_column("Category", width=12)
    table.add_column("Description")
    for f in session.findings:
        style = _SEVERITY_STYLES.get(f.severity, "white")
        table.add_row(
            f.file,
            str(f.line) if f.line else "",
            f"[{style}]{f.severity}[/{style}]",
            f.category,
            f.description,
        )
    return table
