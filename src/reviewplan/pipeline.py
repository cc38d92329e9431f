"""Pipeline orchestrator: diff extraction, scoring, batching and sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from reviewplan.analyzers.batching import group_scores, take_batches, take_files
from reviewplan.analyzers.priority import ChurnLookup, score_files
from reviewplan.config import OnLimit, ReviewplanConfig, SortOrder
from reviewplan.models import (
    Batch,
    FileChange,
    Finding,
    Score,
    Session,
    SessionError,
    SessionStatus,
)
from reviewplan.sessions import SessionStore

logger = logging.getLogger(__name__)


class TooManyFilesError(Exception):
    """More files changed than the review allows and on_limit is "stop"."""

    def __init__(self, total: int, max_files: int) -> None:
        super().__init__(
            f"too many files: {total} (max {max_files}); "
            "use on_limit = continue or raise max_files"
        )
        self.total = total
        self.max_files = max_files


@dataclass
class ReviewPlan:
    """What one review run covers."""

    session: Session | None
    scores: list[Score] = field(default_factory=list)
    selected: list[Score] = field(default_factory=list)
    batches: list[Batch] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    base_commit: str = ""
    head_commit: str = ""

    @property
    def files_remaining(self) -> int:
        return len(self.scores) - len(self.selected)


def order_scores(scores: list[Score], files: list[FileChange], sort: SortOrder) -> list[Score]:
    """Reorder priority-sorted scores for presentation."""
    if sort is SortOrder.ALPHA:
        return sorted(scores, key=lambda s: s.path)
    if sort is SortOrder.NONE:
        position = {f.path: i for i, f in enumerate(files)}
        return sorted(scores, key=lambda s: position.get(s.path, len(position)))
    return list(scores)


def select_scores(ordered: list[Score], config: ReviewplanConfig) -> list[Score]:
    """Pick the files for this run, by batch count or by file budget.

    ``batching.max_total_files`` is applied here, once, so every selected
    file ends up in a batch. A selection is never empty when ``ordered``
    is not.
    """
    review = config.review
    options = config.batching
    if options.max_total_files > 0:
        ordered = ordered[: options.max_total_files]
    if review.max_files > 0 and len(ordered) > review.max_files:
        if review.on_limit is OnLimit.STOP:
            raise TooManyFilesError(len(ordered), review.max_files)

    if review.max_batches > 0:
        options = replace(options, max_total_files=0)
        if review.max_files > 0:
            # No single batch may outgrow the file budget
            per_batch = options.max_files_per_batch
            if per_batch < 1 or per_batch > review.max_files:
                options = replace(options, max_files_per_batch=review.max_files)
        batches = take_batches(group_scores(ordered, options), review.max_batches)
        if review.max_files > 0:
            batches = take_files(batches, review.max_files)
        chosen = {path for b in batches for path in b.files}
        return [s for s in ordered if s.path in chosen]

    if review.max_files > 0:
        return ordered[: review.max_files]
    return list(ordered)


def plan_review(
    config: ReviewplanConfig,
    store: SessionStore,
    *,
    continue_from: int = 0,
    base_commit: str | None = None,
    base_branch: str | None = None,
    review_type: str = "all",
    churn_lookup: ChurnLookup | None = None,
) -> ReviewPlan:
    """Gather, score and batch the changed files and open a session.

    On continuation, files reviewed anywhere in the session chain are
    excluded and the diff range defaults to the chain root's commits.
    Returns a plan without a session when nothing is left to review.
    """
    from reviewplan.extractors.git_diff import changed_files, resolve_range

    excluded: list[str] = []
    head = "HEAD"
    if continue_from > 0:
        excluded, root = store.collect_reviewed_files(continue_from)
        if not base_commit and not base_branch:
            base_commit = root.base_commit
            head = root.head_commit
        logger.info(
            "Continuing from session %d: %d files already reviewed", continue_from, len(excluded)
        )

    # ── Gather ──────────────────────────────────────────────────────────
    diff_range = resolve_range(
        config.repo_path,
        base_commit=base_commit,
        base_branch=base_branch,
        review_type=review_type,
        head=head,
    )
    skip = set(excluded)
    files = [
        f
        for f in changed_files(config.repo_path, diff_range)
        if not f.is_binary and f.path not in skip
    ]
    plan = ReviewPlan(
        session=None,
        excluded=excluded,
        base_commit=diff_range.base,
        head_commit=diff_range.head,
    )
    if not files:
        logger.info("No changes to review")
        return plan

    # ── Score and select ────────────────────────────────────────────────
    scores = score_files(files, config.repo_path, config.weights, churn_lookup)
    ordered = order_scores(scores, files, config.review.sort)
    selected = select_scores(ordered, config)

    plan.scores = ordered
    plan.selected = selected
    plan.batches = group_scores(selected, replace(config.batching, max_total_files=0))

    # ── Persist ─────────────────────────────────────────────────────────
    session = Session(
        base_commit=diff_range.base,
        head_commit=diff_range.head,
        total_files_in_diff=len(scores) + len(excluded),
        files_remaining=len(scores) - len(selected),
        continued_from=continue_from,
        files=[s.path for s in selected],
    )
    session.advance(SessionStatus.IN_PROGRESS)
    plan.session = store.create(session)
    return plan


def complete_review(store: SessionStore, session_id: int, findings: list[Finding]) -> Session:
    """Record a session's findings and mark it completed.

    Raises:
        SessionError: the session is missing or already completed.
    """
    session = store.load(session_id)
    if session.status is SessionStatus.COMPLETED:
        raise SessionError(f"session {session_id}: already completed")
    session.advance(SessionStatus.COMPLETED)
    session.findings = list(findings)
    store.save(session)
    logger.info("Session %d completed with %d findings", session.id, len(findings))
    return session
