"""Risk-based priority scoring for changed files."""

from __future__ import annotations

import logging
from typing import Callable

from reviewplan.conventions import candidate_test_paths, is_critical_path, is_test_file
from reviewplan.models import FileChange, Score, ScoreBreakdown, Weights

logger = logging.getLogger(__name__)

ChurnLookup = Callable[[str, str], int]

CHURN_CAP = 50  # commits; anything above scores the same
RECENCY_BASELINE = 50.0


def score_files(
    files: list[FileChange],
    repo_path: str,
    weights: Weights | None = None,
    churn_lookup: ChurnLookup | None = None,
) -> list[Score]:
    """Score changed files by review priority.

    Each file gets five weighted components on a 0-100 scale: relative size
    of the change, critical-path match, historical churn, missing tests and
    a constant recency baseline. Results are sorted by total descending;
    files with equal totals keep their input order.

    Args:
        files: Changed files from the diff.
        repo_path: Repository the churn lookup runs against.
        weights: Component weights. Defaults to ``Weights()``.
        churn_lookup: ``(repo_path, path) -> commit count``. Defaults to git.

    Returns:
        One Score per input file.
    """
    if weights is None:
        weights = Weights()
    if churn_lookup is None:
        from reviewplan.extractors.git_diff import file_churn

        churn_lookup = file_churn

    max_lines = max([1, *(f.lines_changed for f in files)])
    paths = {f.path for f in files}

    scores = [
        _score_file(f, repo_path, weights, churn_lookup, max_lines, paths) for f in files
    ]
    return sort_by_score(scores)


def sort_by_score(scores: list[Score]) -> list[Score]:
    """Sort descending by total; ties keep their relative order."""
    return sorted(scores, key=lambda s: s.total, reverse=True)


def has_associated_tests(path: str, paths: set[str]) -> bool:
    """True if ``path`` is a test or one of its conventional tests is in ``paths``."""
    if is_test_file(path):
        return True
    return any(candidate in paths for candidate in candidate_test_paths(path))


def _lookup_churn(churn_lookup: ChurnLookup, repo_path: str, path: str) -> int:
    try:
        churn = churn_lookup(repo_path, path)
    except Exception as e:
        logger.debug("Churn lookup failed for %s: %s", path, e)
        return 0
    return max(int(churn), 0)


def _score_file(
    f: FileChange,
    repo_path: str,
    weights: Weights,
    churn_lookup: ChurnLookup,
    max_lines: int,
    paths: set[str],
) -> Score:
    lines_changed = f.lines_changed
    lines_score = (lines_changed / max_lines) * 100 * weights.lines_changed

    critical = is_critical_path(f.path)
    critical_score = 100 * weights.criticality if critical else 0.0

    churn = _lookup_churn(churn_lookup, repo_path, f.path)
    churn_score = (min(churn, CHURN_CAP) / CHURN_CAP) * 100 * weights.churn

    # Untested files need more scrutiny
    has_tests = has_associated_tests(f.path, paths)
    test_score = 0.0 if has_tests else 100 * weights.test_coverage

    # Constant baseline for every file
    recency_score = RECENCY_BASELINE * weights.recency

    breakdown = ScoreBreakdown(
        lines_changed=lines_score,
        criticality=critical_score,
        churn=churn_score,
        test_coverage=test_score,
        recency=recency_score,
    )
    return Score(
        path=f.path,
        total=breakdown.total,
        lines_changed=lines_changed,
        is_critical_path=critical,
        churn_count=churn,
        has_tests=has_tests,
        breakdown=breakdown,
    )
