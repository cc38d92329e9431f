"""Group scored files into review batches."""

from __future__ import annotations

import posixpath
from collections import defaultdict

from reviewplan.config import BatchOptions
from reviewplan.conventions import source_path_for
from reviewplan.models import Batch, Score


def group_scores(scores: list[Score], options: BatchOptions | None = None) -> list[Batch]:
    """Organize scored files into batches of related files.

    Three passes over the (optionally truncated) input: tests are paired
    with their source file, remaining files are grouped by directory, and
    anything left over is pooled as "ungrouped". Groups larger than
    ``max_files_per_batch`` are split. Ids follow emission order
    (test-pairs, packages, leftovers); the result is sorted by total score
    descending with ties in emission order.

    Every input file lands in exactly one batch.
    """
    if options is None:
        options = BatchOptions()
    if not scores:
        return []

    files = scores
    if options.max_total_files > 0:
        files = files[: options.max_total_files]

    used: set[str] = set()

    # ── Pass 1: test pairs ────────────────────────────────────────────────
    pairs: dict[str, list[Score]] = {}
    if options.pair_tests:
        for score in files:
            source = source_path_for(score.path)
            if source is None:
                continue
            pairs.setdefault(source, []).append(score)
            used.add(score.path)

        for score in files:
            if score.path in used or score.path not in pairs:
                continue
            pairs[score.path].insert(0, score)
            used.add(score.path)

    # ── Pass 2: package groups ────────────────────────────────────────────
    packages: dict[str, list[Score]] = defaultdict(list)
    if options.group_by_package:
        for score in files:
            if score.path in used:
                continue
            packages[posixpath.dirname(score.path) or "."].append(score)
            used.add(score.path)

    # ── Pass 3: leftovers ─────────────────────────────────────────────────
    ungrouped = [s for s in files if s.path not in used]

    # ── Emit ──────────────────────────────────────────────────────────────
    groups: list[tuple[list[Score], str, str]] = []
    for source, members in pairs.items():
        split_reason = f"test-pair (split {posixpath.basename(source)})"
        groups.append((members, "test-pair", split_reason))
    for pkg, members in packages.items():
        reason = f"same-package ({pkg})"
        groups.append((members, reason, reason))
    if ungrouped:
        groups.append((ungrouped, "ungrouped", "ungrouped"))

    batches: list[Batch] = []
    for members, reason, split_reason in groups:
        chunks = _chunk(members, options.max_files_per_batch)
        label = reason if len(chunks) == 1 else split_reason
        for chunk in chunks:
            batches.append(
                Batch(
                    id=len(batches) + 1,
                    files=tuple(s.path for s in chunk),
                    reason=label,
                    total_score=sum(s.total for s in chunk),
                )
            )

    return sort_batches(batches)


def _chunk(members: list[Score], size: int) -> list[list[Score]]:
    if size < 1:
        return [members]
    return [members[i : i + size] for i in range(0, len(members), size)]


def sort_batches(batches: list[Batch]) -> list[Batch]:
    """Sort descending by total score; ties keep their relative order."""
    return sorted(batches, key=lambda b: b.total_score, reverse=True)


def files_in_batches(batches: list[Batch]) -> int:
    return sum(len(b.files) for b in batches)


def take_batches(batches: list[Batch], n: int) -> list[Batch]:
    """The first ``n`` batches."""
    return batches[: max(n, 0)]


def take_files(batches: list[Batch], max_files: int) -> list[Batch]:
    """The longest prefix of batches holding at most ``max_files`` files.

    Batches are never split: the first batch that would exceed the budget
    ends the prefix.
    """
    result: list[Batch] = []
    count = 0
    for batch in batches:
        if count + len(batch.files) > max_files:
            break
        result.append(batch)
        count += len(batch.files)
    return result
