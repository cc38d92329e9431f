"""Configuration loading and defaults."""

from __future__ import annotations

import hashlib
import os
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from reviewplan.models import Weights

STATE_DIR_ENV = "REVIEWPLAN_STATE_DIR"


class SortOrder(Enum):
    PRIORITY = "priority"
    ALPHA = "alpha"
    NONE = "none"  # keep diff order


class OnLimit(Enum):
    CONTINUE = "continue"
    STOP = "stop"


@dataclass
class BatchOptions:
    max_files_per_batch: int = 50
    max_total_files: int = 0  # 0 = unlimited
    pair_tests: bool = True
    group_by_package: bool = True


@dataclass
class ReviewConfig:
    max_files: int = 15  # 0 = unlimited
    max_batches: int = 0  # 0 = select by file count only
    on_limit: OnLimit = OnLimit.CONTINUE
    sort: SortOrder = SortOrder.PRIORITY


@dataclass
class SessionConfig:
    state_dir: str = ""

    def resolve_state_dir(self, project_path: str) -> Path:
        """Get the state directory from config, env var, or the hashed default."""
        if self.state_dir:
            return Path(self.state_dir).expanduser()
        env_dir = os.environ.get(STATE_DIR_ENV, "")
        if env_dir:
            return Path(env_dir).expanduser()
        return default_state_dir(project_path)


def hash_path(path: str) -> str:
    """Short SHA-256 of a path, used to name per-project state directories."""
    return hashlib.sha256(path.encode()).hexdigest()[:16]


def default_state_dir(project_path: str) -> Path:
    """~/.reviewplan/review/<hash of the absolute project path>."""
    absolute = str(Path(project_path).resolve())
    return Path.home() / ".reviewplan" / "review" / hash_path(absolute)


@dataclass
class ReviewplanConfig:
    weights: Weights = field(default_factory=Weights)
    batching: BatchOptions = field(default_factory=BatchOptions)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    sessions: SessionConfig = field(default_factory=SessionConfig)
    repo_path: str = "."

    @classmethod
    def load(cls, path: Path | None = None) -> ReviewplanConfig:
        """Load config from reviewplan.toml, falling back to defaults."""
        if path is None:
            path = Path("reviewplan.toml")
        if not path.exists():
            return cls()

        with open(path, "rb") as f:
            raw = tomllib.load(f)

        config = cls()

        if "scoring" in raw:
            s = raw["scoring"]
            config.weights = Weights(
                lines_changed=s.get("lines_changed", config.weights.lines_changed),
                criticality=s.get("criticality", config.weights.criticality),
                churn=s.get("churn", config.weights.churn),
                test_coverage=s.get("test_coverage", config.weights.test_coverage),
                recency=s.get("recency", config.weights.recency),
            )

        if "batching" in raw:
            b = raw["batching"]
            config.batching = BatchOptions(
                max_files_per_batch=b.get(
                    "max_files_per_batch", config.batching.max_files_per_batch
                ),
                max_total_files=b.get("max_total_files", config.batching.max_total_files),
                pair_tests=b.get("pair_tests", config.batching.pair_tests),
                group_by_package=b.get("group_by_package", config.batching.group_by_package),
            )

        if "review" in raw:
            r = raw["review"]
            config.review = ReviewConfig(
                max_files=r.get("max_files", config.review.max_files),
                max_batches=r.get("max_batches", config.review.max_batches),
                on_limit=OnLimit(r.get("on_limit", config.review.on_limit.value)),
                sort=SortOrder(r.get("sort", config.review.sort.value)),
            )

        if "sessions" in raw:
            config.sessions = SessionConfig(
                state_dir=raw["sessions"].get("state_dir", ""),
            )

        return config


DEFAULT_CONFIG_TEMPLATE = """\
[scoring]
# Fractions of the 0-100 priority score; keep the sum at 1.0
lines_changed = 0.30
criticality = 0.25
churn = 0.20
test_coverage = 0.15
recency = 0.10

[batching]
max_files_per_batch = 50
max_total_files = 0
pair_tests = true
group_by_package = true

[review]
max_files = 15
max_batches = 0
on_limit = "continue"  # or "stop"
sort = "priority"  # priority, alpha, none

[sessions]
# defaults to REVIEWPLAN_STATE_DIR or ~/.reviewplan/review/<project hash>
state_dir = ""
"""
