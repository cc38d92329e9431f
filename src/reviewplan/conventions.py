"""Path conventions: critical areas and per-ecosystem test file naming.

Both are plain lookup tables. Supporting a new ecosystem means adding a
``NamingRule``, not touching the functions below.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

# ── Critical paths ──────────────────────────────────────────────────────────

CRITICAL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/auth/",
        r"/security/",
        r"/crypto/",
        r"/api/",
        r"/handler/",
        r"/controller/",
        r"/middleware/",
        r"/payment/",
        r"/billing/",
        r"/admin/",
        r"password",
        r"secret",
        r"token",
        r"credential",
    )
]


def is_critical_path(path: str) -> bool:
    """True if the path touches a security, auth or money-handling area.

    Directory fragments need a parent directory: ``pkg/auth/x.go`` matches,
    top-level ``auth/x.go`` does not.
    """
    return any(p.search(path) for p in CRITICAL_PATTERNS)


# ── Test naming ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class NamingRule:
    """How a source file ``<dir>/<stem><ext>`` maps to its test file.

    The test lives at ``<dir>/<subdir>/<prefix><stem><suffix><ext>``.
    """

    ecosystem: str
    extensions: tuple[str, ...]
    prefix: str = ""
    suffix: str = ""
    subdir: str = ""


_JS_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx")

TEST_NAMING_RULES: list[NamingRule] = [
    NamingRule("go", (".go",), suffix="_test"),
    NamingRule("javascript", _JS_EXTENSIONS, suffix=".test"),
    NamingRule("javascript", _JS_EXTENSIONS, suffix=".spec"),
    NamingRule("javascript", _JS_EXTENSIONS, subdir="__tests__"),
    NamingRule("python", (".py",), prefix="test_"),
    NamingRule("python", (".py",), suffix="_test"),
    NamingRule("java", (".java", ".kt"), suffix="Test"),
]

TEST_DIRECTORIES = frozenset({"test", "tests", "__tests__"})


def _match_rule(rule: NamingRule, path: str) -> str | None:
    """Return the source path if ``path`` is a test file under ``rule``."""
    directory, base = posixpath.split(path)
    if rule.subdir:
        parent, leaf = posixpath.split(directory)
        if leaf != rule.subdir:
            return None
        directory = parent

    for ext in rule.extensions:
        tail = rule.suffix + ext
        if not (base.startswith(rule.prefix) and base.endswith(tail)):
            continue
        stem = base[len(rule.prefix) : len(base) - len(tail)]
        if not stem:
            continue
        return posixpath.join(directory, stem + ext)
    return None


def source_path_for(test_path: str) -> str | None:
    """Map a test file to the source file it conventionally covers.

    Returns None when the file is not a test by naming convention.
    """
    for rule in TEST_NAMING_RULES:
        source = _match_rule(rule, test_path)
        if source is not None:
            return source
    return None


def is_test_file(path: str) -> bool:
    """True for test files by naming convention or by living in a test directory."""
    if source_path_for(path) is not None:
        return True
    directory = posixpath.dirname(path)
    return any(part in TEST_DIRECTORIES for part in directory.split("/") if part)


def candidate_test_paths(path: str) -> list[str]:
    """Conventional test file paths for a source file."""
    directory, base = posixpath.split(path)
    stem, ext = posixpath.splitext(base)
    if not stem or not ext:
        return []

    candidates: list[str] = []
    for rule in TEST_NAMING_RULES:
        if ext not in rule.extensions:
            continue
        test_dir = posixpath.join(directory, rule.subdir) if rule.subdir else directory
        candidates.append(posixpath.join(test_dir, rule.prefix + stem + rule.suffix + ext))
    return candidates
