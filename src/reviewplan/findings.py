"""Load structured review findings from JSON."""

from __future__ import annotations

import json
from pathlib import Path

from reviewplan.models import Finding

_REQUIRED = ("file", "description")


def parse_findings(data: object) -> list[Finding]:
    """Build findings from a JSON list or an object with a ``findings`` list."""
    if isinstance(data, dict):
        data = data.get("findings", [])
    if not isinstance(data, list):
        raise ValueError("findings must be a list or an object with a 'findings' list")

    findings: list[Finding] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"finding {i}: expected an object")
        missing = [k for k in _REQUIRED if not item.get(k)]
        if missing:
            raise ValueError(f"finding {i}: missing {', '.join(missing)}")
        findings.append(Finding.from_dict(item))
    return findings


def load_findings(path: Path) -> list[Finding]:
    return parse_findings(json.loads(path.read_text(encoding="utf-8")))
