"""Output formatters for review plans and sessions."""

from reviewplan.formatters.json_output import format_plan_json, format_sessions_json
from reviewplan.formatters.terminal import format_plan, format_session, format_session_list

__all__ = [
    "format_plan",
    "format_plan_json",
    "format_session",
    "format_session_list",
    "format_sessions_json",
]
