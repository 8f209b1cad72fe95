"""Current UTC time, available to every agent as a read-only tool."""

from datetime import datetime, timezone

from langchain_core.tools import tool


@tool
def now() -> str:
    """Return the current UTC date and time in ISO 8601 format.

    Useful when a task depends on today's date, for timestamps in results,
    or for judging how recent a source is.

    Example:
        now() -> "2025-10-23T10:30:00.123456+00:00"
    """
    return datetime.now(timezone.utc).isoformat()


__all__ = ["now"]
