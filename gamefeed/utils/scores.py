"""
Score helpers: clamping, release age, and search relevance used by the scorer and engine.
"""

from datetime import datetime, timezone
from typing import Optional

DAYS_PER_YEAR = 365.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def parse_release_date(date_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date/datetime string; None when absent or unparseable."""
    if not date_str:
        return None
    try:
        dt = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def years_since(
    date_str: Optional[str],
    now: Optional[datetime] = None,
    default: float = 10.0,
) -> float:
    """
    Years elapsed since a release date, never negative.
    Absent or unparseable dates return `default`.
    """
    dt = parse_release_date(date_str)
    if dt is None:
        return default
    now = now or datetime.now(timezone.utc)
    return max(0.0, (now - dt).total_seconds() / 86400.0 / DAYS_PER_YEAR)


def search_relevance(name: str, search: Optional[str]) -> float:
    """1.0 exact, 0.9 prefix, 0.7 substring (case-insensitive); 0 otherwise or without search."""
    if not search or not name:
        return 0.0
    q = search.lower()
    n = name.lower()
    if n == q:
        return 1.0
    if n.startswith(q):
        return 0.9
    if q in n:
        return 0.7
    return 0.0
