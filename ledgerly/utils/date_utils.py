"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_query_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or datetime query parameter into a UTC datetime.

    A bare date ("2025-01-31") means midnight UTC of that day.

    Raises:
        ValueError: on a malformed string
    """
    if not value:
        return None
    if "T" not in value and " " not in value.strip():
        return datetime.combine(date.fromisoformat(value.strip()), time.min, tzinfo=timezone.utc)
    return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
