"""
Timestamp parsing and the inclusive reporting window.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (or YYYY-MM-DD date) into an aware UTC datetime.
    Returns None for missing or unparsable input instead of raising.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_day(value: str, name: str) -> date:
    try:
        return date.fromisoformat((value or '').strip())
    except ValueError:
        raise ValueError(f"Invalid {name} date '{value}'; expected YYYY-MM-DD")


class DateWindow:
    """
    Inclusive calendar date range selected for a report.
    Membership runs from start 00:00:00.000 UTC to end 23:59:59.999 UTC.
    """

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        self._lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
        self._upper = datetime.combine(end, time.min, tzinfo=timezone.utc) + timedelta(days=1) - timedelta(milliseconds=1)

    @classmethod
    def parse(cls, start: str, end: str) -> 'DateWindow':
        """Build a window from YYYY-MM-DD strings. Raises ValueError on bad input or reversed range."""
        start_day = _parse_day(start, 'start')
        end_day = _parse_day(end, 'end')
        if start_day > end_day:
            raise ValueError(f"Start date {start_day} is after end date {end_day}")
        return cls(start_day, end_day)

    def contains(self, timestamp) -> bool:
        """True when the timestamp falls inside the window; unparsable timestamps are never contained."""
        parsed = parse_timestamp(timestamp)
        if parsed is None:
            return False
        return self._lower <= parsed <= self._upper

    def __eq__(self, other):
        return isinstance(other, DateWindow) and (self.start, self.end) == (other.start, other.end)

    def __hash__(self):
        return hash((self.start, self.end))

    def __str__(self):
        return f"{self.start.isoformat()} to {self.end.isoformat()}"

    def __repr__(self):
        return f"DateWindow({self.start.isoformat()!r}, {self.end.isoformat()!r})"
