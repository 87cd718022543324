from __future__ import annotations

from datetime import date, timedelta

COMPACT_DATE_LENGTH = 8


def relative_date(n: int, today: date | None = None) -> str:
    """Return the calendar date ``n`` days before today as ``YYYY-MM-DD``."""
    anchor = today or date.today()
    before = anchor - timedelta(days=int(n))
    return f"{before.year:04d}-{before.month:02d}-{before.day:02d}"


def parse_compact_date(value: str) -> date:
    """Parse a ``YYYYMMDD`` string (e.g. the ``ga:date`` dimension) into a date."""
    text = str(value)
    head = text[:COMPACT_DATE_LENGTH]
    if len(head) < COMPACT_DATE_LENGTH or not head.isdigit():
        raise ValueError(f"compact date must start with 8 digits (YYYYMMDD), got {value!r}")
    year, month, day = int(head[0:4]), int(head[4:6]), int(head[6:8])
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"compact date is not a calendar date: {value!r}") from exc
