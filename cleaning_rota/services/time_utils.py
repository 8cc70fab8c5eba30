"""Date and time helper functions for daily and weekly rota logic."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def monday_for(day: date) -> date:
    """Return Monday date for the provided day."""

    return day - timedelta(days=day.weekday())


def iso_week_bounds(day: date) -> tuple[date, date]:
    """Return the Monday..Sunday span containing the provided day."""

    start = monday_for(day)
    return start, start + timedelta(days=6)


def weekday_index(day: date) -> int:
    """Weekday number as stored in availability rules: 0=Sunday .. 6=Saturday."""

    return (day.weekday() + 1) % 7
