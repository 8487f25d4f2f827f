"""Date Handling - Pure functions for canonical days and report windows.

A canonical day is a plain calendar date. It is stored as an ISO string
(YYYY-MM-DD) and used as the document ID of per-day logs, so one log per
user per day is guaranteed by the storage path itself.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from enum import Enum


class Period(str, Enum):
    """Reporting window accepted by aggregate endpoints."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"


def utc_today() -> date:
    """Today's date in UTC."""
    return datetime.now(timezone.utc).date()


def canonical_day(value: str | date | None, today: date | None = None) -> date:
    """Normalize a client-supplied date to a canonical calendar day.

    Args:
        value: ``YYYY-MM-DD``, an ISO datetime, a date, or None/empty
        today: Fallback used when value is missing (defaults to UTC today)

    Returns:
        The calendar day. Aware datetimes are converted to UTC first.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None or value == "":
        return today or utc_today()

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    elif not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")
    else:
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def subtract_months(day: date, months: int) -> date:
    """Move a date back by whole months, clamping to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def window_start(period: Period, today: date | None = None) -> date:
    """First day (inclusive) of a weekly or monthly report window.

    Weekly covers the last 7 days, monthly goes back one calendar month.
    """
    today = today or utc_today()
    if period == Period.WEEKLY:
        return today - timedelta(days=7)
    return subtract_months(today, 1)


def week_start(day: date) -> date:
    """Sunday that starts the week containing ``day``."""
    # weekday(): Monday=0 ... Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)
