from __future__ import annotations

import calendar
from datetime import date, timedelta

from fastapi import HTTPException


def parse_month(month: str | None, *, today: date | None = None) -> tuple[int, int]:
    """Parse YYYY-MM; default to the current month when omitted."""
    if month is None:
        current = today or date.today()
        return current.year, current.month

    parts = month.split("-")
    if len(parts) != 2:
        raise HTTPException(status_code=422, detail="Expected YYYY-MM")

    year_text, month_text = parts
    if len(year_text) != 4 or len(month_text) != 2 or not year_text.isdigit() or not month_text.isdigit():
        raise HTTPException(status_code=422, detail="Expected YYYY-MM")

    year = int(year_text)
    month_number = int(month_text)

    if month_number < 1 or month_number > 12:
        raise HTTPException(status_code=422, detail="Expected YYYY-MM")

    return year, month_number


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last calendar day of the month, both inclusive."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_label(month_start: date) -> str:
    """Render month start date as YYYY-MM."""
    return f"{month_start.year:04d}-{month_start.month:02d}"


def trailing_window_start(today: date, days: int) -> date:
    """First day of an N-day lookback ending today (rows dated on/after it are in the window)."""
    return today - timedelta(days=days)


def period_window(period: str, today: date) -> tuple[date, date]:
    """Inclusive date window a budget period currently covers."""
    if period == "weekly":
        return trailing_window_start(today, 7), today
    if period == "yearly":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    return month_bounds(today.year, today.month)
