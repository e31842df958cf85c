"""
Streak tracking — pure functions, no DB access.

Dates are UTC calendar days, either `date` values or "YYYY-MM-DD" strings.
"today" is always passed in; only the API layer reads the clock.
"""
import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ONE_DAY = timedelta(days=1)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_day(value: str | date) -> date:
    """Strict YYYY-MM-DD parse. Raises ValueError rather than guessing."""
    if isinstance(value, datetime):
        raise ValueError(f"expected a calendar day, got datetime {value!r}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DAY_RE.match(value):
        raise ValueError(f"invalid day: {value!r}")
    return date.fromisoformat(value)


def current_streak(dates: Iterable[str | date], today: date) -> int:
    """
    Consecutive fulfilled days ending today, or ending yesterday when today
    is still open. 0 once neither day is in the set.
    """
    days = {parse_day(d) for d in dates}
    if not days:
        return 0

    if today in days:
        cursor = today
    elif today - ONE_DAY in days:
        cursor = today - ONE_DAY
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= ONE_DAY
    return streak


def longest_streak(dates: Iterable[str | date]) -> int:
    """Longest run of consecutive days anywhere in the history."""
    days = sorted({parse_day(d) for d in dates})
    if not days:
        return 0

    longest = run = 1
    for prev, curr in zip(days, days[1:]):
        if (curr - prev).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest
