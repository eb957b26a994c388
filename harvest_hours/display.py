"""Status titles and labels shown after each refresh."""

from __future__ import annotations

import datetime

from .core import MONDAY, FetchError, TimePeriod, date_range_for

ICON = "⏱"
TITLE_IDLE = f"{ICON} --"
TITLE_LOADING = f"{ICON} Loading..."
TITLE_CONFIG_NEEDED = f"{ICON} Config needed"
TITLE_ERROR = f"{ICON} Error"


def hours_title(hours: float) -> str:
    return f"{ICON} {hours:.2f}h"


def _month_day(value: datetime.datetime) -> str:
    return f"{value:%b} {value.day}"


def describe_period(period: TimePeriod, now: datetime.datetime | None = None, week_start: int = MONDAY) -> str:
    """Human label for the range a period covers, e.g. "Week of Oct 19 - Oct 26"."""
    rng = date_range_for(period, now, week_start)
    if period is TimePeriod.DAY:
        return f"{rng.start:%B} {rng.start.day}, {rng.start.year}"
    if period is TimePeriod.WEEK:
        return f"Week of {_month_day(rng.start)} - {_month_day(rng.end)}"
    return f"{rng.start:%B %Y}"


def last_updated(when: datetime.datetime | None) -> str:
    if when is None:
        return "Last updated: never"
    return f"Last updated: {when:%H:%M}"


def error_message(error: Exception) -> str:
    if isinstance(error, FetchError):
        return error.message
    return str(error)
