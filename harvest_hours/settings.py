"""User preferences: selected period, refresh interval, week start and endpoint.

Values live in the same storage backend as the credentials, under the
preference names the menu-bar app used (`SelectedTimePeriod`, `RefreshInterval`).
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass

from .core import MONDAY, REPORTS_ENDPOINT, TimePeriod

PERIOD_KEY = "SelectedTimePeriod"
REFRESH_INTERVAL_KEY = "RefreshInterval"
WEEK_START_KEY = "WeekStart"
ENDPOINT_KEY = "ReportsEndpoint"

DEFAULT_PERIOD = TimePeriod.MONTH
DEFAULT_REFRESH_MINUTES = 15


@dataclass(frozen=True)
class Preferences:
    period: TimePeriod = DEFAULT_PERIOD
    refresh_minutes: int = DEFAULT_REFRESH_MINUTES
    week_start: int = MONDAY
    endpoint: str = REPORTS_ENDPOINT


def parse_period(value: str | None) -> TimePeriod | None:
    """Accept the stored value ("Week") or any casing of it ("week")."""
    if not value:
        return None
    for period in TimePeriod:
        if period.value.lower() == value.strip().lower():
            return period
    return None


def parse_refresh_minutes(value: str | None) -> int:
    if value is None or not value.strip():
        return DEFAULT_REFRESH_MINUTES
    try:
        minutes = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{REFRESH_INTERVAL_KEY} must be an integer number of minutes") from exc
    if minutes <= 0:
        raise ValueError(f"{REFRESH_INTERVAL_KEY} must be positive")
    return minutes


def parse_week_start(value: str | None) -> int:
    """Weekday the calendar week starts on: a name ("Sunday", "sun") or 0-6 with 0 = Monday."""
    if value is None or not value.strip():
        return MONDAY
    raw = value.strip()
    if raw.isdigit():
        day = int(raw)
        if day > 6:
            raise ValueError(f"{WEEK_START_KEY} must be between 0 (Monday) and 6 (Sunday)")
        return day
    lowered = raw.lower()
    for index, name in enumerate(calendar.day_name):
        if name.lower() == lowered or calendar.day_abbr[index].lower() == lowered:
            return index
    raise ValueError(f"Invalid {WEEK_START_KEY}: {raw}")


def load_preferences(storage) -> Preferences:
    # Unknown periods fall back to the default instead of failing startup.
    return Preferences(
        period=parse_period(storage.get(PERIOD_KEY)) or DEFAULT_PERIOD,
        refresh_minutes=parse_refresh_minutes(storage.get(REFRESH_INTERVAL_KEY)),
        week_start=parse_week_start(storage.get(WEEK_START_KEY)),
        endpoint=(storage.get(ENDPOINT_KEY) or REPORTS_ENDPOINT).strip(),
    )


def save_period(storage, period: TimePeriod) -> None:
    storage.set(PERIOD_KEY, period.value)


def save_refresh_minutes(storage, minutes: int) -> None:
    if minutes <= 0:
        raise ValueError(f"{REFRESH_INTERVAL_KEY} must be positive")
    storage.set(REFRESH_INTERVAL_KEY, str(minutes))
