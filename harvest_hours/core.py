"""core

Harvest time-report retrieval and aggregation.

`TimeReportClient` issues one authenticated GET against the Harvest
project-time report and sums `billable_hours` across the returned rows.
Every fetch returns a `(hours, error)` tuple with exactly one side set;
errors are `FetchError` instances and are returned, never raised.
"""

from __future__ import annotations

import datetime
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests
from dateutil import tz
from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

REPORTS_ENDPOINT = "https://api.harvestapp.com/v2/reports/time/projects"
ACCOUNT_HEADER = "Harvest-Account-ID"
QUERY_DATE_FORMAT = "%Y-%m-%d"

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)
_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


class TimePeriod(Enum):
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"


@dataclass(frozen=True)
class DateRange:
    start: datetime.datetime
    end: datetime.datetime

    def query_params(self) -> dict:
        return {"from": query_date(self.start), "to": query_date(self.end)}


@dataclass(frozen=True)
class ReportResult:
    billable_hours: float
    client_name: Optional[str] = None
    project_name: Optional[str] = None

    @classmethod
    def from_json(cls, item) -> "ReportResult":
        if not isinstance(item, dict):
            raise TypeError(f"expected a report row object, got {type(item).__name__}")
        hours = item["billable_hours"]
        if isinstance(hours, bool) or not isinstance(hours, (int, float)):
            raise TypeError(f"billable_hours must be a number, got {hours!r}")
        client_name = item.get("client_name")
        project_name = item.get("project_name")
        for name in (client_name, project_name):
            if name is not None and not isinstance(name, str):
                raise TypeError(f"expected a string or null, got {name!r}")
        return cls(float(hours), client_name, project_name)


# --- Errors ---

class FetchError(Exception):
    """Base class for everything a fetch can hand back instead of hours."""

    message = "Failed to fetch Harvest data"

    def __str__(self):
        return self.message


class MissingCredentials(FetchError):
    message = "API credentials are missing. Please configure your Account ID and API Token."


class InvalidURL(FetchError):
    message = "Invalid API URL"


class NoData(FetchError):
    message = "No data received from API"


class InvalidResponse(FetchError):
    message = "Invalid response from API"


class HttpError(FetchError):
    def __init__(self, status_code: int):
        super().__init__(status_code)
        self.status_code = status_code

    @property
    def message(self):
        return f"HTTP error {self.status_code}. Please check your credentials and try again."


class NetworkError(FetchError):
    def __init__(self, cause: Exception):
        super().__init__(cause)
        self.cause = cause

    @property
    def message(self):
        return f"Network error: {self.cause}"


class DecodingError(FetchError):
    def __init__(self, cause: Exception):
        super().__init__(cause)
        self.cause = cause

    @property
    def message(self):
        return f"Failed to parse API response: {self.cause}"


class UnexpectedError(FetchError):
    def __init__(self, cause: Exception):
        super().__init__(cause)
        self.cause = cause

    @property
    def message(self):
        return f"Unexpected error while fetching Harvest data: {self.cause!r}"


# --- Date ranges ---

def local_now() -> datetime.datetime:
    return datetime.datetime.now(tz.tzlocal())


def query_date(value) -> str:
    return value.strftime(QUERY_DATE_FORMAT)


def date_range_for(period: TimePeriod, now: datetime.datetime | None = None,
                   week_start: int = MONDAY) -> DateRange:
    """Return the calendar day, week or month containing `now`.

    Naive datetimes are read as local time; aware ones keep their own zone.
    The range is half-open: `start <= now < end`.
    """
    if now is None:
        now = local_now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz.tzlocal())

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is TimePeriod.DAY:
        start = midnight
        step = relativedelta(days=1)
    elif period is TimePeriod.WEEK:
        if week_start not in range(7):
            raise ValueError(f"week_start must be 0 (Monday) to 6 (Sunday), got {week_start!r}")
        start = midnight + relativedelta(weekday=_WEEKDAYS[week_start](-1))
        step = relativedelta(weeks=1)
    elif period is TimePeriod.MONTH:
        start = midnight.replace(day=1)
        step = relativedelta(months=1)
    else:
        raise ValueError(f"Unknown time period: {period!r}")
    return DateRange(start, start + step)


# --- Decoding ---

def parse_report(payload) -> list[ReportResult]:
    if not isinstance(payload, dict) or "results" not in payload:
        raise ValueError("expected an object with a 'results' key")
    rows = payload["results"]
    if not isinstance(rows, list):
        raise TypeError("'results' must be a list")
    return [ReportResult.from_json(item) for item in rows]


def total_billable_hours(results) -> float:
    return sum((r.billable_hours for r in results), 0.0)


# --- Client ---

class TimeReportClient:
    def __init__(self, store, endpoint: str = REPORTS_ENDPOINT, session: requests.Session | None = None,
                 week_start: int = MONDAY, executor: ThreadPoolExecutor | None = None):
        self.store = store
        self.endpoint = endpoint
        self.week_start = week_start
        self._owns_session = session is None
        self.session = session or requests.Session()
        self._owns_executor = executor is None
        self._executor = executor

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        if self._owns_executor and self._executor is not None:
            # Waits for in-flight fetches so no worker outlives the session.
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._owns_session:
            self.session.close()

    def has_valid_credentials(self) -> bool:
        return self.store.valid()

    def update_credentials(self) -> None:
        self.store.update()

    def clear_credentials(self) -> None:
        self.store.clear()

    # Synchronous API

    def fetch_billable_hours(self, period: TimePeriod = TimePeriod.MONTH, now=None):
        credentials = self.store.credentials
        if not credentials.valid():
            return None, MissingCredentials()
        rng = date_range_for(period, now, self.week_start)
        return self._fetch_outcome(credentials, rng.start, rng.end)

    def fetch_billable_hours_between(self, start, end):
        return self._fetch_outcome(self.store.credentials, start, end)

    # Asynchronous API

    def fetch_billable_hours_async(self, period: TimePeriod = TimePeriod.MONTH, callback=None, now=None) -> Future:
        credentials = self.store.credentials
        if not credentials.valid():
            return self._resolved((None, MissingCredentials()), callback)
        rng = date_range_for(period, now, self.week_start)
        return self._submit(credentials, rng.start, rng.end, callback)

    def fetch_billable_hours_between_async(self, start, end, callback=None) -> Future:
        credentials = self.store.credentials
        if not credentials.valid():
            return self._resolved((None, MissingCredentials()), callback)
        return self._submit(credentials, start, end, callback)

    def _submit(self, credentials, start, end, callback) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="harvest-fetch")
        future = self._executor.submit(self._fetch_outcome, credentials, start, end)
        if callback is not None:
            future.add_done_callback(lambda f: callback(*f.result()))
        return future

    def _fetch_outcome(self, credentials, start, end):
        # Every call resolves to (hours, error), whatever _fetch runs into.
        try:
            return self._fetch(credentials, start, end)
        except Exception as e:
            return None, UnexpectedError(e)

    @staticmethod
    def _resolved(outcome, callback) -> Future:
        future = Future()
        future.set_result(outcome)
        if callback is not None:
            callback(*outcome)
        return future

    def _fetch(self, credentials, start, end):
        if not credentials.valid():
            return None, MissingCredentials()

        headers = {
            "Authorization": f"Bearer {credentials.api_token.strip()}",
            ACCOUNT_HEADER: credentials.account_id.strip(),
            "User-Agent": credentials.user_agent.strip(),
            "Accept": "application/json",
        }
        params = {"from": query_date(start), "to": query_date(end)}
        try:
            response = self.session.get(self.endpoint, params=params, headers=headers)
        except (requests.exceptions.MissingSchema, requests.exceptions.InvalidURL,
                requests.exceptions.InvalidSchema):
            return None, InvalidURL()
        except requests.RequestException as e:
            return None, NetworkError(e)

        status = getattr(response, "status_code", None)
        if isinstance(status, bool) or not isinstance(status, int):
            return None, InvalidResponse()
        if status != 200:
            return None, HttpError(status)
        if not response.content:
            return None, NoData()

        try:
            results = parse_report(response.json())
        except (ValueError, TypeError, KeyError, RecursionError) as e:
            return None, DecodingError(e)
        return total_billable_hours(results), None
