import datetime
import threading

from conftest import FakeSession, make_response
from harvest_hours.core import DecodingError, MissingCredentials, TimePeriod, TimeReportClient, UnexpectedError
from harvest_hours.login_helper import CredentialStore
from harvest_hours.storage import MemoryStorage


class BlockingSession(FakeSession):
    """Holds each request until released so tests can act mid-flight."""

    def __init__(self, response):
        super().__init__(response)
        self.started = threading.Event()
        self.release = threading.Event()

    def send(self, request, **kwargs):
        self.sent.append(request)
        self.started.set()
        self.release.wait(5)
        return self.response


def test_async_fetch_resolves_once_with_callback(store) -> None:
    calls = []
    done = threading.Event()

    def on_done(hours, error):
        calls.append((hours, error))
        done.set()

    client = TimeReportClient(store, session=FakeSession(make_response(200, {"results": [{"billable_hours": 4}]})))

    future = client.fetch_billable_hours_async(TimePeriod.WEEK, callback=on_done)

    assert future.result(timeout=5) == (4.0, None)
    assert done.wait(5)
    client.close()
    assert calls == [(4.0, None)]


def test_async_missing_credentials_resolves_immediately() -> None:
    calls = []
    session = FakeSession(make_response(200, {"results": []}))
    client = TimeReportClient(CredentialStore(MemoryStorage()), session=session)

    future = client.fetch_billable_hours_async(TimePeriod.DAY, callback=lambda h, e: calls.append((h, e)))

    assert future.done()
    hours, error = future.result()
    assert hours is None
    assert isinstance(error, MissingCredentials)
    assert len(calls) == 1
    assert session.sent == []


def test_clear_during_fetch_does_not_affect_it(store) -> None:
    session = BlockingSession(make_response(200, {"results": [{"billable_hours": 1.5}]}))
    client = TimeReportClient(store, session=session)

    future = client.fetch_billable_hours_async(TimePeriod.MONTH)
    assert session.started.wait(5)
    client.clear_credentials()
    session.release.set()

    assert future.result(timeout=5) == (1.5, None)
    assert session.sent[0].headers["Authorization"] == "Bearer token-abc"
    assert not client.has_valid_credentials()
    client.close()


def test_overlapping_fetches_resolve_independently(store) -> None:
    session = FakeSession(make_response(200, {"results": [{"billable_hours": 2}]}))
    client = TimeReportClient(store, session=session)

    first = client.fetch_billable_hours_between_async(datetime.date(2026, 10, 1), datetime.date(2026, 10, 2))
    second = client.fetch_billable_hours_between_async(datetime.date(2026, 10, 2), datetime.date(2026, 10, 3))

    assert first.result(timeout=5) == (2.0, None)
    assert second.result(timeout=5) == (2.0, None)
    assert len(session.sent) == 2
    client.close()


class ExplodingSession(FakeSession):
    def send(self, request, **kwargs):
        self.sent.append(request)
        raise RuntimeError("adapter bug")


def test_deeply_nested_body_is_decoding_error(store) -> None:
    depth = 100000
    body = b'{"results": ' + b"[" * depth + b"]" * depth + b"}"
    calls = []
    done = threading.Event()

    def on_done(hours, error):
        calls.append((hours, error))
        done.set()

    client = TimeReportClient(store, session=FakeSession(make_response(200, body)))

    future = client.fetch_billable_hours_async(TimePeriod.DAY, callback=on_done)

    hours, error = future.result(timeout=5)
    assert done.wait(5)
    client.close()
    assert hours is None
    assert isinstance(error, DecodingError)
    assert len(calls) == 1


def test_unexpected_failure_still_resolves_once(store) -> None:
    calls = []
    done = threading.Event()

    def on_done(hours, error):
        calls.append((hours, error))
        done.set()

    client = TimeReportClient(store, session=ExplodingSession())

    future = client.fetch_billable_hours_async(TimePeriod.WEEK, callback=on_done)

    assert future.exception(timeout=5) is None
    assert done.wait(5)
    client.close()
    assert len(calls) == 1
    hours, error = calls[0]
    assert hours is None
    assert isinstance(error, UnexpectedError)
    assert "adapter bug" in error.message


def test_sync_fetch_returns_unexpected_failure(store) -> None:
    client = TimeReportClient(store, session=ExplodingSession())

    hours, error = client.fetch_billable_hours(TimePeriod.DAY)

    assert hours is None
    assert isinstance(error, UnexpectedError)


def test_close_waits_for_in_flight_fetch(store) -> None:
    session = BlockingSession(make_response(200, {"results": [{"billable_hours": 1}]}))
    client = TimeReportClient(store, session=session)

    future = client.fetch_billable_hours_async(TimePeriod.DAY)
    assert session.started.wait(5)
    threading.Timer(0.05, session.release.set).start()
    client.close()

    assert future.done()
    assert future.result() == (1.0, None)
