from urllib.parse import parse_qs, urlparse

from conftest import VALID_CREDENTIALS, FakeSession, make_response
from harvest_hours.cli import App, main
from harvest_hours.display import TITLE_CONFIG_NEEDED, TITLE_ERROR
from harvest_hours.storage import MemoryStorage

REPORT = {"results": [{"billable_hours": 2.5}, {"billable_hours": 1.25}]}


def scripted(*answers):
    replies = list(answers)
    return lambda prompt: replies.pop(0)


def test_one_shot_period_prints_hours(capsys) -> None:
    storage = MemoryStorage(VALID_CREDENTIALS)
    session = FakeSession(make_response(200, REPORT))

    code = main(["--period", "week"], storage=storage, session=session)

    out = capsys.readouterr().out
    assert code == 0
    assert "⏱ 3.75h" in out
    assert "Showing: Week of" in out
    assert storage.values["SelectedTimePeriod"] == "Week"


def test_one_shot_range(capsys) -> None:
    session = FakeSession(make_response(200, REPORT))

    code = main(["--from", "2026-10-01", "--to", "2026-10-15"], storage=MemoryStorage(VALID_CREDENTIALS),
                session=session)

    assert code == 0
    assert parse_qs(urlparse(session.sent[0].url).query) == {"from": ["2026-10-01"], "to": ["2026-10-15"]}
    assert "Showing: 2026-10-01 to 2026-10-15" in capsys.readouterr().out


def test_one_shot_failure_exit_code(capsys) -> None:
    session = FakeSession(make_response(401, {"error": "invalid_token"}))

    code = main(["--period", "day"], storage=MemoryStorage(VALID_CREDENTIALS), session=session)

    out = capsys.readouterr().out
    assert code == 1
    assert TITLE_ERROR in out
    assert "HTTP error 401" in out


def test_missing_credentials_one_shot_does_not_prompt(capsys) -> None:
    session = FakeSession(make_response(200, REPORT))

    code = main(["--period", "month"], storage=MemoryStorage(), session=session)

    assert code == 1
    assert TITLE_CONFIG_NEEDED in capsys.readouterr().out
    assert session.sent == []


def test_clear_flag_removes_credentials() -> None:
    storage = MemoryStorage(VALID_CREDENTIALS)

    assert main(["--clear"], storage=storage, session=FakeSession()) == 0
    assert "HarvestAPIToken" not in storage.values


def test_menu_select_period_and_exit(capsys) -> None:
    storage = MemoryStorage(VALID_CREDENTIALS)
    session = FakeSession(make_response(200, REPORT))
    app = App(storage, session=session, prompt=scripted("2", "0"))

    app.run_menu()
    app.close()

    assert storage.values["SelectedTimePeriod"] == "Day"
    assert len(session.sent) == 2
    assert "Goodbye!" in capsys.readouterr().out


def test_refresh_without_credentials_opens_login() -> None:
    storage = MemoryStorage()
    session = FakeSession(make_response(200, REPORT))
    app = App(storage, session=session,
              prompt=scripted("123456", "Me (me@example.com)"),
              secret_prompt=scripted("token-abc"))

    assert app.refresh() is True
    assert app.title == "⏱ 3.75h"
    assert storage.values["HarvestAPIToken"] == "token-abc"
    app.close()


def test_menu_clear_settings_needs_confirmation() -> None:
    storage = MemoryStorage(VALID_CREDENTIALS)
    session = FakeSession(make_response(200, REPORT))
    app = App(storage, session=session, prompt=scripted("9", "n", "9", "y", "0"))

    app.run_menu()
    app.close()

    assert app.title == TITLE_CONFIG_NEEDED
    assert "HarvestAccountID" not in storage.values
