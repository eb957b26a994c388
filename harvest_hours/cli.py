"""Command line front end.

Run without arguments for the interactive menu, or pass `--period`,
`--from/--to` or `--watch` for one-shot and unattended use.
"""

from __future__ import annotations

import argparse
import datetime
import logging
import threading

import dateparser

from . import __version__
from .core import TimePeriod, TimeReportClient, local_now
from .display import (
    TITLE_CONFIG_NEEDED,
    TITLE_ERROR,
    TITLE_IDLE,
    TITLE_LOADING,
    describe_period,
    error_message,
    hours_title,
    last_updated,
)
from .login_helper import CredentialStore, clear_stored_credentials, ensure_credentials, prompt_hidden, prompt_visible
from .scheduler import RefreshScheduler
from .settings import load_preferences, parse_period, save_period, save_refresh_minutes
from .storage import EnvironmentStorage, LayeredStorage, MemoryStorage, default_storage

logger = logging.getLogger(__name__)

PROJECT_URL = "https://github.com/kmoya/harvest-billable-time-viewer"

MENU = """
1. Refresh
2. Day
3. Week
4. Month
5. Custom date range
6. Watch (auto refresh)
7. Set refresh interval
8. Edit login details
9. Clear settings
10. About
0. Exit"""

PERIOD_CHOICES = {"2": TimePeriod.DAY, "3": TimePeriod.WEEK, "4": TimePeriod.MONTH}


def parse_date(text: str) -> datetime.date | None:
    parsed = dateparser.parse(text)
    return parsed.date() if parsed else None


class App:
    def __init__(self, storage, session=None, prompt=prompt_visible, secret_prompt=prompt_hidden):
        self.storage = storage
        self.prompt = prompt
        self.secret_prompt = secret_prompt
        self.store = CredentialStore(storage)
        self.prefs = load_preferences(storage)
        self.client = TimeReportClient(self.store, endpoint=self.prefs.endpoint,
                                       session=session, week_start=self.prefs.week_start)
        self.scheduler: RefreshScheduler | None = None
        self.last_update: datetime.datetime | None = None
        self.title = TITLE_IDLE

    def close(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
        self.client.close()

    def show(self, title: str) -> None:
        self.title = title
        print(title)

    # --- Fetching ---

    def refresh(self, interactive: bool = True) -> bool:
        if not self.client.has_valid_credentials():
            self.show(TITLE_CONFIG_NEEDED)
            if not interactive:
                return False
            self.edit_login()
            if not self.client.has_valid_credentials():
                return False

        self.show(TITLE_LOADING)
        hours, error = self.client.fetch_billable_hours(self.prefs.period)
        return self._report(hours, error, describe_period(self.prefs.period, week_start=self.prefs.week_start))

    def fetch_range(self, start: datetime.date, end: datetime.date) -> bool:
        if not self.client.has_valid_credentials():
            self.show(TITLE_CONFIG_NEEDED)
            return False
        self.show(TITLE_LOADING)
        hours, error = self.client.fetch_billable_hours_between(start, end)
        return self._report(hours, error, f"{start.isoformat()} to {end.isoformat()}")

    def _report(self, hours, error, label: str) -> bool:
        if error is not None:
            logger.debug("Fetch failed: %r", error)
            self.show(TITLE_ERROR)
            print(f"Failed to fetch Harvest data: {error_message(error)}")
            return False
        self.last_update = local_now()
        self.show(hours_title(hours))
        print(f"Showing: {label}")
        return True

    # --- Preferences ---

    def select_period(self, period: TimePeriod, refresh: bool = True) -> None:
        save_period(self.storage, period)
        self.prefs = load_preferences(self.storage)
        if refresh and self.client.has_valid_credentials():
            self.refresh()

    def set_interval(self, minutes: int) -> None:
        save_refresh_minutes(self.storage, minutes)
        self.prefs = load_preferences(self.storage)
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.reschedule(minutes * 60)
        print(f"Refreshing every {minutes} minute(s).")

    def edit_login(self, force: bool = False) -> None:
        ensure_credentials(self.store, force_login=force, prompt=self.prompt, secret_prompt=self.secret_prompt)
        self.client.update_credentials()
        if not self.client.has_valid_credentials():
            print("Credentials are incomplete. Account ID, API token and user agent are all required.")

    def clear_settings(self, confirm: bool = True) -> None:
        if confirm:
            answer = self.prompt("This will remove the stored Account ID, API Token and User Agent. Continue? [y/N]: ")
            if answer.lower() not in {"y", "yes"}:
                return
        clear_stored_credentials(self.store)
        self.show(TITLE_CONFIG_NEEDED)

    # --- Loops ---

    def watch(self, stop: threading.Event | None = None) -> None:
        stop = stop or threading.Event()
        self.refresh()
        self.scheduler = RefreshScheduler(lambda: self.refresh(interactive=False), self.prefs.refresh_minutes * 60)
        self.scheduler.start()
        print(f"Refreshing every {self.prefs.refresh_minutes} minute(s). Press Ctrl-C to stop.")
        try:
            while not stop.wait(1):
                pass
        except KeyboardInterrupt:
            print()
        finally:
            self.scheduler.stop()
            self.scheduler = None

    def about(self) -> None:
        print(f"Harvest Time Report {__version__}")
        print("Shows your billable hours from Harvest for the current day, week or month.")
        print("Licensed under the MIT License")
        print(f"Documentation and source code: {PROJECT_URL}")

    def run_menu(self) -> None:
        if self.client.has_valid_credentials():
            self.refresh()
        else:
            self.show(TITLE_CONFIG_NEEDED)

        while True:
            print("\n=== Harvest Billable Hours ===")
            print(f"Showing: {describe_period(self.prefs.period, week_start=self.prefs.week_start)}")
            print(last_updated(self.last_update))
            print(MENU)
            choice = self.prompt("Choose an option: ")

            if choice == "0":
                print("Goodbye!")
                return
            elif choice == "1":
                self.refresh()
            elif choice in PERIOD_CHOICES:
                self.select_period(PERIOD_CHOICES[choice])
            elif choice == "5":
                start = parse_date(self.prompt("From (e.g. '1 Oct', 'last monday', '2026-10-01'): "))
                end = parse_date(self.prompt("To: "))
                if start is None or end is None:
                    print("Could not parse the date range.")
                    continue
                self.fetch_range(start, end)
            elif choice == "6":
                self.watch()
            elif choice == "7":
                raw = self.prompt("Refresh interval in minutes: ")
                try:
                    self.set_interval(int(raw))
                except ValueError:
                    print("Please enter a positive whole number of minutes.")
            elif choice == "8":
                self.edit_login(force=True)
                self.refresh()
            elif choice == "9":
                self.clear_settings()
            elif choice == "10":
                self.about()
            else:
                print("Invalid choice. Please try again.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="harvest-hours", description="Show billable hours from Harvest.")
    parser.add_argument("--period", choices=[p.value.lower() for p in TimePeriod],
                        help="fetch the current day, week or month and exit")
    parser.add_argument("--from", dest="from_date", help="start of an explicit date range")
    parser.add_argument("--to", dest="to_date", help="end of an explicit date range")
    parser.add_argument("--watch", action="store_true", help="keep refreshing until interrupted")
    parser.add_argument("--interval", type=int, help="refresh interval in minutes (saved)")
    parser.add_argument("--login", action="store_true", help="prompt for credentials")
    parser.add_argument("--clear", action="store_true", help="remove stored credentials and exit")
    parser.add_argument("--no-keyring", action="store_true", help="only use environment variables and memory")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None, storage=None, session=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if (args.from_date is None) != (args.to_date is None):
        parser.error("--from and --to must be given together")

    if storage is None:
        if args.no_keyring:
            storage = LayeredStorage(EnvironmentStorage(), MemoryStorage())
        else:
            storage = default_storage()

    try:
        app = App(storage, session=session)
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.clear:
            app.clear_settings(confirm=False)
            return 0
        if args.login:
            app.edit_login(force=True)
        if args.interval is not None:
            if args.interval <= 0:
                parser.error("--interval must be positive")
            app.set_interval(args.interval)
        if args.period:
            app.select_period(parse_period(args.period), refresh=False)

        if args.from_date is not None:
            start, end = parse_date(args.from_date), parse_date(args.to_date)
            if start is None or end is None:
                parser.error(f"Could not parse the date range: {args.from_date} - {args.to_date}")
            return 0 if app.fetch_range(start, end) else 1
        if args.watch:
            app.watch()
            return 0
        if args.period or args.login:
            return 0 if app.refresh(interactive=False) else 1
        if args.interval is not None:
            return 0

        app.run_menu()
        return 0
    except KeyboardInterrupt:
        print()
        return 130
    finally:
        app.close()
