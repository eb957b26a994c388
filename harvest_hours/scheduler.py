"""Recurring refresh on a background timer.

Only one timer is ever active; changing the interval replaces it.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class RefreshScheduler:
    def __init__(self, callback, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.callback = callback
        self.interval_seconds = interval_seconds
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        with self._lock:
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def reschedule(self, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        with self._lock:
            self.interval_seconds = interval_seconds
            if self._timer is not None:
                self._schedule()

    def _schedule(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        timer = threading.Timer(self.interval_seconds, self._fire)
        timer.daemon = True
        self._timer = timer
        timer.start()
        logger.debug("Next refresh in %.0f seconds", self.interval_seconds)

    def _fire(self) -> None:
        with self._lock:
            # A timer replaced by reschedule()/stop() may still fire once.
            if self._timer is not threading.current_thread():
                return
        try:
            self.callback()
        except Exception:
            logger.exception("Scheduled refresh failed")
        with self._lock:
            if self._timer is threading.current_thread():
                self._schedule()
