"""Tickers that drive periodic refreshes."""

import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)


class IntervalTicker:
    """Calls a callback every `interval` seconds on a background thread.

    The first call happens one full interval after `start()`. A callback
    that raises is logged and the ticker keeps running.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._callback: Callable[[], None] | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, callback: Callable[[], None]) -> None:
        if self.running:
            raise RuntimeError("ticker already started")
        self._callback = callback
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="refresh-ticker", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Ticker callback failed")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            if self._thread is not threading.current_thread():
                self._thread.join(timeout=5)
            self._thread = None


class ManualTicker:
    """Ticker fired explicitly, for tests and single-shot runs."""

    def __init__(self) -> None:
        self._callback: Callable[[], None] | None = None
        self.fired = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def fire(self) -> None:
        if self._callback is None:
            return
        self.fired += 1
        self._callback()

    def stop(self) -> None:
        self._callback = None
