"""Dashboard controller: owns the ratio history and decides when to fetch."""

import logging
import time
from datetime import tzinfo
from enum import Enum

from gold_silver_monitor.config import Settings, DUPLICATE_WINDOW_MS, MAX_HISTORY
from gold_silver_monitor.models import AnalysisResult, PriceSample, Timeframe
from gold_silver_monitor.tracker.history import aggregate, append_sample, is_stale


logger = logging.getLogger(__name__)


FETCH_FAILED_MESSAGE = "Unable to retrieve live prices. Please try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class RefreshState(Enum):
    """Refresh lifecycle. There is no error state; errors live in `error`."""
    IDLE = "idle"
    FETCHING = "fetching"


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryController:
    """
    Holds the in-memory series and applies the refresh, append and
    aggregation policies for the presentation layer.

    Args:
        store: HistoryStore-like object with load/save/clear
        fetcher: GeminiFetcher-like object with fetch_live_prices and
            fetch_market_analysis
        settings: Application settings (only the refresh interval is used)
        clock: Callable returning epoch milliseconds
        tz: Time zone for daily grouping (None = local)
    """

    def __init__(
        self,
        store,
        fetcher,
        settings: Settings | None = None,
        clock=None,
        tz: tzinfo | str | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.settings = settings or Settings()
        self.clock = clock or _now_ms
        self.tz = tz
        self.max_history = MAX_HISTORY
        self.duplicate_window_ms = DUPLICATE_WINDOW_MS

        self.history: list[PriceSample] = []
        self.current: PriceSample | None = None
        self.analysis: AnalysisResult | None = None
        self.timeframe = Timeframe.HOURLY
        self.state = RefreshState.IDLE
        self.analyzing = False
        self.error: str | None = None
        self.refreshed_on_start = False
        self._ticker = None

    @property
    def loading(self) -> bool:
        return self.state is RefreshState.FETCHING

    @property
    def display_history(self) -> list[PriceSample]:
        """History projected onto the selected timeframe."""
        return aggregate(self.history, self.timeframe, self.tz)

    def load(self) -> list[PriceSample]:
        """Install the persisted history as the current series."""
        stored = self.store.load()
        self.history = stored
        if stored:
            self.current = stored[-1]
        logger.info(f"Loaded {len(stored)} stored samples")
        return stored

    def start(self, ticker=None) -> "HistoryController":
        """
        Load persisted history, fetch at once if it is stale, and attach the
        periodic ticker if one is given. A previously attached ticker is
        stopped first. `refreshed_on_start` records whether a fetch ran.
        """
        stored = self.load()

        if ticker is not None:
            self.close()
            self._ticker = ticker
            ticker.start(self.refresh)

        self.refreshed_on_start = is_stale(
            stored, self.clock(), self.settings.refresh_interval_ms
        )
        if self.refreshed_on_start:
            logger.info("History is stale, refreshing")
            # Pass the loaded snapshot so the append can't race the load
            self.refresh(base=stored)
        return self

    def refresh(self, base: list[PriceSample] | None = None) -> bool:
        """
        Fetch live prices and append them to the history.

        Returns:
            True if a valid sample was fetched (even if it was a duplicate)
        """
        self.state = RefreshState.FETCHING
        self.error = None
        try:
            sample = self.fetcher.fetch_live_prices()
            if sample is None:
                self.error = FETCH_FAILED_MESSAGE
                return False

            self.current = sample
            series = base if base is not None else self.history
            updated = append_sample(
                series, sample, self.max_history, self.duplicate_window_ms
            )
            if updated is series:
                logger.info("Skipping sample within the duplicate window")
            self.store.save(updated)
            self.history = updated
            return True
        except Exception:
            logger.exception("Refresh failed")
            self.error = UNEXPECTED_ERROR_MESSAGE
            return False
        finally:
            self.state = RefreshState.IDLE

    def run_analysis(self) -> AnalysisResult | None:
        """Request commentary on the current ratio. No-op without data."""
        if self.current is None:
            return None
        self.analyzing = True
        try:
            self.analysis = self.fetcher.fetch_market_analysis(self.current.ratio)
        except Exception:
            logger.exception("Analysis failed")
        finally:
            self.analyzing = False
        return self.analysis

    def select_timeframe(self, timeframe: Timeframe | str) -> None:
        self.timeframe = Timeframe(timeframe)

    def clear_history(self) -> None:
        """Drop the stored and in-memory history."""
        self.store.clear()
        self.history = []
        self.current = None

    def close(self) -> None:
        """Stop the periodic ticker."""
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def __enter__(self) -> "HistoryController":
        return self

    def __exit__(self, *args) -> None:
        self.close()
