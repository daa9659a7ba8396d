"""History policies: staleness, bounded append, and timeframe aggregation."""

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

import pandas as pd

from gold_silver_monitor.config import DUPLICATE_WINDOW_MS, MAX_HISTORY, REFRESH_INTERVAL_MS
from gold_silver_monitor.models import PriceSample, Timeframe


def is_stale(
    series: list[PriceSample], now_ms: int, interval_ms: int = REFRESH_INTERVAL_MS
) -> bool:
    """True if there are no samples or the newest is older than the interval."""
    if not series:
        return True
    return now_ms - series[-1].timestamp > interval_ms


def append_sample(
    base: list[PriceSample],
    sample: PriceSample,
    max_len: int = MAX_HISTORY,
    window_ms: int = DUPLICATE_WINDOW_MS,
) -> list[PriceSample]:
    """
    Append a sample to the series, bounded and de-duplicated.

    A sample landing within `window_ms` of the last entry is dropped and
    `base` is returned unchanged. Otherwise a new list is returned holding
    at most the `max_len` most recent samples.
    """
    if base and sample.timestamp - base[-1].timestamp < window_ms:
        return base

    updated = [*base, sample]
    if len(updated) > max_len:
        updated = updated[-max_len:]
    return updated


def _resolve_tz(tz: tzinfo | str | None) -> tzinfo | None:
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def day_key(timestamp: int, tz: tzinfo | str | None = None):
    """Calendar date of an epoch-ms timestamp (local time zone when tz is None)."""
    return datetime.fromtimestamp(timestamp / 1000, _resolve_tz(tz)).date()


def aggregate(
    series: list[PriceSample],
    timeframe: Timeframe,
    tz: tzinfo | str | None = None,
) -> list[PriceSample]:
    """
    Project the series onto a display timeframe.

    HOURLY returns the series itself. DAILY keeps the last sample of each
    calendar day, in the order each day first appears. Input is expected to
    be in non-decreasing timestamp order; the output is not re-sorted.
    """
    if timeframe is Timeframe.HOURLY or not series:
        return series

    tz = _resolve_tz(tz)
    frame = pd.DataFrame({
        "day": [day_key(s.timestamp, tz) for s in series],
        "position": range(len(series)),
    })
    last_positions = frame.groupby("day", sort=False)["position"].last()
    return [series[int(i)] for i in last_positions]


def to_frame(series: list[PriceSample], tz: tzinfo | str | None = None) -> pd.DataFrame:
    """
    Convert samples to a DataFrame indexed by time.

    Returns:
        DataFrame with DatetimeIndex (tz-aware when tz is given, local naive
        otherwise) and gold, silver, ratio columns
    """
    if not series:
        return pd.DataFrame(columns=["gold", "silver", "ratio"])

    tz = _resolve_tz(tz)
    index = pd.DatetimeIndex(
        [datetime.fromtimestamp(s.timestamp / 1000, tz) for s in series], name="time"
    )
    return pd.DataFrame(
        {
            "gold": [s.gold_price for s in series],
            "silver": [s.silver_price for s in series],
            "ratio": [s.ratio for s in series],
        },
        index=index,
    )


def summarize(series: list[PriceSample], tz: tzinfo | str | None = None) -> dict:
    """Count, time span (local time when tz is None) and ratio range of the series."""
    if not series:
        return {
            "count": 0,
            "first": None,
            "last": None,
            "latest_ratio": None,
            "min_ratio": None,
            "max_ratio": None,
            "mean_ratio": None,
        }

    tz = _resolve_tz(tz)
    ratios = pd.Series([s.ratio for s in series])
    return {
        "count": len(series),
        "first": datetime.fromtimestamp(series[0].timestamp / 1000, tz),
        "last": datetime.fromtimestamp(series[-1].timestamp / 1000, tz),
        "latest_ratio": series[-1].ratio,
        "min_ratio": float(ratios.min()),
        "max_ratio": float(ratios.max()),
        "mean_ratio": float(ratios.mean()),
    }
