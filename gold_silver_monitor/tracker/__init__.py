"""Ratio history tracking."""

from gold_silver_monitor.tracker.controller import HistoryController, RefreshState
from gold_silver_monitor.tracker.scheduler import IntervalTicker, ManualTicker

__all__ = ["HistoryController", "RefreshState", "IntervalTicker", "ManualTicker"]
