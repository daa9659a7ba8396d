"""Data models."""

from .market_data import PriceSample, GroundingSource, AnalysisResult, Timeframe

__all__ = ["PriceSample", "GroundingSource", "AnalysisResult", "Timeframe"]
