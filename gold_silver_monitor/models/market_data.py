"""Data models for market data."""

import math
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class PriceSample:
    """Gold and silver spot prices observed at one instant."""

    timestamp: int  # epoch milliseconds
    gold_price: float
    silver_price: float
    ratio: float

    @classmethod
    def create(cls, gold_price: float, silver_price: float, timestamp: int) -> "PriceSample":
        """Build a sample, deriving the ratio from the two prices."""
        if silver_price == 0:
            raise ValueError("silver price must be non-zero")
        return cls(
            timestamp=int(timestamp),
            gold_price=float(gold_price),
            silver_price=float(silver_price),
            ratio=gold_price / silver_price,
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "goldPrice": self.gold_price,
            "silverPrice": self.silver_price,
            "ratio": self.ratio,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PriceSample":
        """Load a stored sample. Raises KeyError/TypeError/ValueError on bad shape."""
        sample = cls(
            timestamp=int(data["timestamp"]),
            gold_price=float(data["goldPrice"]),
            silver_price=float(data["silverPrice"]),
            ratio=float(data["ratio"]),
        )
        if not all(math.isfinite(v) for v in (sample.gold_price, sample.silver_price, sample.ratio)):
            raise ValueError(f"Non-finite value in stored sample: {data}")
        return sample


@dataclass(frozen=True)
class GroundingSource:
    """Web citation returned with a search-grounded answer."""

    title: str
    uri: str


@dataclass
class AnalysisResult:
    """Market commentary plus the sources it was grounded on."""

    text: str
    sources: list[GroundingSource] = field(default_factory=list)


class Timeframe(Enum):
    """Chart display granularity."""
    HOURLY = "1H"  # every stored sample
    DAILY = "1D"  # last sample of each calendar day

    @property
    def label(self) -> str:
        return "Hourly" if self is Timeframe.HOURLY else "Daily"
