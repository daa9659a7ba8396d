import pytest

from gold_silver_monitor.config import Settings
from gold_silver_monitor.data.cache import HistoryStore, MemoryKeyValueStore
from gold_silver_monitor.models import AnalysisResult, GroundingSource, PriceSample


class FakeFetcher:
    """Returns queued samples; None or an exception instance simulate failures."""

    def __init__(self, results=None, analysis=None):
        self.results = list(results or [])
        self.analysis = analysis or AnalysisResult(
            text="Silver looks cheap.",
            sources=[GroundingSource(title="Kitco", uri="https://kitco.com")],
        )
        self.price_calls = 0
        self.analysis_calls = []

    def fetch_live_prices(self):
        self.price_calls += 1
        result = self.results.pop(0) if self.results else None
        if isinstance(result, Exception):
            raise result
        return result

    def fetch_market_analysis(self, ratio):
        self.analysis_calls.append(ratio)
        return self.analysis


class FakeClock:
    def __init__(self, now_ms=1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms


@pytest.fixture
def settings(tmp_path):
    return Settings(gemini_api_key="test-key", cache_dir=tmp_path / "cache")


@pytest.fixture
def make_sample():
    def _make(timestamp, gold=2400.0, silver=30.0):
        return PriceSample.create(gold, silver, timestamp)
    return _make


@pytest.fixture
def memory_store():
    return HistoryStore(MemoryKeyValueStore())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_fetcher_factory():
    return FakeFetcher
