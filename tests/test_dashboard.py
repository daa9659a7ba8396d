import time

import pytest

from gold_silver_monitor.data.cache import HistoryStore, SqliteKeyValueStore
from gold_silver_monitor.models import PriceSample
from gold_silver_monitor.tracker import ManualTicker
from gold_silver_monitor.ui import dashboard
from gold_silver_monitor.ui.dashboard import format_card_value

HOUR_MS = 60 * 60 * 1000


def test_currency_format():
    assert format_card_value(2650.4) == "$2,650.40"


def test_ratio_format():
    assert format_card_value(84.5678, is_currency=False) == "84.57"


# =============================================================================
# Shared controller
# =============================================================================

@pytest.fixture
def fresh_cache():
    dashboard.get_controller.clear()
    yield
    for controller in dashboard._controllers.values():
        controller.close()
    dashboard._controllers.clear()
    dashboard.get_controller.clear()


@pytest.fixture
def fetcher(monkeypatch, fake_fetcher_factory):
    fake = fake_fetcher_factory()
    monkeypatch.setattr(dashboard, "GeminiFetcher", lambda settings: fake)
    return fake


def seed_fresh_sample(settings):
    now = int(time.time() * 1000)
    sample = PriceSample.create(2400.0, 30.0, now)
    HistoryStore(SqliteKeyValueStore(settings.db_path)).save([sample])
    return sample


def test_sessions_share_one_controller_and_ticker(settings, fresh_cache, fetcher):
    seed_fresh_sample(settings)
    first_ticker, second_ticker = ManualTicker(), ManualTicker()

    first = dashboard.get_controller(settings.db_path, settings, first_ticker)
    second = dashboard.get_controller(settings.db_path, settings, second_ticker)

    assert first is second
    assert first_ticker.running
    assert not second_ticker.running

    first.close()
    assert not first_ticker.running


def test_sessions_do_not_overwrite_each_other(settings, fresh_cache, fetcher):
    s1 = seed_fresh_sample(settings)
    s2 = PriceSample.create(2410.0, 30.0, s1.timestamp + HOUR_MS)
    s3 = PriceSample.create(2420.0, 30.0, s1.timestamp + 2 * HOUR_MS)
    fetcher.results = [s2, s3]
    ticker = ManualTicker()

    session_a = dashboard.get_controller(settings.db_path, settings, ticker)
    session_b = dashboard.get_controller(settings.db_path, settings, ManualTicker())

    ticker.fire()
    session_b.refresh()

    store = HistoryStore(SqliteKeyValueStore(settings.db_path))
    assert store.load() == [s1, s2, s3]
    assert session_a.history == [s1, s2, s3]
    assert fetcher.price_calls == 2


def test_replaced_controller_releases_its_ticker(settings, fresh_cache, fetcher):
    seed_fresh_sample(settings)
    old_ticker, new_ticker = ManualTicker(), ManualTicker()

    old = dashboard.get_controller(settings.db_path, settings, old_ticker)
    dashboard.get_controller.clear()
    new = dashboard.get_controller(settings.db_path, settings, new_ticker)

    assert old is not new
    assert not old_ticker.running
    assert new_ticker.running
