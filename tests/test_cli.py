import sys
import time

import pytest

from gold_silver_monitor import cli
from gold_silver_monitor.data.cache import HistoryStore, SqliteKeyValueStore
from gold_silver_monitor.models import PriceSample


@pytest.fixture
def cache_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("MONITOR_CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return tmp_path


def stored(cache_dir):
    return HistoryStore(SqliteKeyValueStore(cache_dir / "monitor.db"))


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["gold-silver-monitor", *args])
    cli.main()


def test_status_empty(cache_dir, monkeypatch, capsys):
    run_cli(monkeypatch, "--status")
    assert "No samples stored" in capsys.readouterr().out


def test_status_and_daily(cache_dir, monkeypatch, capsys):
    stored(cache_dir).save([
        PriceSample.create(2400.0, 30.0, 1_704_096_000_000),
        PriceSample.create(2460.0, 30.0, 1_704_099_600_000),
    ])

    run_cli(monkeypatch, "--status")
    out = capsys.readouterr().out
    assert "Samples:      2" in out
    assert "Latest ratio: 82.00" in out

    run_cli(monkeypatch, "--daily")
    assert "82.00" in capsys.readouterr().out


def test_clear(cache_dir, monkeypatch):
    store = stored(cache_dir)
    store.save([PriceSample.create(2400.0, 30.0, 1_704_096_000_000)])
    run_cli(monkeypatch, "--clear")
    assert store.load() == []


def install_fetcher(monkeypatch, fake):
    class FakeGeminiFetcher:
        def __init__(self, settings):
            pass

        def __enter__(self):
            return fake

        def __exit__(self, *args):
            pass

    monkeypatch.setattr(cli, "GeminiFetcher", FakeGeminiFetcher)


def now_ms():
    return int(time.time() * 1000)


def test_refresh_and_analyze(cache_dir, monkeypatch, capsys, fake_fetcher_factory):
    fake = fake_fetcher_factory([PriceSample.create(2400.0, 30.0, now_ms())])
    install_fetcher(monkeypatch, fake)

    run_cli(monkeypatch, "--refresh", "--analyze")

    out = capsys.readouterr().out
    assert "Silver looks cheap." in out
    assert "Kitco: https://kitco.com" in out
    assert len(stored(cache_dir).load()) == 1
    assert fake.price_calls == 1


def test_refresh_failure_exits(cache_dir, monkeypatch, fake_fetcher_factory):
    install_fetcher(monkeypatch, fake_fetcher_factory([None]))
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "--refresh")


def test_analyze_with_fresh_history_does_not_fetch(cache_dir, monkeypatch, fake_fetcher_factory):
    stored(cache_dir).save([PriceSample.create(2400.0, 30.0, now_ms())])
    fake = fake_fetcher_factory([PriceSample.create(2500.0, 30.0, now_ms())])
    install_fetcher(monkeypatch, fake)

    run_cli(monkeypatch, "--analyze")

    assert fake.price_calls == 0
    assert fake.analysis_calls == [pytest.approx(80.0)]


def test_analyze_with_stale_history_fetches_first(cache_dir, monkeypatch, fake_fetcher_factory):
    stale = now_ms() - 2 * 60 * 60 * 1000
    stored(cache_dir).save([PriceSample.create(2400.0, 30.0, stale)])
    fake = fake_fetcher_factory([PriceSample.create(2550.0, 30.0, now_ms())])
    install_fetcher(monkeypatch, fake)

    run_cli(monkeypatch, "--analyze")

    assert fake.price_calls == 1
    assert fake.analysis_calls == [pytest.approx(85.0)]
    assert len(stored(cache_dir).load()) == 2


def test_refresh_with_stale_history_fetches_once(cache_dir, monkeypatch, fake_fetcher_factory):
    stale = now_ms() - 2 * 60 * 60 * 1000
    stored(cache_dir).save([PriceSample.create(2400.0, 30.0, stale)])
    fake = fake_fetcher_factory([PriceSample.create(2550.0, 30.0, now_ms())])
    install_fetcher(monkeypatch, fake)

    run_cli(monkeypatch, "--refresh")

    assert fake.price_calls == 1


def test_export(cache_dir, monkeypatch, tmp_path):
    stored(cache_dir).save([PriceSample.create(2400.0, 30.0, 1_704_096_000_000)])
    target = tmp_path / "chart.html"
    run_cli(monkeypatch, "--export", str(target))
    assert target.exists()
