"""Tests for the terminal CLI against a temporary SQLite store."""

import pytest

from conftest import make_trade
from ledger import cli
from ledger.config import Settings
from ledger.database import make_engine
from ledger.models.trade import Market
from ledger.services.store import SqlTradeStore


@pytest.fixture
def sqlite_settings(tmp_path, monkeypatch) -> Settings:
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    store = SqlTradeStore(make_engine(url))
    store.create(make_trade(None, stock_name="台積電", sell_price=110).to_record())
    store.create(make_trade(None, market=Market.US, stock_name="Apple", stock_symbol="AAPL").to_record())
    settings = Settings(store_url=url)
    monkeypatch.setattr(cli, "settings", settings)
    return settings


def test_list_prints_one_market(sqlite_settings, capsys):
    assert cli.main(["list", "--market", "TW"]) == 0
    out = capsys.readouterr().out
    assert "台股: 1 trades" in out
    assert "台積電" in out
    assert "Apple" not in out


def test_list_with_sort(sqlite_settings, capsys):
    assert cli.main(["list", "--market", "US", "--sort", "profit", "--direction", "asc"]) == 0
    assert "AAPL Apple" in capsys.readouterr().out


def test_summary(sqlite_settings, capsys):
    assert cli.main(["summary", "--market", "TW"]) == 0
    out = capsys.readouterr().out
    assert "Closed trades:     1 (1 winning)" in out
    assert "9,372" in out


def test_unknown_sort_key_exits(sqlite_settings):
    with pytest.raises(SystemExit):
        cli.main(["list", "--sort", "volume"])
