"""Shared fixtures: trade factory and an in-memory store with switchable failures."""

import threading
from datetime import date, datetime, timezone

import pytest

from ledger.models.trade import Closed, Holding, Market, Trade
from ledger.services.store import StoreError, TradeStore, merge_record

NOW = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)


def make_trade(
    trade_id: str | None = "t1",
    *,
    market: Market = Market.TW,
    stock_name: str = "台積電",
    stock_symbol: str = "2330",
    quantity: float = 1000,
    buy_price: float = 100,
    buy_date: date | None = date(2024, 1, 1),
    sell_price: float | None = None,
    sell_date: date | None = None,
    expected_sell_price: float | None = None,
    note: str = "",
) -> Trade:
    if sell_price is not None:
        position = Closed(sell_price=sell_price, sell_date=sell_date or date(2024, 7, 1))
    else:
        position = Holding(expected_sell_price=expected_sell_price)
    return Trade(
        id=trade_id,
        market=market,
        stock_symbol=stock_symbol,
        stock_name=stock_name,
        quantity=quantity,
        buy_date=buy_date,
        buy_price=buy_price,
        position=position,
        note=note,
    )


class FakeStore(TradeStore):
    """Dict-backed store. Set ``fail_on`` to an operation name to make it raise."""

    def __init__(self, records: dict | None = None):
        self.records: dict[str, dict] = {k: dict(v) for k, v in (records or {}).items()}
        self.fail_on: set[str] = set()
        self.calls: list[tuple] = []
        self._next = 0
        self._lock = threading.Lock()

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(operation, "simulated failure", 503)

    def list_records(self) -> dict[str, dict]:
        self.calls.append(("list",))
        self._check("list")
        return {k: dict(v) for k, v in self.records.items()}

    def create(self, record: dict) -> str:
        self.calls.append(("create", record))
        self._check("create")
        self._next += 1
        trade_id = f"new{self._next}"
        self.records[trade_id] = merge_record({}, record)
        return trade_id

    def update(self, trade_id: str, changes: dict) -> None:
        self.calls.append(("update", trade_id, changes))
        self._check("update")
        with self._lock:
            self.records[trade_id] = merge_record(self.records.get(trade_id, {}), changes)

    def delete(self, trade_id: str) -> None:
        self.calls.append(("delete", trade_id))
        self._check("delete")
        self.records.pop(trade_id, None)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore(
        {
            "a": make_trade(None, stock_name="台積電", quantity=1000, buy_price=100).to_record(),
            "b": make_trade(
                None, stock_name="鴻海", quantity=2000, buy_price=50, sell_price=60, sell_date=date(2024, 3, 1)
            ).to_record(),
            "c": make_trade(
                None, market=Market.US, stock_name="Apple", stock_symbol="AAPL", quantity=10, buy_price=180
            ).to_record(),
        }
    )
