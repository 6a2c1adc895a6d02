"""Tests for view-state transitions and row ordering."""

import threading
from datetime import date

from conftest import NOW, make_trade
from ledger.models.trade import Market
from ledger.services.view_state import (
    SortConfig,
    ViewState,
    ViewStore,
    select_market,
    toggle_sort,
    visible_rows,
)


# ---------------------------------------------------------------------------
# 1. Transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_initial_state(self):
        state = ViewState()
        assert state.market == Market.TW
        assert state.sort == SortConfig(key="date", direction="desc")

    def test_select_market_keeps_sort(self):
        state = toggle_sort(ViewState(), "profit")
        moved = select_market(state, Market.US)
        assert moved.market == Market.US
        assert moved.sort == state.sort

    def test_same_key_flips_direction(self):
        state = toggle_sort(ViewState(), "date")
        assert state.sort.direction == "asc"
        assert toggle_sort(state, "date").sort.direction == "desc"

    def test_new_key_starts_descending(self):
        state = toggle_sort(toggle_sort(ViewState(), "date"), "profit")
        assert state.sort == SortConfig(key="profit", direction="desc")

    def test_transitions_do_not_mutate(self):
        state = ViewState()
        toggle_sort(state, "stock")
        assert state.sort.key == "date"


class TestViewStore:
    def test_dispatch_updates_state(self):
        store = ViewStore()
        store.dispatch(select_market, Market.UK)
        store.dispatch(toggle_sort, "cost")
        assert store.state.market == Market.UK
        assert store.state.sort.key == "cost"

    def test_concurrent_toggles_are_not_lost(self):
        store = ViewStore()
        threads = [
            threading.Thread(target=store.dispatch, args=(toggle_sort, "date")) for _ in range(50)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        # 50 flips from "desc" land back on "desc"
        assert store.state.sort.direction == "desc"


# ---------------------------------------------------------------------------
# 2. Rows
# ---------------------------------------------------------------------------

def _trades():
    return [
        make_trade("a", stock_name="B", buy_date=date(2024, 1, 1), quantity=100, buy_price=10),
        make_trade("b", stock_name="A", buy_date=date(2024, 3, 1), quantity=100, buy_price=30,
                   sell_price=36, sell_date=date(2024, 4, 1)),
        make_trade("c", stock_name="C", buy_date=date(2024, 2, 1), quantity=100, buy_price=20,
                   sell_price=10, sell_date=date(2024, 4, 1)),
        make_trade("us", market=Market.US, buy_date=date(2024, 5, 1)),
    ]


def _ids(rows):
    return [row.trade.id for row in rows]


class TestVisibleRows:
    def test_filters_by_market(self):
        rows = visible_rows(_trades(), ViewState(market=Market.US), NOW)
        assert _ids(rows) == ["us"]

    def test_default_is_newest_first(self):
        assert _ids(visible_rows(_trades(), ViewState(), NOW)) == ["b", "c", "a"]

    def test_sort_by_stock_name_ascending(self):
        state = ViewState(sort=SortConfig(key="stock", direction="asc"))
        assert _ids(visible_rows(_trades(), state, NOW)) == ["b", "a", "c"]

    def test_sort_by_cost(self):
        state = ViewState(sort=SortConfig(key="cost", direction="desc"))
        assert _ids(visible_rows(_trades(), state, NOW)) == ["b", "c", "a"]

    def test_sort_by_profit(self):
        state = ViewState(sort=SortConfig(key="profit", direction="desc"))
        # sold winner, open (profit 0), sold loser
        assert _ids(visible_rows(_trades(), state, NOW)) == ["b", "a", "c"]

    def test_sort_by_holding_days(self):
        state = ViewState(sort=SortConfig(key="holding", direction="asc"))
        assert _ids(visible_rows(_trades(), state, NOW)) == ["b", "c", "a"]

    def test_ties_keep_incoming_order(self):
        trades = [make_trade(str(i), buy_date=date(2024, 1, 1)) for i in range(5)]
        for direction in ("asc", "desc"):
            state = ViewState(sort=SortConfig(key="date", direction=direction))
            assert _ids(visible_rows(trades, state, NOW)) == ["0", "1", "2", "3", "4"]

    def test_rows_carry_calculations(self):
        rows = visible_rows(_trades(), ViewState(), NOW)
        assert all(row.calc.total_cost > 0 for row in rows)
