"""Tests for the per-market ledger summary."""

from datetime import date

import pytest

from conftest import NOW, make_trade
from ledger.services.calculator import calculate_trade
from ledger.services.summary import LedgerSummary, summarize


def test_empty_market():
    assert summarize([], NOW) == LedgerSummary()


def test_realized_and_holding_figures():
    winner = make_trade("w", quantity=1000, buy_price=100, sell_price=110, sell_date=date(2024, 7, 1))
    loser = make_trade("l", quantity=100, buy_price=20, sell_price=10, sell_date=date(2024, 4, 1))
    held = make_trade("h", quantity=500, buy_price=40)

    summary = summarize([winner, loser, held], NOW)
    w, l, h = (calculate_trade(t, NOW) for t in (winner, loser, held))

    assert summary.total_trades == 2
    assert summary.winning_trades == 1
    assert summary.win_rate == pytest.approx(50.0)
    assert summary.realized_profit == pytest.approx(w.profit + l.profit)
    assert summary.holding_cost == pytest.approx(h.total_cost)
    assert summary.total_volume == pytest.approx(w.buy_amount + w.sell_amount + l.buy_amount + l.sell_amount)
    assert summary.total_tax == w.tax + l.tax
    assert summary.total_fees == w.buy_fee + w.sell_fee + l.buy_fee + l.sell_fee
    assert summary.transaction_costs == summary.total_tax + summary.total_fees


def test_only_open_trades_have_zero_win_rate():
    summary = summarize([make_trade("a"), make_trade("b")], NOW)
    assert summary.total_trades == 0
    assert summary.win_rate == 0.0
    assert summary.holding_cost > 0


def test_break_even_sale_is_not_a_win():
    flat = make_trade(quantity=100, buy_price=50, sell_price=50)
    assert summarize([flat], NOW).winning_trades == 0
