"""View state (market filter and sort order) plus the row pipeline.

State is an immutable value. It only changes through the pure transitions
``select_market`` and ``toggle_sort``; ``ViewStore`` keeps the current value
for the running app and swaps it atomically.
"""

import math
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable, Literal

from ledger.models.trade import Market, Trade
from ledger.services.calculator import TradeCalculations, calculate_trade

SortKey = Literal["date", "stock", "cost", "fees", "profit", "profitPercent", "holding"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class SortConfig:
    key: SortKey = "date"
    direction: SortDirection = "desc"


@dataclass(frozen=True)
class ViewState:
    market: Market = Market.TW
    sort: SortConfig = field(default_factory=SortConfig)


@dataclass(frozen=True)
class TradeRow:
    trade: Trade
    calc: TradeCalculations


# ---------- transitions ----------

def select_market(state: ViewState, market: Market) -> ViewState:
    return replace(state, market=Market(market))


def toggle_sort(state: ViewState, key: SortKey) -> ViewState:
    """Clicking the active column flips direction; a new column starts descending."""
    if state.sort.key == key:
        direction: SortDirection = "asc" if state.sort.direction == "desc" else "desc"
    else:
        direction = "desc"
    return replace(state, sort=SortConfig(key=key, direction=direction))


class ViewStore:
    """Holds the current ViewState; transitions are applied under a lock."""

    def __init__(self, initial: ViewState | None = None):
        self._state = initial or ViewState()
        self._lock = threading.Lock()

    @property
    def state(self) -> ViewState:
        return self._state

    def dispatch(self, transition: Callable[..., ViewState], *args) -> ViewState:
        with self._lock:
            self._state = transition(self._state, *args)
            return self._state


# ---------- rows ----------

def _number(value: float) -> float:
    # NaN never compares, so park it at the low end
    return -math.inf if value is None or math.isnan(value) else value


_SORT_VALUES: dict[str, Callable[[TradeRow], object]] = {
    "date": lambda row: row.trade.buy_date or date.min,
    "stock": lambda row: row.trade.stock_name,
    "cost": lambda row: _number(row.calc.total_cost),
    "fees": lambda row: _number(row.calc.fees_and_tax),
    "profit": lambda row: _number(row.calc.profit),
    "profitPercent": lambda row: _number(row.calc.profit_percent),
    "holding": lambda row: _number(row.calc.holding_days),
}


def sort_rows(rows: list[TradeRow], sort: SortConfig) -> list[TradeRow]:
    """Stable sort; ties keep their incoming order in both directions."""
    return sorted(rows, key=_SORT_VALUES[sort.key], reverse=sort.direction == "desc")


def visible_rows(trades: list[Trade], state: ViewState, now: datetime) -> list[TradeRow]:
    """Trades of the selected market, each calculated once, in display order."""
    rows = [
        TradeRow(trade=trade, calc=calculate_trade(trade, now))
        for trade in trades
        if trade.market == state.market
    ]
    return sort_rows(rows, state.sort)
