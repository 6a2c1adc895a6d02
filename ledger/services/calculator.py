"""Trade profit/loss calculator.

Pure and stateless: ``calculate_trade(trade, now)`` derives cost basis, fees,
tax, net income, profit, holding period and annualized return. Nothing here
touches storage, and the result is never persisted.

Fees and tax are floored to whole currency units independently (buy fee, sell
fee and tax each floored on their own), matching broker rounding.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from ledger.models.trade import Closed, Market, Trade
from ledger.utils.constants import DAYS_PER_YEAR, FEE_RATES, MS_PER_DAY, TAX_RATES


@dataclass(frozen=True)
class FeePolicy:
    fee_rate: float  # applied to buy and sell amounts
    tax_rate: float  # applied to sell amount only


FEE_POLICIES: dict[Market, FeePolicy] = {
    market: FeePolicy(fee_rate=FEE_RATES[market.value], tax_rate=TAX_RATES[market.value])
    for market in Market
}


@dataclass(frozen=True)
class TradeCalculations:
    buy_amount: float
    buy_fee: int | float
    total_cost: float
    sell_amount: float
    sell_fee: int | float
    tax: int | float
    net_income: float
    profit: float
    profit_percent: float
    is_sold: bool
    holding_days: int | float  # NaN when a date could not be parsed
    annualized_return: float
    expected_profit: float | None = None
    expected_profit_percent: float | None = None

    @property
    def fees_and_tax(self) -> int | float:
        return self.buy_fee + self.sell_fee + self.tax


@dataclass(frozen=True)
class _SellMetrics:
    sell_amount: float
    sell_fee: int | float
    tax: int | float
    net_income: float
    profit: float
    profit_percent: float


def _floor(amount: float) -> int | float:
    # NaN/inf stay as they are instead of raising in math.floor
    if not math.isfinite(amount):
        return amount
    return math.floor(amount)


def _sell_metrics(price: float, quantity: float, total_cost: float, policy: FeePolicy) -> _SellMetrics:
    sell_amount = price * quantity
    sell_fee = _floor(sell_amount * policy.fee_rate)
    tax = _floor(sell_amount * policy.tax_rate)
    net_income = sell_amount - sell_fee - tax
    profit = net_income - total_cost
    profit_percent = profit / total_cost * 100 if total_cost > 0 else 0.0
    return _SellMetrics(sell_amount, sell_fee, tax, net_income, profit, profit_percent)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def holding_days(buy_date: date | None, end: date | datetime | None) -> int | float:
    """Whole days held, rounded up, never less than 1.

    ``end`` is the sell date, or the current moment for open trades. Calendar
    dates are taken at UTC midnight. Returns NaN if either end is missing.
    """
    if buy_date is None or end is None:
        return math.nan
    start = _midnight_utc(buy_date)
    finish = _as_utc(end) if isinstance(end, datetime) else _midnight_utc(end)
    elapsed_ms = abs((finish - start).total_seconds()) * 1000
    return max(1, math.ceil(elapsed_ms / MS_PER_DAY))


def annualized_return(net_income: float, total_cost: float, days: int | float) -> float:
    """CAGR in percent.

    Only a true CAGR when both cost and net income are positive. Any
    non-positive net income is pinned to -100 (full loss) and a zero cost
    basis yields 0.
    """
    if total_cost > 0 and net_income > 0:
        years = days / DAYS_PER_YEAR
        try:
            return ((net_income / total_cost) ** (1 / years) - 1) * 100
        except OverflowError:
            # huge gains over a day or two compound past float range
            return math.inf
    if total_cost > 0:
        return -100.0
    return 0.0


def calculate_trade(trade: Trade, now: datetime) -> TradeCalculations:
    """Derive the financial metrics of ``trade`` as of ``now``."""
    policy = FEE_POLICIES[trade.market]

    buy_amount = trade.buy_price * trade.quantity
    buy_fee = _floor(buy_amount * policy.fee_rate)
    total_cost = buy_amount + buy_fee

    position = trade.position
    end = position.sell_date if isinstance(position, Closed) else now
    days = holding_days(trade.buy_date, end)

    if isinstance(position, Closed):
        sold = _sell_metrics(position.sell_price, trade.quantity, total_cost, policy)
        return TradeCalculations(
            buy_amount=buy_amount,
            buy_fee=buy_fee,
            total_cost=total_cost,
            sell_amount=sold.sell_amount,
            sell_fee=sold.sell_fee,
            tax=sold.tax,
            net_income=sold.net_income,
            profit=sold.profit,
            profit_percent=sold.profit_percent,
            is_sold=True,
            holding_days=days,
            annualized_return=annualized_return(sold.net_income, total_cost, days),
        )

    expected_profit = None
    expected_profit_percent = None
    if position.expected_sell_price is not None:
        projected = _sell_metrics(position.expected_sell_price, trade.quantity, total_cost, policy)
        expected_profit = projected.profit
        expected_profit_percent = projected.profit_percent

    return TradeCalculations(
        buy_amount=buy_amount,
        buy_fee=buy_fee,
        total_cost=total_cost,
        sell_amount=0.0,
        sell_fee=0,
        tax=0,
        net_income=0.0,
        profit=0.0,
        profit_percent=0.0,
        is_sold=False,
        holding_days=days,
        annualized_return=0.0,
        expected_profit=expected_profit,
        expected_profit_percent=expected_profit_percent,
    )
