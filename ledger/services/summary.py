"""Ledger summary: realized profit, win rate, trading costs and holding cost."""

from dataclasses import dataclass
from datetime import datetime

from ledger.models.trade import Trade
from ledger.services.calculator import calculate_trade


@dataclass(frozen=True)
class LedgerSummary:
    realized_profit: float = 0.0
    holding_cost: float = 0.0
    total_trades: int = 0  # sold trades only
    winning_trades: int = 0
    win_rate: float = 0.0  # percentage
    total_volume: float = 0.0
    total_tax: int = 0
    total_fees: int = 0

    @property
    def transaction_costs(self) -> int:
        return self.total_tax + self.total_fees


def summarize(trades: list[Trade], now: datetime) -> LedgerSummary:
    """Aggregate one market's trades.

    Sold trades feed the realized figures; open trades only add their cost
    basis to ``holding_cost`` since there is no live price to mark them.
    """
    realized_profit = 0.0
    holding_cost = 0.0
    total_trades = 0
    winning_trades = 0
    total_volume = 0.0
    total_tax = 0
    total_fees = 0

    for trade in trades:
        calc = calculate_trade(trade, now)
        if calc.is_sold:
            realized_profit += calc.profit
            total_trades += 1
            if calc.profit > 0:
                winning_trades += 1
            total_volume += calc.sell_amount + calc.buy_amount
            total_tax += calc.tax
            total_fees += calc.buy_fee + calc.sell_fee
        else:
            holding_cost += calc.total_cost

    win_rate = winning_trades / total_trades * 100 if total_trades else 0.0
    return LedgerSummary(
        realized_profit=realized_profit,
        holding_cost=holding_cost,
        total_trades=total_trades,
        winning_trades=winning_trades,
        win_rate=win_rate,
        total_volume=total_volume,
        total_tax=total_tax,
        total_fees=total_fees,
    )
