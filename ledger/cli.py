"""CLI for reading the ledger from a terminal.

Usage:
    python -m ledger.cli list [--market TW] [--sort profit] [--direction asc]
    python -m ledger.cli summary [--market US]
"""

import argparse
import math
import sys
from datetime import datetime, timezone

from ledger.config import settings
from ledger.models.trade import Market
from ledger.services.book import TradeBook
from ledger.services.store import build_store
from ledger.services.view_state import SortConfig, ViewState
from ledger.utils.constants import MARKET_LABELS, SORT_DIRECTIONS, SORT_KEYS
from ledger.utils.logging import setup_logging


def _fmt(value: float | None, digits: int = 0) -> str:
    if value is None or (isinstance(value, float) and (math.isnan(value) or math.isinf(value))):
        return "-"
    return f"{value:,.{digits}f}"


def list_trades(book: TradeBook, market: Market, sort_key: str, direction: str) -> None:
    state = ViewState(market=market, sort=SortConfig(key=sort_key, direction=direction))
    rows = book.rows(state, datetime.now(timezone.utc))
    print(f"{MARKET_LABELS[market.value]}: {len(rows)} trades")
    if not rows:
        return

    header = (
        f"{'Buy date':<10}  {'Stock':<20}  {'Qty':>8}  {'Buy':>10}  {'Sell':>10}  "
        f"{'Cost':>12}  {'Fees+tax':>9}  {'Profit':>11}  {'%':>7}  {'Days':>5}  {'CAGR %':>8}"
    )
    print(header)
    print("-" * len(header))
    for row in rows:
        trade, calc = row.trade, row.calc
        name = f"{trade.stock_symbol} {trade.stock_name}".strip()
        profit = calc.profit if calc.is_sold else calc.expected_profit
        percent = calc.profit_percent if calc.is_sold else calc.expected_profit_percent
        buy_date = trade.buy_date.isoformat() if trade.buy_date else "-"
        print(
            f"{buy_date:<10}  {name[:20]:<20}  {_fmt(trade.quantity):>8}  "
            f"{_fmt(trade.buy_price, 2):>10}  {_fmt(trade.sell_price, 2):>10}  "
            f"{_fmt(calc.total_cost):>12}  {_fmt(calc.fees_and_tax):>9}  {_fmt(profit):>11}  "
            f"{_fmt(percent, 2):>7}  {_fmt(calc.holding_days):>5}  {_fmt(calc.annualized_return, 2):>8}"
        )


def show_summary(book: TradeBook, market: Market) -> None:
    summary = book.summary(market, datetime.now(timezone.utc))
    print(f"{MARKET_LABELS[market.value]} summary")
    print(f"  Realized profit:   {_fmt(summary.realized_profit)}")
    print(f"  Holding cost:      {_fmt(summary.holding_cost)}")
    print(f"  Closed trades:     {summary.total_trades} ({summary.winning_trades} winning)")
    print(f"  Win rate:          {_fmt(summary.win_rate, 1)}%")
    print(f"  Volume:            {_fmt(summary.total_volume)}")
    print(f"  Fees:              {_fmt(summary.total_fees)}")
    print(f"  Tax:               {_fmt(summary.total_tax)}")
    print(f"  Transaction costs: {_fmt(summary.transaction_costs)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m ledger.cli", description="Stock trade ledger")
    parser.add_argument("--log-level", default=None, help="overrides LEDGER_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    markets = [m.value for m in Market]
    p_list = sub.add_parser("list", help="list one market's trades")
    p_list.add_argument("--market", choices=markets, default=settings.default_market)
    p_list.add_argument("--sort", choices=SORT_KEYS, default="date")
    p_list.add_argument("--direction", choices=SORT_DIRECTIONS, default="desc")

    p_summary = sub.add_parser("summary", help="summary figures for one market")
    p_summary.add_argument("--market", choices=markets, default=settings.default_market)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    book = TradeBook(build_store(settings))
    book.refresh()

    market = Market(args.market)
    if args.command == "list":
        list_trades(book, market, args.sort, args.direction)
    elif args.command == "summary":
        show_summary(book, market)
    return 0


if __name__ == "__main__":
    sys.exit(main())
