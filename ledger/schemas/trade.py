"""Pydantic schemas for the trade API.

Input schemas coerce raw form values (camelCase or snake_case keys, numbers
as strings, empty strings for blank optional inputs) into the Trade shape.
Read schemas flatten a trade and its calculations for JSON; non-finite floats
become null.
"""

import math
from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ledger.models.trade import Closed, Holding, Market, Trade
from ledger.services.calculator import TradeCalculations
from ledger.services.summary import LedgerSummary
from ledger.services.view_state import SortDirection, SortKey, ViewState

_FORM_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}

_OPTIONAL_FORM_FIELDS = ("stock_symbol", "sell_date", "sell_price", "expected_sell_price", "note")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _finite(value: int | float | None) -> int | float | None:
    if isinstance(value, float) and (math.isinf(value) or math.isnan(value)):
        return None
    return value


class TradeCreate(BaseModel):
    market: Market = Market.TW
    stock_symbol: str | None = Field(default="", max_length=32)
    stock_name: str = Field(min_length=1, max_length=120)
    quantity: float = Field(gt=0)
    buy_date: date
    buy_price: float = Field(ge=0)
    sell_date: date | None = None
    sell_price: float | None = Field(default=None, ge=0)
    expected_sell_price: float | None = Field(default=None, ge=0)
    note: str | None = Field(default="", max_length=2000)

    model_config = _FORM_CONFIG

    @field_validator(*_OPTIONAL_FORM_FIELDS, mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("stock_name")
    @classmethod
    def _trim_required_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @model_validator(mode="after")
    def _validate_sale(self):
        if (self.sell_date is None) != (self.sell_price is None):
            raise ValueError("sell_price and sell_date must be given together")
        if self.sell_price is not None:
            # the what-if price only means something while the trade is open
            self.expected_sell_price = None
        return self

    def to_trade(self, trade_id: str | None = None) -> Trade:
        if self.sell_price is not None and self.sell_date is not None:
            position = Closed(sell_price=self.sell_price, sell_date=self.sell_date)
        else:
            position = Holding(expected_sell_price=self.expected_sell_price)
        return Trade(
            id=trade_id,
            market=self.market,
            stock_symbol=(self.stock_symbol or "").strip(),
            stock_name=self.stock_name,
            quantity=self.quantity,
            buy_date=self.buy_date,
            buy_price=self.buy_price,
            position=position,
            note=self.note or "",
        )


class TradeUpdate(BaseModel):
    market: Market | None = None
    stock_symbol: str | None = Field(default=None, max_length=32)
    stock_name: str | None = Field(default=None, min_length=1, max_length=120)
    quantity: float | None = Field(default=None, gt=0)
    buy_date: date | None = None
    buy_price: float | None = Field(default=None, ge=0)
    sell_date: date | None = None
    sell_price: float | None = Field(default=None, ge=0)
    expected_sell_price: float | None = Field(default=None, ge=0)
    note: str | None = Field(default=None, max_length=2000)

    model_config = _FORM_CONFIG

    @field_validator(*_OPTIONAL_FORM_FIELDS, mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("stock_name")
    @classmethod
    def _trim_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @model_validator(mode="after")
    def _validate_required_not_cleared(self):
        for name in ("market", "stock_name", "quantity", "buy_date", "buy_price"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self


class TradeEdit(TradeCreate):
    """Full edit from the form; ``sell_quantity`` below the held quantity splits the trade."""

    sell_quantity: float | None = Field(default=None, gt=0)
    confirm_split: bool | None = None

    @field_validator("sell_quantity", mode="before")
    @classmethod
    def _blank_sell_quantity(cls, value):
        return _blank_to_none(value)


class TradePreview(BaseModel):
    """Unsaved form values; only what the calculator needs is required."""

    market: Market = Market.TW
    quantity: float = Field(gt=0)
    buy_price: float = Field(ge=0)
    buy_date: date | None = None
    sell_date: date | None = None
    sell_price: float | None = Field(default=None, ge=0)
    expected_sell_price: float | None = Field(default=None, ge=0)

    model_config = _FORM_CONFIG

    @field_validator("buy_date", "sell_date", "sell_price", "expected_sell_price", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)

    def to_trade(self, today: date) -> Trade:
        if self.sell_price is not None and self.sell_date is not None:
            position = Closed(sell_price=self.sell_price, sell_date=self.sell_date)
        else:
            position = Holding(expected_sell_price=self.expected_sell_price)
        return Trade(
            id=None,
            market=self.market,
            stock_name="",
            quantity=self.quantity,
            buy_date=self.buy_date or today,
            buy_price=self.buy_price,
            position=position,
        )


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

class CalculationRead(BaseModel):
    buy_amount: float | None
    buy_fee: int | None
    total_cost: float | None
    sell_amount: float | None
    sell_fee: int | None
    tax: int | None
    fees_and_tax: int | None
    net_income: float | None
    profit: float | None
    profit_percent: float | None
    is_sold: bool
    holding_days: int | None
    annualized_return: float | None
    expected_profit: float | None = None
    expected_profit_percent: float | None = None

    @classmethod
    def from_calc(cls, calc: TradeCalculations) -> "CalculationRead":
        return cls(
            buy_amount=_finite(calc.buy_amount),
            buy_fee=_finite(calc.buy_fee),
            total_cost=_finite(calc.total_cost),
            sell_amount=_finite(calc.sell_amount),
            sell_fee=_finite(calc.sell_fee),
            tax=_finite(calc.tax),
            fees_and_tax=_finite(calc.fees_and_tax),
            net_income=_finite(calc.net_income),
            profit=_finite(calc.profit),
            profit_percent=_finite(calc.profit_percent),
            is_sold=calc.is_sold,
            holding_days=_finite(calc.holding_days),
            annualized_return=_finite(calc.annualized_return),
            expected_profit=_finite(calc.expected_profit),
            expected_profit_percent=_finite(calc.expected_profit_percent),
        )


class TradeRead(BaseModel):
    id: str | None
    market: Market
    stock_symbol: str
    stock_name: str
    quantity: float | None
    buy_date: date | None
    buy_price: float | None
    sell_date: date | None
    sell_price: float | None
    expected_sell_price: float | None
    note: str
    is_sold: bool
    calculations: CalculationRead

    @classmethod
    def from_trade(cls, trade: Trade, calc: TradeCalculations) -> "TradeRead":
        return cls(
            id=trade.id,
            market=trade.market,
            stock_symbol=trade.stock_symbol,
            stock_name=trade.stock_name,
            quantity=_finite(trade.quantity),
            buy_date=trade.buy_date,
            buy_price=_finite(trade.buy_price),
            sell_date=trade.sell_date,
            sell_price=_finite(trade.sell_price),
            expected_sell_price=_finite(trade.expected_sell_price),
            note=trade.note,
            is_sold=trade.is_sold,
            calculations=CalculationRead.from_calc(calc),
        )


class EditRead(BaseModel):
    trade: TradeRead
    remainder: TradeRead | None = None


class SummaryRead(BaseModel):
    market: Market
    realized_profit: float | None
    holding_cost: float | None
    total_trades: int
    winning_trades: int
    win_rate: float
    total_volume: float | None
    total_tax: int | None
    total_fees: int | None
    transaction_costs: int | None

    @classmethod
    def from_summary(cls, market: Market, summary: LedgerSummary) -> "SummaryRead":
        return cls(
            market=market,
            realized_profit=_finite(summary.realized_profit),
            holding_cost=_finite(summary.holding_cost),
            total_trades=summary.total_trades,
            winning_trades=summary.winning_trades,
            win_rate=summary.win_rate,
            total_volume=_finite(summary.total_volume),
            total_tax=_finite(summary.total_tax),
            total_fees=_finite(summary.total_fees),
            transaction_costs=_finite(summary.transaction_costs),
        )


class ViewStateRead(BaseModel):
    market: Market
    sort_key: SortKey
    sort_direction: SortDirection

    @classmethod
    def from_state(cls, state: ViewState) -> "ViewStateRead":
        return cls(market=state.market, sort_key=state.sort.key, sort_direction=state.sort.direction)
