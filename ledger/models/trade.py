"""Trade model: one buy, optionally closed by a sell.

Stored records keep the sparse camelCase shape the ledger has always written
(``sellPrice`` present or absent, and so on). In memory the sold/unsold split
is a tagged variant: ``Holding`` may carry a what-if price, ``Closed`` carries
the realized sell, and a trade cannot be both.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Market(str, Enum):
    TW = "TW"
    US = "US"
    UK = "UK"


@dataclass(frozen=True)
class Holding:
    """Unsold. ``expected_sell_price`` is advisory only."""

    expected_sell_price: float | None = None


@dataclass(frozen=True)
class Closed:
    """Sold at ``sell_price`` on ``sell_date``."""

    sell_price: float
    sell_date: date | None


Position = Holding | Closed


@dataclass(frozen=True)
class Trade:
    id: str | None
    stock_name: str
    quantity: float
    buy_date: date | None  # None when the stored value could not be parsed
    buy_price: float
    market: Market = Market.TW
    stock_symbol: str = ""
    position: Position = field(default_factory=Holding)
    note: str = ""

    @property
    def is_sold(self) -> bool:
        return isinstance(self.position, Closed)

    @property
    def sell_price(self) -> float | None:
        return self.position.sell_price if isinstance(self.position, Closed) else None

    @property
    def sell_date(self) -> date | None:
        return self.position.sell_date if isinstance(self.position, Closed) else None

    @property
    def expected_sell_price(self) -> float | None:
        if isinstance(self.position, Holding):
            return self.position.expected_sell_price
        return None

    def with_id(self, trade_id: str) -> "Trade":
        return replace(self, id=trade_id)

    # ---------- wire format ----------

    @classmethod
    def from_record(cls, trade_id: str | None, record: dict[str, Any]) -> "Trade":
        """Build a Trade from a stored record.

        Missing market reads as TW. The trade is sold iff ``sellPrice`` is
        present and ``sellDate`` is non-empty; any ``expectedSellPrice`` left
        on a sold record is ignored.
        """
        sell_price = record.get("sellPrice")
        sell_date = record.get("sellDate")
        if sell_price is not None and sell_date:
            position: Position = Closed(
                sell_price=parse_number(sell_price), sell_date=parse_date(sell_date)
            )
        else:
            expected = record.get("expectedSellPrice")
            position = Holding(
                expected_sell_price=parse_number(expected) if expected is not None else None
            )

        return cls(
            id=trade_id,
            market=parse_market(record.get("market")),
            stock_symbol=parse_text(record.get("stockSymbol")),
            stock_name=parse_text(record.get("stockName")),
            quantity=parse_number(record.get("quantity")),
            buy_date=parse_date(record.get("buyDate")),
            buy_price=parse_number(record.get("buyPrice")),
            position=position,
            note=parse_text(record.get("note")),
        )

    def to_record(self) -> dict[str, Any]:
        """Sparse record without the id; absent optional keys are omitted."""
        record: dict[str, Any] = {
            "market": self.market.value,
            "stockSymbol": self.stock_symbol,
            "stockName": self.stock_name,
            "quantity": self.quantity,
            "buyDate": format_date(self.buy_date),
            "buyPrice": self.buy_price,
            "note": self.note,
        }
        if isinstance(self.position, Closed):
            record["sellDate"] = format_date(self.position.sell_date)
            record["sellPrice"] = self.position.sell_price
        elif self.position.expected_sell_price is not None:
            record["expectedSellPrice"] = self.position.expected_sell_price
        return record

    def to_full_record(self) -> dict[str, Any]:
        """Like ``to_record`` but with explicit nulls, so a PATCH clears stale keys."""
        record = {key: None for key in OPTIONAL_RECORD_KEYS}
        record.update(self.to_record())
        return record


OPTIONAL_RECORD_KEYS = ("sellDate", "sellPrice", "expectedSellPrice")

RECORD_KEYS: dict[str, str] = {
    "market": "market",
    "stock_symbol": "stockSymbol",
    "stock_name": "stockName",
    "quantity": "quantity",
    "buy_date": "buyDate",
    "buy_price": "buyPrice",
    "sell_date": "sellDate",
    "sell_price": "sellPrice",
    "expected_sell_price": "expectedSellPrice",
    "note": "note",
}


def record_changes(fields: dict[str, Any]) -> dict[str, Any]:
    """Translate snake_case field changes into a record patch. None stays None (delete)."""
    patch: dict[str, Any] = {}
    for name, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, date):
            value = value.isoformat()
        patch[RECORD_KEYS[name]] = value
    return patch


def parse_date(value: Any) -> date | None:
    """Parse ``YYYY-MM-DD`` (or an ISO timestamp); None for anything unreadable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug(f"Unparseable date in trade record: {value!r}")
        return None


def format_date(value: date | None) -> str:
    return value.isoformat() if value is not None else ""


def parse_number(value: Any) -> float:
    """Coerce a stored number; NaN for anything non-numeric so bad input poisons the math."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric value in trade record: {value!r}")
        return math.nan


def parse_text(value: Any) -> str:
    """Stored text as str; numeric tickers such as 2330 come back as numbers."""
    if value is None:
        return ""
    return str(value)


def parse_market(value: Any) -> Market:
    if not value:
        return Market.TW
    try:
        return Market(str(value).upper())
    except ValueError:
        logger.warning(f"Unknown market {value!r} in trade record; reading as TW")
        return Market.TW
