"""Domain and database models."""

from ledger.models.trade import Trade, Market, Holding, Closed
from ledger.models.document import TradeDocument

__all__ = [
    "Trade",
    "Market",
    "Holding",
    "Closed",
    "TradeDocument",
]
