"""Trade book: the in-memory record set the API and CLI read from.

Writes are optimistic: the local copy changes first, then the store is
called. When a store write fails the whole record set is refetched (so the
local copy matches whatever the store really holds) and the error is
re-raised for the caller to report. A failed read leaves an empty book.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ledger.models.trade import Market, Trade, record_changes
from ledger.services.partial_sell import SplitConfirmationRequired, plan_partial_sell
from ledger.services.store import StoreError, TradeStore, merge_record
from ledger.services.summary import LedgerSummary, summarize
from ledger.services.view_state import TradeRow, ViewState, visible_rows

logger = logging.getLogger(__name__)


class TradeNotFound(KeyError):
    def __init__(self, trade_id: str):
        self.trade_id = trade_id
        super().__init__(trade_id)


@dataclass(frozen=True)
class EditResult:
    trade: Trade
    remainder: Trade | None = None  # set when the edit split the trade


class TradeBook:
    def __init__(self, store: TradeStore):
        self.store = store
        self._trades: list[Trade] = []
        self._lock = threading.Lock()

    # ---------- reads ----------

    def refresh(self) -> list[Trade]:
        """Refetch every record; an unreachable store yields an empty book."""
        try:
            records = self.store.list_records()
        except StoreError as e:
            logger.warning(f"Could not load trades, continuing with none: {e}")
            records = {}
        trades = [Trade.from_record(trade_id, record) for trade_id, record in records.items()]
        with self._lock:
            self._trades = trades
        logger.info(f"Loaded {len(trades)} trades")
        return list(trades)

    def trades(self, market: Market | None = None) -> list[Trade]:
        with self._lock:
            trades = list(self._trades)
        if market is None:
            return trades
        return [t for t in trades if t.market == market]

    def get(self, trade_id: str) -> Trade:
        with self._lock:
            for trade in self._trades:
                if trade.id == trade_id:
                    return trade
        raise TradeNotFound(trade_id)

    def rows(self, state: ViewState, now: datetime) -> list[TradeRow]:
        return visible_rows(self.trades(), state, now)

    def summary(self, market: Market, now: datetime) -> LedgerSummary:
        return summarize(self.trades(market), now)

    # ---------- writes ----------

    def add(self, trade: Trade) -> Trade:
        """Create a record. The id comes from the store, so nothing is local until it answers."""
        trade_id = self.store.create(trade.to_record())
        created = trade.with_id(trade_id)
        with self._lock:
            self._trades.insert(0, created)
        return created

    def update(self, trade_id: str, fields: dict[str, Any]) -> Trade:
        """Partial update: only the given fields are sent to the store."""
        return self._write(trade_id, record_changes(fields))

    def replace(self, trade_id: str, trade: Trade) -> Trade:
        """Full edit: every key is sent, absent optional keys as nulls."""
        return self._write(trade_id, trade.to_full_record())

    def delete(self, trade_id: str) -> None:
        self.get(trade_id)
        with self._lock:
            self._trades = [t for t in self._trades if t.id != trade_id]
        try:
            self.store.delete(trade_id)
        except StoreError as e:
            logger.error(f"Delete of trade {trade_id} failed, refetching: {e}")
            self.refresh()
            raise

    def edit(
        self,
        trade_id: str,
        edited: Trade,
        sell_quantity: float | None = None,
        confirm_split: bool | None = None,
    ) -> EditResult:
        """Apply a form edit, splitting off the unsold remainder of a partial sale.

        ``confirm_split`` None means nobody has been asked yet: a split edit
        raises ``SplitConfirmationRequired`` before anything is written.
        False turns the edit back into a plain full update.
        """
        current = self.get(trade_id)
        plan = plan_partial_sell(current.quantity, edited, sell_quantity)
        if plan is None or confirm_split is False:
            return EditResult(trade=self.replace(trade_id, edited))
        if confirm_split is None:
            raise SplitConfirmationRequired(plan.sold_quantity, plan.original_quantity)

        logger.info(
            f"Splitting trade {trade_id}: {plan.sold_quantity} sold, "
            f"{plan.remaining_quantity} kept"
        )
        sold = self.replace(trade_id, plan.sold)
        try:
            remainder = self.add(plan.remainder)
        except StoreError as e:
            # the sold half is already written; there is nothing to roll it back with
            logger.error(f"Split of trade {trade_id} left without its remainder record: {e}")
            self.refresh()
            raise
        return EditResult(trade=sold, remainder=remainder)

    def _write(self, trade_id: str, patch: dict[str, Any]) -> Trade:
        """Merge ``patch`` into the local copy, then send it to the store.

        The merge reads the current trade under the lock, so concurrent
        patches to different fields of one trade all survive locally.
        """
        with self._lock:
            current = next((t for t in self._trades if t.id == trade_id), None)
            if current is None:
                raise TradeNotFound(trade_id)
            updated = Trade.from_record(trade_id, merge_record(current.to_record(), patch))
            if updated.is_sold and "expectedSellPrice" not in patch:
                # a sold trade must not keep a what-if price around
                patch = {**patch, "expectedSellPrice": None}
            self._trades = [updated if t.id == trade_id else t for t in self._trades]
        try:
            self.store.update(trade_id, patch)
        except StoreError as e:
            logger.error(f"Update of trade {trade_id} failed, refetching: {e}")
            self.refresh()
            raise
        return updated
