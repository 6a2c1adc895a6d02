"""Partial-sell split.

Editing a trade into a sale of fewer shares than it holds splits it in two:
the edited record keeps only the sold shares, and a fresh unsold record takes
the rest. Planning is pure; ``TradeBook.edit`` performs the two writes.
"""

from dataclasses import dataclass, replace

from ledger.models.trade import Closed, Holding, Trade
from ledger.utils.constants import SPLIT_CONFIRM_MESSAGE, SPLIT_NOTE_PREFIX


@dataclass(frozen=True)
class SplitPlan:
    sold: Trade  # overwrites the edited record
    remainder: Trade  # created as a new record, no id yet
    original_quantity: float

    @property
    def sold_quantity(self) -> float:
        return self.sold.quantity

    @property
    def remaining_quantity(self) -> float:
        return self.remainder.quantity


class SplitConfirmationRequired(Exception):
    """Raised when an edit would split a trade and nobody confirmed it yet."""

    def __init__(self, sold_quantity: float, original_quantity: float):
        self.sold_quantity = sold_quantity
        self.original_quantity = original_quantity
        super().__init__(self.prompt)

    @property
    def prompt(self) -> str:
        return SPLIT_CONFIRM_MESSAGE.format(
            sold=_fmt_quantity(self.sold_quantity),
            original=_fmt_quantity(self.original_quantity),
        )


class SellQuantityExceeded(ValueError):
    def __init__(self, sell_quantity: float, original_quantity: float):
        super().__init__(
            f"sell quantity {_fmt_quantity(sell_quantity)} exceeds the "
            f"{_fmt_quantity(original_quantity)} shares held"
        )


def split_note(note: str) -> str:
    return f"{SPLIT_NOTE_PREFIX} {note}".rstrip()


def plan_partial_sell(
    original_quantity: float,
    edited: Trade,
    sell_quantity: float | None,
) -> SplitPlan | None:
    """Return a split plan, or None when the edit is an ordinary update.

    A split happens only when ``edited`` is sold and ``sell_quantity`` is
    below the quantity currently stored. ``sold + remainder`` always equals
    ``original_quantity``. Selling more than is held raises
    ``SellQuantityExceeded``.
    """
    if not isinstance(edited.position, Closed) or sell_quantity is None:
        return None
    if sell_quantity > original_quantity:
        raise SellQuantityExceeded(sell_quantity, original_quantity)
    if not 0 < sell_quantity < original_quantity:
        return None

    sold = replace(edited, quantity=sell_quantity)
    remainder = replace(
        edited,
        id=None,
        quantity=original_quantity - sell_quantity,
        position=Holding(),
        note=split_note(edited.note),
    )
    return SplitPlan(sold=sold, remainder=remainder, original_quantity=original_quantity)


def _fmt_quantity(quantity: float) -> str:
    return str(int(quantity)) if float(quantity).is_integer() else str(quantity)
