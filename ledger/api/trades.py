"""CRUD API for trades."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from ledger.api.deps import get_book, get_now, get_view_store, store_failure
from ledger.models.trade import Market, Trade
from ledger.schemas.trade import (
    CalculationRead,
    EditRead,
    TradeCreate,
    TradeEdit,
    TradePreview,
    TradeRead,
    TradeUpdate,
)
from ledger.services.book import TradeBook, TradeNotFound
from ledger.services.calculator import calculate_trade
from ledger.services.partial_sell import SellQuantityExceeded, SplitConfirmationRequired
from ledger.services.store import StoreError
from ledger.services.view_state import SortConfig, SortDirection, SortKey, ViewState, ViewStore
from ledger.utils.constants import DELETE_FAILED_MESSAGE, SAVE_FAILED_MESSAGE

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _read(trade: Trade, now: datetime) -> TradeRead:
    return TradeRead.from_trade(trade, calculate_trade(trade, now))


def _get_or_404(book: TradeBook, trade_id: str) -> Trade:
    try:
        return book.get(trade_id)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")


def _form_values(trade: Trade) -> dict:
    return {
        "market": trade.market,
        "stock_symbol": trade.stock_symbol,
        "stock_name": trade.stock_name,
        "quantity": trade.quantity,
        "buy_date": trade.buy_date,
        "buy_price": trade.buy_price,
        "sell_date": trade.sell_date,
        "sell_price": trade.sell_price,
        "expected_sell_price": trade.expected_sell_price,
        "note": trade.note,
    }


def _validation_detail(e: ValidationError) -> list:
    return e.errors(include_url=False, include_context=False, include_input=False)


@router.get("", response_model=list[TradeRead])
def list_trades(
    market: Market | None = None,
    sort: SortKey | None = None,
    direction: SortDirection | None = None,
    book: TradeBook = Depends(get_book),
    view: ViewStore = Depends(get_view_store),
    now: datetime = Depends(get_now),
):
    """Rows of one market in display order; omitted parameters follow the current view."""
    current = view.state
    state = ViewState(
        market=market or current.market,
        sort=SortConfig(key=sort or current.sort.key, direction=direction or current.sort.direction),
    )
    return [TradeRead.from_trade(row.trade, row.calc) for row in book.rows(state, now)]


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(
    data: TradeCreate,
    book: TradeBook = Depends(get_book),
    now: datetime = Depends(get_now),
):
    try:
        trade = book.add(data.to_trade())
    except StoreError as e:
        raise store_failure(e, SAVE_FAILED_MESSAGE)
    return _read(trade, now)


@router.post("/preview", response_model=CalculationRead)
def preview_trade(data: TradePreview, now: datetime = Depends(get_now)):
    """Live figures for an unsaved form."""
    trade = data.to_trade(today=now.date())
    return CalculationRead.from_calc(calculate_trade(trade, now))


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(
    trade_id: str,
    book: TradeBook = Depends(get_book),
    now: datetime = Depends(get_now),
):
    return _read(_get_or_404(book, trade_id), now)


@router.patch("/{trade_id}", response_model=TradeRead)
def update_trade(
    trade_id: str,
    data: TradeUpdate,
    book: TradeBook = Depends(get_book),
    now: datetime = Depends(get_now),
):
    current = _get_or_404(book, trade_id)
    update_data = data.model_dump(exclude_unset=True)

    # Validate the merged trade so partial updates cannot bypass cross-field rules.
    merged = {**_form_values(current), **update_data}
    try:
        TradeCreate.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))

    try:
        trade = book.update(trade_id, update_data)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
    except StoreError as e:
        raise store_failure(e, SAVE_FAILED_MESSAGE)
    return _read(trade, now)


@router.put("/{trade_id}", response_model=EditRead)
def edit_trade(
    trade_id: str,
    data: TradeEdit,
    book: TradeBook = Depends(get_book),
    now: datetime = Depends(get_now),
):
    """Full edit. A sell quantity below the held quantity splits off the unsold rest."""
    _get_or_404(book, trade_id)
    try:
        result = book.edit(
            trade_id,
            data.to_trade(),
            sell_quantity=data.sell_quantity,
            confirm_split=data.confirm_split,
        )
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
    except SplitConfirmationRequired as e:
        raise HTTPException(status_code=409, detail=e.prompt)
    except SellQuantityExceeded as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreError as e:
        raise store_failure(e, SAVE_FAILED_MESSAGE)

    return EditRead(
        trade=_read(result.trade, now),
        remainder=_read(result.remainder, now) if result.remainder is not None else None,
    )


@router.delete("/{trade_id}", status_code=204)
def delete_trade(trade_id: str, book: TradeBook = Depends(get_book)):
    _get_or_404(book, trade_id)
    try:
        book.delete(trade_id)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
    except StoreError as e:
        raise store_failure(e, DELETE_FAILED_MESSAGE)
