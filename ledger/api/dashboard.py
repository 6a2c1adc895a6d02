"""Dashboard API: per-market summary stats."""

from datetime import datetime

from fastapi import APIRouter, Depends

from ledger.api.deps import get_book, get_now, get_view_store
from ledger.models.trade import Market
from ledger.schemas.trade import SummaryRead
from ledger.services.book import TradeBook
from ledger.services.view_state import ViewStore

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=SummaryRead)
def dashboard_summary(
    market: Market | None = None,
    book: TradeBook = Depends(get_book),
    view: ViewStore = Depends(get_view_store),
    now: datetime = Depends(get_now),
):
    """Aggregated stats for one market (the selected one by default)."""
    market = market or view.state.market
    return SummaryRead.from_summary(market, book.summary(market, now))
