"""System API: health check and manual refetch from the store."""

from fastapi import APIRouter, Depends

from ledger.api.deps import get_book
from ledger.services.book import TradeBook

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.post("/refresh")
def refresh_trades(book: TradeBook = Depends(get_book)):
    """Reload every record from the store. An unreachable store leaves the book empty."""
    trades = book.refresh()
    return {"status": "ok", "trades": len(trades)}
