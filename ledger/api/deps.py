"""Shared API dependencies."""

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, Request, status

from ledger.services.book import TradeBook
from ledger.services.store import StoreError
from ledger.services.view_state import ViewStore

logger = logging.getLogger(__name__)


def get_book(request: Request) -> TradeBook:
    return request.app.state.book


def get_view_store(request: Request) -> ViewStore:
    return request.app.state.view


def get_now() -> datetime:
    """Reference instant for holding periods of open trades."""
    return datetime.now(timezone.utc)


def store_failure(error: StoreError, message: str) -> HTTPException:
    """Translate a store failure into the 502 the UI shows to the user."""
    logger.warning(f"Reporting store failure to client: {error}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)
