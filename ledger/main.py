"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledger.api import dashboard, system, trades, view
from ledger.config import settings
from ledger.models.trade import Market
from ledger.services.book import TradeBook
from ledger.services.store import build_store
from ledger.services.view_state import ViewState, ViewStore
from ledger.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    book = TradeBook(build_store(settings))
    book.refresh()
    app.state.book = book
    app.state.view = ViewStore(ViewState(market=Market(settings.default_market)))
    logger.info(f"Ledger ready, showing {settings.default_market} first")

    yield

    logger.info("Ledger shutting down")


app = FastAPI(
    title="Stock Ledger",
    description="Buy/sell trade ledger with fee, tax and return calculations",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(trades.router)
app.include_router(dashboard.router)
app.include_router(view.router)
app.include_router(system.router)
