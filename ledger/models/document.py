"""TradeDocument model: one stored trade record for the SQL-backed store."""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class TradeDocument(SQLModel, table=True):
    __tablename__ = "trade_document"

    id: str = Field(primary_key=True)
    collection: str = Field(index=True)  # e.g. "trades"
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
