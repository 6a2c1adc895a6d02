"""SQLModel engine management for the SQL-backed trade store."""

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from ledger.models.document import TradeDocument  # noqa: F401  registers the table

logger = logging.getLogger(__name__)

SQL_URL_PREFIXES = ("sqlite", "postgresql", "postgres")


def is_sql_url(url: str) -> bool:
    return url.startswith(SQL_URL_PREFIXES)


def make_engine(database_url: str) -> Engine:
    # SQLite needs check_same_thread=False; PostgreSQL does not
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        echo=False,
        connect_args=connect_args,
    )


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables. Called when the SQL store is built."""
    SQLModel.metadata.create_all(engine)
    logger.debug(f"Ensured tables on {engine.url.render_as_string(hide_password=True)}")
