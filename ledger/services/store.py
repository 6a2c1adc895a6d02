"""Trade stores: where trade records live.

Both stores speak the same document dialect, modelled on the Firebase Realtime
Database REST API:

* ``list_records()`` -> ``{id: record}``; nothing stored means ``{}``
* ``create(record)`` -> generated id
* ``update(id, changes)`` merges only the given keys; a ``None`` value
  deletes that key
* ``delete(id)`` removes the record

There are no transactions and no version checks. Concurrent updates to
different keys merge, updates to the same key are last-write-wins.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import requests
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ledger.config import Settings
from ledger.database import create_db_and_tables, is_sql_url, make_engine
from ledger.models.document import TradeDocument

logger = logging.getLogger(__name__)

Record = dict[str, Any]


@dataclass(eq=False)
class StoreError(Exception):
    operation: str  # "list", "create", "update", "delete"
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        status = f" (HTTP {self.status_code})" if self.status_code else ""
        return f"StoreError[{self.operation}]: {self.message}{status}"


class TradeStore(ABC):
    @abstractmethod
    def list_records(self) -> dict[str, Record]: ...

    @abstractmethod
    def create(self, record: Record) -> str: ...

    @abstractmethod
    def update(self, trade_id: str, changes: Record) -> None: ...

    @abstractmethod
    def delete(self, trade_id: str) -> None: ...


def merge_record(current: Record, changes: Record) -> Record:
    merged = dict(current)
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Firebase Realtime Database (REST)
# ---------------------------------------------------------------------------

class HttpTradeStore(TradeStore):
    """Trade records under ``{base_url}/{collection}`` on a Firebase-style REST store."""

    def __init__(
        self,
        base_url: str,
        collection: str = "trades",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.collection = collection.strip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _url(self, trade_id: str | None = None) -> str:
        if trade_id is None:
            return f"{self.base_url}/{self.collection}.json"
        return f"{self.base_url}/{self.collection}/{trade_id}.json"

    def _request(self, operation: str, method: str, url: str, payload: Record | None = None) -> Any:
        logger.debug(f"{method} {url}")
        try:
            r = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"Timeout on {method} {url}")
            raise StoreError(operation, f"Timeout calling {url}") from e
        except requests.RequestException as e:
            logger.error(f"Network error on {method} {url}: {e}")
            raise StoreError(operation, f"Network error calling {url}") from e

        if r.status_code >= 400:
            try:
                detail = r.json()
                message = detail.get("error") if isinstance(detail, dict) else None
            except ValueError:
                message = None
            logger.error(f"HTTP {r.status_code} on {method} {url}: {message or r.text}")
            raise StoreError(operation, message or "HTTP error", r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise StoreError(operation, "Response was not JSON", r.status_code) from e

    def list_records(self) -> dict[str, Record]:
        data = self._request("list", "GET", self._url())
        if not data:
            return {}
        # The REST API returns an array when every key is a small integer
        if isinstance(data, list):
            data = {str(i): v for i, v in enumerate(data) if v is not None}
        if not isinstance(data, dict):
            raise StoreError("list", f"Unexpected payload type {type(data).__name__}")
        return {key: value for key, value in data.items() if isinstance(value, dict)}

    def create(self, record: Record) -> str:
        body = {k: v for k, v in record.items() if v is not None}
        data = self._request("create", "POST", self._url(), body)
        trade_id = data.get("name") if isinstance(data, dict) else None
        if not trade_id:
            raise StoreError("create", "Response did not include a generated id")
        logger.info(f"Created trade {trade_id}")
        return trade_id

    def update(self, trade_id: str, changes: Record) -> None:
        self._request("update", "PATCH", self._url(trade_id), changes)
        logger.info(f"Updated trade {trade_id}: {sorted(changes)}")

    def delete(self, trade_id: str) -> None:
        self._request("delete", "DELETE", self._url(trade_id))
        logger.info(f"Deleted trade {trade_id}")


# ---------------------------------------------------------------------------
# SQL (SQLite / PostgreSQL) document table
# ---------------------------------------------------------------------------

def new_trade_id() -> str:
    return uuid.uuid4().hex


class SqlTradeStore(TradeStore):
    """The same document semantics on a SQLModel table, for local use."""

    def __init__(self, engine: Engine, collection: str = "trades"):
        self.engine = engine
        self.collection = collection
        create_db_and_tables(engine)

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error during {operation}: {e}")
            raise StoreError(operation, f"Database error: {e.__class__.__name__}") from e

    def list_records(self) -> dict[str, Record]:
        with self._session("list") as session:
            docs = session.exec(
                select(TradeDocument)
                .where(TradeDocument.collection == self.collection)
                .order_by(TradeDocument.created_at, TradeDocument.id)
            ).all()
            return {doc.id: dict(doc.data or {}) for doc in docs}

    def create(self, record: Record) -> str:
        trade_id = new_trade_id()
        with self._session("create") as session:
            doc = TradeDocument(id=trade_id, collection=self.collection, data=merge_record({}, record))
            session.add(doc)
            session.commit()
        logger.info(f"Created trade {trade_id}")
        return trade_id

    def update(self, trade_id: str, changes: Record) -> None:
        with self._session("update") as session:
            doc = session.get(TradeDocument, trade_id)
            if doc is None or doc.collection != self.collection:
                # PATCH on a missing path creates it, as on the REST store
                doc = TradeDocument(id=trade_id, collection=self.collection, data={})
            # JSON columns do not track in-place mutation; assign a new dict
            doc.data = merge_record(doc.data or {}, changes)
            session.add(doc)
            session.commit()
        logger.info(f"Updated trade {trade_id}: {sorted(changes)}")

    def delete(self, trade_id: str) -> None:
        with self._session("delete") as session:
            doc = session.get(TradeDocument, trade_id)
            if doc is not None and doc.collection == self.collection:
                session.delete(doc)
                session.commit()
        logger.info(f"Deleted trade {trade_id}")


def build_store(settings: Settings) -> TradeStore:
    """SQL store for database URLs, REST store for everything else."""
    if is_sql_url(settings.store_url):
        logger.info(f"Using SQL trade store ({settings.store_url.split(':', 1)[0]})")
        return SqlTradeStore(make_engine(settings.store_url), collection=settings.store_collection)
    logger.info(f"Using REST trade store at {settings.store_url}")
    return HttpTradeStore(
        settings.store_url,
        collection=settings.store_collection,
        timeout=settings.store_timeout,
    )
