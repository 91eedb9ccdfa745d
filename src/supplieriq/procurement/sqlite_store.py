"""
SQLite-backed procurement store

One table per record type, columns named after the model fields. Each call
opens its own connection and runs in a worker thread (asyncio.to_thread), so
blocking SQLite I/O never stalls the event loop. Writes retry on lock
contention.

Schema:
- requests, suppliers, purchase_orders, supplier_issues, supplier_ratings
- supplier_suggestions: UNIQUE(request_id, supplier_id), UNIQUE(request_id, rank)
"""

import asyncio
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, TypeVar

from pydantic import BaseModel

from supplieriq.kernel.errors import DuplicateSuggestion, RequestNotFound
from supplieriq.kernel.logging import get_logger
from supplieriq.kernel.retry import retry_on_sqlite_lock
from supplieriq.procurement.models import (
    ProcurementRequest,
    PurchaseOrder,
    RequestStatus,
    Supplier,
    SupplierIssue,
    SupplierRating,
    SupplierSuggestion,
)
from supplieriq.procurement.stores import check_status_transition

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

SCHEMA = """
CREATE TABLE IF NOT EXISTS requests (
    request_id TEXT PRIMARY KEY,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    quantity INTEGER NOT NULL,
    urgency TEXT NOT NULL,
    budget TEXT NOT NULL,
    region TEXT NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS suppliers (
    supplier_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    region TEXT NOT NULL,
    description TEXT,
    is_active INTEGER NOT NULL DEFAULT 1
);
CREATE INDEX IF NOT EXISTS idx_suppliers_category ON suppliers (category, is_active);

CREATE TABLE IF NOT EXISTS purchase_orders (
    order_id TEXT PRIMARY KEY,
    supplier_id TEXT NOT NULL REFERENCES suppliers (supplier_id),
    category TEXT NOT NULL,
    quantity INTEGER NOT NULL,
    unit_price TEXT NOT NULL,
    total_price TEXT,
    status TEXT NOT NULL,
    expected_delivery_date TEXT,
    actual_delivery_date TEXT,
    is_late INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_orders_supplier ON purchase_orders (supplier_id);

CREATE TABLE IF NOT EXISTS supplier_issues (
    issue_id TEXT PRIMARY KEY,
    supplier_id TEXT NOT NULL REFERENCES suppliers (supplier_id),
    issue_type TEXT NOT NULL,
    severity TEXT NOT NULL,
    description TEXT NOT NULL,
    resolved INTEGER NOT NULL DEFAULT 0,
    resolved_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_issues_supplier ON supplier_issues (supplier_id);

CREATE TABLE IF NOT EXISTS supplier_ratings (
    rating_id TEXT PRIMARY KEY,
    supplier_id TEXT NOT NULL REFERENCES suppliers (supplier_id),
    rating REAL NOT NULL,
    comment TEXT,
    category TEXT
);
CREATE INDEX IF NOT EXISTS idx_ratings_supplier ON supplier_ratings (supplier_id);

CREATE TABLE IF NOT EXISTS supplier_suggestions (
    suggestion_id TEXT PRIMARY KEY,
    request_id TEXT NOT NULL REFERENCES requests (request_id),
    supplier_id TEXT NOT NULL REFERENCES suppliers (supplier_id),
    match_score REAL NOT NULL,
    risk_score INTEGER NOT NULL,
    explanation TEXT NOT NULL,
    rank INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (request_id, supplier_id),
    UNIQUE (request_id, rank)
);
"""


class SQLiteStore:
    """
    SQLite implementation of every store contract

    db_path must be a file; each operation uses a fresh connection, so an
    in-memory (":memory:") database would not survive between calls.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._initialize_schema()

    def _initialize_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA)
            conn.commit()
        logger.debug("SQLite schema ready", db_path=str(self.db_path))

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    # Generic row mapping

    @retry_on_sqlite_lock()
    def _insert_many(self, table: str, models: list[BaseModel]) -> None:
        if not models:
            return
        rows = [m.model_dump(mode="json") for m in models]
        columns = list(rows[0].keys())
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        with self._connect() as conn:
            conn.executemany(sql, [tuple(row[c] for c in columns) for row in rows])
            conn.commit()

    def _select(
        self, model: type[M], sql: str, params: tuple[Any, ...] = ()
    ) -> list[M]:
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [model.model_validate(dict(row)) for row in rows]

    # Write helpers (intake, supplier management, seeding)

    async def add_request(self, request: ProcurementRequest) -> ProcurementRequest:
        await asyncio.to_thread(self._insert_many, "requests", [request])
        return request

    async def add_supplier(self, supplier: Supplier) -> Supplier:
        await asyncio.to_thread(self._insert_many, "suppliers", [supplier])
        return supplier

    async def add_order(self, order: PurchaseOrder) -> PurchaseOrder:
        await asyncio.to_thread(self._insert_many, "purchase_orders", [order])
        return order

    async def add_issue(self, issue: SupplierIssue) -> SupplierIssue:
        await asyncio.to_thread(self._insert_many, "supplier_issues", [issue])
        return issue

    async def add_rating(self, rating: SupplierRating) -> SupplierRating:
        await asyncio.to_thread(self._insert_many, "supplier_ratings", [rating])
        return rating

    async def list_suppliers(self) -> list[Supplier]:
        return await asyncio.to_thread(
            self._select, Supplier, "SELECT * FROM suppliers ORDER BY rowid"
        )

    # RequestStore

    async def find_request(self, request_id: str) -> ProcurementRequest | None:
        rows = await asyncio.to_thread(
            self._select,
            ProcurementRequest,
            "SELECT * FROM requests WHERE request_id = ?",
            (request_id,),
        )
        return rows[0] if rows else None

    @retry_on_sqlite_lock()
    def _update_status(self, request_id: str, status: RequestStatus) -> None:
        with self._connect() as conn:
            # Read and write under one write lock so two runs cannot both claim a request
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT status FROM requests WHERE request_id = ?", (request_id,)
            ).fetchone()
            if row is None:
                raise RequestNotFound(request_id)
            check_status_transition(request_id, RequestStatus(row["status"]), status)
            conn.execute(
                "UPDATE requests SET status = ? WHERE request_id = ?",
                (status.value, request_id),
            )
            conn.commit()

    async def update_request_status(self, request_id: str, status: RequestStatus) -> None:
        await asyncio.to_thread(self._update_status, request_id, status)

    # SupplierStore (category match is case-sensitive, SQLite's default)

    async def find_active_suppliers_by_category(self, category: str) -> list[Supplier]:
        return await asyncio.to_thread(
            self._select,
            Supplier,
            "SELECT * FROM suppliers WHERE category = ? AND is_active = 1 ORDER BY rowid",
            (category,),
        )

    # Order / Issue / Rating stores

    async def find_orders_by_supplier(self, supplier_id: str) -> list[PurchaseOrder]:
        return await asyncio.to_thread(
            self._select,
            PurchaseOrder,
            "SELECT * FROM purchase_orders WHERE supplier_id = ? ORDER BY rowid",
            (supplier_id,),
        )

    async def find_issues_by_supplier(self, supplier_id: str) -> list[SupplierIssue]:
        return await asyncio.to_thread(
            self._select,
            SupplierIssue,
            "SELECT * FROM supplier_issues WHERE supplier_id = ? ORDER BY rowid",
            (supplier_id,),
        )

    async def find_ratings_by_supplier(self, supplier_id: str) -> list[SupplierRating]:
        return await asyncio.to_thread(
            self._select,
            SupplierRating,
            "SELECT * FROM supplier_ratings WHERE supplier_id = ? ORDER BY rowid",
            (supplier_id,),
        )

    # SuggestionStore

    async def save_suggestions(self, suggestions: list[SupplierSuggestion]) -> None:
        """
        Persist a request's whole suggestion set in one transaction

        Raises:
            DuplicateSuggestion: If a rank or supplier repeats within a request
        """
        try:
            await asyncio.to_thread(
                self._insert_many, "supplier_suggestions", list(suggestions)
            )
        except sqlite3.IntegrityError as e:
            request_id = suggestions[0].request_id if suggestions else ""
            raise DuplicateSuggestion(request_id, str(e)) from e

    async def find_suggestions_by_request(self, request_id: str) -> list[SupplierSuggestion]:
        return await asyncio.to_thread(
            self._select,
            SupplierSuggestion,
            "SELECT * FROM supplier_suggestions WHERE request_id = ? ORDER BY rank ASC",
            (request_id,),
        )

    def count_rows(self, table: str) -> int:
        """Row count of a known table (health checks)"""
        if table not in {
            "requests",
            "suppliers",
            "purchase_orders",
            "supplier_issues",
            "supplier_ratings",
            "supplier_suggestions",
        }:
            raise ValueError(f"Unknown table: {table}")
        with self._connect() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
