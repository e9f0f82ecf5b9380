"""
Database helpers — wraps SQLite via raw SQL.

A single ``Database`` object is created at process start and passed into
every operation. Multi-statement writes go through ``transaction()``.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterator

from comicstore.config import DATABASE_URL

logger = logging.getLogger(__name__)

# Money is stored as text so Decimal values survive the round trip unchanged.
sqlite3.register_adapter(Decimal, str)
sqlite3.register_converter("DECIMAL_TEXT", lambda raw: Decimal(raw.decode()))


SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        email TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        full_name TEXT,
        role TEXT NOT NULL DEFAULT 'user',
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL
    );
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        description TEXT
    );
    CREATE TABLE IF NOT EXISTS comics (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        author TEXT,
        description TEXT,
        category_id INTEGER REFERENCES categories(id),
        volume_count INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    );
    CREATE TABLE IF NOT EXISTS comic_editions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        comic_id INTEGER NOT NULL REFERENCES comics(id),
        name TEXT NOT NULL,
        image TEXT,
        price DECIMAL_TEXT NOT NULL,
        page_count INTEGER NOT NULL,
        stock_available INTEGER NOT NULL DEFAULT 0 CHECK (stock_available >= 0),
        stock_sold INTEGER NOT NULL DEFAULT 0 CHECK (stock_sold >= 0)
    );
    CREATE TABLE IF NOT EXISTS discount_codes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        code TEXT UNIQUE NOT NULL,
        percent INTEGER NOT NULL DEFAULT 0,
        usage_count INTEGER NOT NULL DEFAULT 0
    );
    CREATE TABLE IF NOT EXISTS shipping_addresses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(id),
        address TEXT NOT NULL,
        recipient_name TEXT NOT NULL,
        phone TEXT NOT NULL
    );
    CREATE TABLE IF NOT EXISTS cart_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(id),
        edition_id INTEGER NOT NULL REFERENCES comic_editions(id),
        quantity INTEGER NOT NULL CHECK (quantity > 0),
        UNIQUE (user_id, edition_id)
    );
    CREATE TABLE IF NOT EXISTS orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(id),
        edition_id INTEGER NOT NULL REFERENCES comic_editions(id),
        quantity INTEGER NOT NULL CHECK (quantity > 0),
        total DECIMAL_TEXT NOT NULL,
        address_id INTEGER REFERENCES shipping_addresses(id),
        payment_method TEXT,
        discount_id INTEGER REFERENCES discount_codes(id),
        status TEXT NOT NULL DEFAULT 'PENDING',
        created_at TEXT NOT NULL
    );
    CREATE TABLE IF NOT EXISTS cancellation_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id INTEGER NOT NULL REFERENCES orders(id),
        user_id INTEGER NOT NULL REFERENCES users(id),
        reason TEXT NOT NULL,
        decision INTEGER NOT NULL DEFAULT 0,
        reply_content TEXT,
        replied_at TEXT,
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_orders_user ON orders(user_id);
    CREATE INDEX IF NOT EXISTS ix_orders_status ON orders(status);
    CREATE INDEX IF NOT EXISTS ix_cancellations_user ON cancellation_requests(user_id);
"""


class Database:
    """Shared SQLite handle with a scoped transaction helper.

    The connection runs in autocommit mode; ``transaction()`` opens an
    explicit ``BEGIN IMMEDIATE`` block. A re-entrant lock serializes access
    so that a transaction's statements never interleave with another
    request's statements on the same connection.
    """

    def __init__(self, url: str = DATABASE_URL):
        self.path = url.replace("sqlite:///", "")
        self._conn = sqlite3.connect(
            self.path,
            check_same_thread=False,
            isolation_level=None,
            detect_types=sqlite3.PARSE_DECLTYPES,
        )
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._init_tables()

    def _init_tables(self):
        """Create tables if they don't exist yet."""
        with self._lock:
            self._conn.executescript(SCHEMA)

    def close(self):
        with self._lock:
            self._conn.close()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def query(self, sql: str, params: tuple | list = (), one: bool = False) -> Any:
        """Execute a SELECT and return rows as dicts (or one dict / None)."""
        with self._lock:
            cur = self._conn.execute(sql, params)
            rows = [dict(r) for r in cur.fetchall()]
        if one:
            return rows[0] if rows else None
        return rows

    def scalar(self, sql: str, params: tuple | list = ()) -> Any:
        """Execute a SELECT and return the first column of the first row."""
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return row[0] if row is not None else None

    def execute(self, sql: str, params: tuple | list = ()) -> int:
        """Execute an INSERT and return lastrowid."""
        with self._lock:
            cur = self._conn.execute(sql, params)
            return cur.lastrowid

    def update(self, sql: str, params: tuple | list = ()) -> int:
        """Execute an UPDATE / DELETE and return the number of rows touched."""
        with self._lock:
            cur = self._conn.execute(sql, params)
            return cur.rowcount

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """All-or-nothing block: commit on normal exit, roll back on any error.

        Nested calls join the outermost transaction.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self
            except BaseException as exc:
                self._conn.execute("ROLLBACK")
                logger.warning(f"Transaction rolled back: {exc!r}")
                raise
            else:
                self._conn.execute("COMMIT")
            finally:
                self._depth = 0
