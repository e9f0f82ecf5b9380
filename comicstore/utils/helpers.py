"""
General‑purpose helper functions used across the project.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

from comicstore.config import DEFAULT_PAGE_LIMIT


def now_iso() -> str:
    """Current local time as stored in the database."""
    return datetime.now().isoformat(timespec="seconds")


def parse_date(date_str: str) -> datetime | None:
    """Try several date formats and return a datetime, or None."""
    formats = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%d/%m/%Y", "%m/%d/%Y"]
    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt)
        except ValueError:
            continue
    return None


def parse_int(raw, default: int | None = None) -> int | None:
    """``int(raw)`` or ``default`` when raw is missing, zero or not a number."""
    try:
        value = int(raw)
    except (ValueError, TypeError):
        return default
    return value or default


def parse_page_params(page=None, limit=None) -> tuple[int, int]:
    """Coerce raw page/limit query values.

    Page has no lower bound; a limit below 1 falls back to the default.
    """
    page = parse_int(page, 1)
    limit = parse_int(limit, DEFAULT_PAGE_LIMIT)
    if limit < 1:
        limit = DEFAULT_PAGE_LIMIT
    return page, limit


@dataclass(frozen=True)
class Like:
    """Case-insensitive substring filter for ``paginate``."""

    text: str
    columns: tuple[str, ...] = ()


def build_where(filters: Mapping[str, Any]) -> tuple[str, list]:
    """Turn a filter mapping into a WHERE clause and its parameters.

    Plain values compare with ``=``; ``None`` values are skipped; a ``Like``
    matches any of its columns (or the key itself).
    """
    clauses: list[str] = []
    params: list = []
    for column, value in filters.items():
        if value is None:
            continue
        if isinstance(value, Like):
            cols = value.columns or (column,)
            clauses.append("(" + " OR ".join(f"LOWER({c}) LIKE ?" for c in cols) + ")")
            params.extend([f"%{value.text.lower()}%"] * len(cols))
        else:
            clauses.append(f"{column} = ?")
            params.append(value)
    where = " WHERE " + " AND ".join(clauses) if clauses else ""
    return where, params


def update_row(db, table: str, row_id: int, changes: Mapping[str, Any]) -> None:
    """``UPDATE table SET ...`` for the given columns; no-op when empty."""
    if not changes:
        return
    assignments = ", ".join(f"{column} = ?" for column in changes)
    db.update(f"UPDATE {table} SET {assignments} WHERE id = ?", [*changes.values(), row_id])


@dataclass
class Page:
    items: list[dict]
    total_count: int
    current_page: int
    limit: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = math.ceil(self.total_count / self.limit)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1

    def meta(self) -> dict:
        return {
            "count": self.count,
            "totalCount": self.total_count,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def paginate(
    db,
    table: str,
    filters: Mapping[str, Any] | None = None,
    order_by: str = "id DESC",
    page=None,
    limit=None,
    expand: Callable[[dict], dict] | None = None,
) -> Page:
    """Count and fetch one page of ``table`` using the same filter for both."""
    page, limit = parse_page_params(page, limit)
    skip = (page - 1) * limit
    where, params = build_where(filters or {})

    total = db.scalar(f"SELECT COUNT(*) FROM {table}{where}", params)
    rows = db.query(
        f"SELECT * FROM {table}{where} ORDER BY {order_by} LIMIT ? OFFSET ?",
        [*params, limit, max(skip, 0)],
    )
    if expand is not None:
        rows = [expand(r) for r in rows]
    return Page(items=rows, total_count=total, current_page=page, limit=limit)
