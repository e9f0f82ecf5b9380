"""Stock management operations.

Copies move between ``stock_available`` and ``stock_sold`` in a single
conditional UPDATE, so the availability check and the decrement cannot be
split by a concurrent order.
"""

from __future__ import annotations

import logging

from comicstore.errors import InsufficientStockError, NotFoundError, ValidationError
from comicstore.models import ComicEdition

logger = logging.getLogger(__name__)


def get_edition(db, edition_id: int) -> ComicEdition | None:
    row = db.query("SELECT * FROM comic_editions WHERE id = ?", (edition_id,), one=True)
    return ComicEdition.from_row(row) if row else None


def require_edition(db, edition_id: int) -> ComicEdition:
    edition = get_edition(db, edition_id)
    if edition is None:
        raise NotFoundError("Comic edition", edition_id)
    return edition


def get_stock_level(db, edition_id: int) -> tuple[int, int]:
    """Return ``(available, sold)`` for an edition."""
    edition = require_edition(db, edition_id)
    return edition.stock_available, edition.stock_sold


def ensure_available(edition: ComicEdition, qty: int, **extra) -> None:
    """Raise InsufficientStockError unless ``qty`` copies are on the shelf."""
    if not edition.has_stock(qty):
        logger.warning(
            f"Stock check failed for edition {edition.id}: "
            f"requested {qty}, available {edition.stock_available}"
        )
        raise InsufficientStockError(edition.id, edition.stock_available, **extra)


def debit(db, edition_id: int, qty: int) -> None:
    """Move ``qty`` copies from available to sold.

    Meant to run inside the caller's transaction.
    """
    if qty <= 0:
        raise ValidationError("Quantity must be at least 1")

    changed = db.update(
        "UPDATE comic_editions "
        "SET stock_available = stock_available - ?, stock_sold = stock_sold + ? "
        "WHERE id = ? AND stock_available >= ?",
        (qty, qty, edition_id, qty),
    )
    if changed == 0:
        edition = require_edition(db, edition_id)
        logger.warning(
            f"Debit refused for edition {edition_id}: "
            f"requested {qty}, available {edition.stock_available}"
        )
        raise InsufficientStockError(edition_id, edition.stock_available)
    logger.info(f"Debited {qty} copies of edition {edition_id}")


def credit(db, edition_id: int, qty: int) -> None:
    """Move ``qty`` copies from sold back to available (returns)."""
    if qty <= 0:
        raise ValidationError("Quantity must be at least 1")

    changed = db.update(
        "UPDATE comic_editions "
        "SET stock_available = stock_available + ?, stock_sold = MAX(stock_sold - ?, 0) "
        "WHERE id = ?",
        (qty, qty, edition_id),
    )
    if changed == 0:
        raise NotFoundError("Comic edition", edition_id)
    logger.info(f"Credited {qty} copies of edition {edition_id}")


def is_edition_referenced(db, edition_id: int) -> bool:
    """True if any cart item or order points at the edition."""
    if db.query("SELECT id FROM cart_items WHERE edition_id = ? LIMIT 1", (edition_id,), one=True):
        return True
    return db.query("SELECT id FROM orders WHERE edition_id = ? LIMIT 1", (edition_id,), one=True) is not None


def get_low_stock(db, threshold: int = 5) -> list[dict]:
    """Editions with fewer than ``threshold`` copies available."""
    return db.query(
        "SELECT id, comic_id, name, stock_available, stock_sold FROM comic_editions "
        "WHERE stock_available < ? ORDER BY stock_available ASC",
        (threshold,),
    )
