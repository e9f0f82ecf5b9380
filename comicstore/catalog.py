"""
Catalog — categories, comics, comic editions and discount codes.

Editions that are sitting in a cart or referenced by an order are locked:
they can be neither updated nor deleted.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from comicstore.errors import ConflictError, EditionInUseError, NotFoundError, ValidationError
from comicstore.inventory import is_edition_referenced
from comicstore.utils.helpers import Like, Page, paginate, update_row, now_iso, parse_int
from comicstore.utils.validators import check, require_fields, validate_price

logger = logging.getLogger(__name__)


# --------------- Categories -----------------------------------------------

def list_categories(db) -> list[dict]:
    return db.query("SELECT * FROM categories ORDER BY name ASC")


def list_categories_page(db, page=None, limit=None) -> Page:
    return paginate(db, "categories", order_by="name ASC", page=page, limit=limit)


def search_categories(db, keyword: str, page=None, limit=None) -> Page:
    return paginate(
        db, "categories", {"name": Like(keyword or "")},
        order_by="name ASC", page=page, limit=limit,
    )


def count_categories(db) -> int:
    return db.scalar("SELECT COUNT(*) FROM categories")


def get_category(db, category_id: int) -> dict:
    row = db.query("SELECT * FROM categories WHERE id = ?", (category_id,), one=True)
    if row is None:
        raise NotFoundError("Category", category_id)
    return row


def _ensure_category_name_free(db, name: str) -> None:
    if db.query("SELECT id FROM categories WHERE name = ?", (name,), one=True):
        raise ConflictError(f"A category named '{name}' already exists")


def create_category(db, name: str | None, description: str | None = None) -> dict:
    require_fields("Please provide the category name", name=name)
    _ensure_category_name_free(db, name)
    cid = db.execute(
        "INSERT INTO categories (name, description) VALUES (?, ?)", (name, description)
    )
    return get_category(db, cid)


def update_category(db, category_id: int, name: str | None = None, description: str | None = None) -> dict:
    existing = get_category(db, category_id)
    changes = {}
    if name and name != existing["name"]:
        _ensure_category_name_free(db, name)
        changes["name"] = name
    if description is not None:
        changes["description"] = description
    update_row(db, "categories", category_id, changes)
    return get_category(db, category_id)


def delete_category(db, category_id: int) -> None:
    get_category(db, category_id)
    in_use = db.scalar("SELECT COUNT(*) FROM comics WHERE category_id = ?", (category_id,))
    if in_use:
        raise ValidationError(f"Cannot delete category {category_id}: {in_use} comics still use it")
    db.update("DELETE FROM categories WHERE id = ?", (category_id,))


# --------------- Comics ---------------------------------------------------

def _expand_comic(db, row: dict) -> dict:
    comic = dict(row)
    comic["category"] = (
        db.query("SELECT * FROM categories WHERE id = ?", (row["category_id"],), one=True)
        if row.get("category_id") is not None
        else None
    )
    return comic


def list_comics(db, page=None, limit=None) -> Page:
    return paginate(
        db, "comics", order_by="title ASC", page=page, limit=limit,
        expand=lambda r: _expand_comic(db, r),
    )


def count_comics(db) -> int:
    return db.scalar("SELECT COUNT(*) FROM comics")


def search_comics(db, keyword: str | None = None, category_id=None, page=None, limit=None) -> Page:
    """Substring search on title/author, optionally within one category."""
    filters = {
        "title": Like(keyword, ("title", "author")) if keyword else None,
        "category_id": parse_int(category_id),
    }
    return paginate(
        db, "comics", filters, order_by="title ASC", page=page, limit=limit,
        expand=lambda r: _expand_comic(db, r),
    )


def _load_comic(db, comic_id: int) -> dict:
    row = db.query("SELECT * FROM comics WHERE id = ?", (comic_id,), one=True)
    if row is None:
        raise NotFoundError("Comic", comic_id)
    return row


def get_comic(db, comic_id: int) -> dict:
    """Comic with its category and every edition."""
    comic = _expand_comic(db, _load_comic(db, comic_id))
    comic["editions"] = db.query(
        "SELECT * FROM comic_editions WHERE comic_id = ? ORDER BY name ASC", (comic_id,)
    )
    return comic


def create_comic(db, title: str | None, author: str | None = None,
                 description: str | None = None, category_id: int | None = None) -> dict:
    require_fields("Please provide the comic title", title=title)
    if category_id is not None:
        get_category(db, category_id)
    comic_id = db.execute(
        "INSERT INTO comics (title, author, description, category_id, created_at) "
        "VALUES (?, ?, ?, ?, ?)",
        (title, author, description, category_id, now_iso()),
    )
    logger.info(f"Comic {comic_id} created: {title!r}")
    return get_comic(db, comic_id)


def update_comic(db, comic_id: int, title: str | None = None, author: str | None = None,
                 description: str | None = None, category_id: int | None = None) -> dict:
    _load_comic(db, comic_id)
    if category_id is not None:
        get_category(db, category_id)
    changes = {
        k: v for k, v in
        {"title": title, "author": author, "description": description, "category_id": category_id}.items()
        if v is not None
    }
    update_row(db, "comics", comic_id, changes)
    return get_comic(db, comic_id)


def delete_comic(db, comic_id: int) -> None:
    _load_comic(db, comic_id)
    editions = db.scalar("SELECT COUNT(*) FROM comic_editions WHERE comic_id = ?", (comic_id,))
    if editions:
        raise ValidationError(f"Cannot delete comic {comic_id}: it still has {editions} editions")
    db.update("DELETE FROM comics WHERE id = ?", (comic_id,))
    logger.info(f"Comic {comic_id} deleted")


def _sync_volume_count(db, comic_id: int) -> None:
    db.update(
        "UPDATE comics SET volume_count = "
        "(SELECT COUNT(*) FROM comic_editions WHERE comic_id = ?) WHERE id = ?",
        (comic_id, comic_id),
    )


# --------------- Editions -------------------------------------------------

def _expand_edition(db, row: dict) -> dict:
    edition = dict(row)
    edition["comic"] = db.query("SELECT * FROM comics WHERE id = ?", (row["comic_id"],), one=True)
    return edition


def edition_detail(db, edition_id: int) -> dict | None:
    """Edition row with its parent comic attached, or None."""
    row = db.query("SELECT * FROM comic_editions WHERE id = ?", (edition_id,), one=True)
    return _expand_edition(db, row) if row else None


def get_edition(db, edition_id: int) -> dict:
    detail = edition_detail(db, edition_id)
    if detail is None:
        raise NotFoundError("Comic edition", edition_id)
    return detail


def list_editions(db, page=None, limit=None) -> Page:
    return paginate(
        db, "comic_editions", order_by="name ASC", page=page, limit=limit,
        expand=lambda r: _expand_edition(db, r),
    )


def search_editions(db, keyword: str, page=None, limit=None) -> Page:
    return paginate(
        db, "comic_editions", {"name": Like(keyword or "")},
        order_by="name ASC", page=page, limit=limit,
        expand=lambda r: _expand_edition(db, r),
    )


def list_editions_by_comic(db, comic_id: int, page=None, limit=None) -> Page:
    _load_comic(db, comic_id)
    return paginate(
        db, "comic_editions", {"comic_id": comic_id},
        order_by="name ASC", page=page, limit=limit,
        expand=lambda r: _expand_edition(db, r),
    )


def _non_negative(name: str, value) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a whole number")
    try:
        number = int(value)
    except (ValueError, TypeError):
        raise ValidationError(f"{name} must be a whole number") from None
    if number != value and str(number) != str(value).strip():
        raise ValidationError(f"{name} must be a whole number")
    if number < 0:
        raise ValidationError(f"{name} cannot be negative")
    return number


def create_edition(db, comic_id: int | None, name: str | None, price, page_count,
                   stock_available=0, stock_sold=0, image: str | None = None) -> dict:
    require_fields(
        "Please provide the edition name, price, page count and comic id",
        name=name, price=price, page_count=page_count, comic_id=comic_id,
    )
    check(validate_price(price))
    pages = parse_int(page_count)
    if pages is None or pages < 1:
        raise ValidationError("Page count must be a positive integer")
    available = _non_negative("Available stock", stock_available)
    sold = _non_negative("Sold count", stock_sold)
    _load_comic(db, comic_id)

    with db.transaction():
        edition_id = db.execute(
            "INSERT INTO comic_editions (comic_id, name, image, price, page_count, "
            "stock_available, stock_sold) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (comic_id, name, image, Decimal(str(price)), pages,
             available, sold),
        )
        _sync_volume_count(db, comic_id)
    logger.info(f"Edition {edition_id} created for comic {comic_id}")
    return get_edition(db, edition_id)


def update_edition(db, edition_id: int, name: str | None = None, price=None, page_count=None,
                   stock_available=None, stock_sold=None, image: str | None = None,
                   comic_id: int | None = None) -> dict:
    existing = get_edition(db, edition_id)
    if comic_id is not None and comic_id != existing["comic_id"]:
        _load_comic(db, comic_id)
    if is_edition_referenced(db, edition_id):
        raise EditionInUseError(edition_id, "update")

    changes: dict = {}
    if name:
        changes["name"] = name
    if image:
        changes["image"] = image
    if price is not None:
        check(validate_price(price))
        changes["price"] = Decimal(str(price))
    if page_count is not None:
        pages = parse_int(page_count)
        if pages is None or pages < 1:
            raise ValidationError("Page count must be a positive integer")
        changes["page_count"] = pages
    if stock_available is not None:
        changes["stock_available"] = _non_negative("Available stock", stock_available)
    if stock_sold is not None:
        changes["stock_sold"] = _non_negative("Sold count", stock_sold)
    if comic_id is not None:
        changes["comic_id"] = comic_id

    with db.transaction():
        update_row(db, "comic_editions", edition_id, changes)
        if "comic_id" in changes:
            _sync_volume_count(db, existing["comic_id"])
            _sync_volume_count(db, comic_id)
    return get_edition(db, edition_id)


def delete_edition(db, edition_id: int) -> None:
    existing = get_edition(db, edition_id)
    if is_edition_referenced(db, edition_id):
        raise EditionInUseError(edition_id, "delete")
    with db.transaction():
        db.update("DELETE FROM comic_editions WHERE id = ?", (edition_id,))
        _sync_volume_count(db, existing["comic_id"])
    logger.info(f"Edition {edition_id} deleted")


# --------------- Discount codes -------------------------------------------

def get_discount_code(db, discount_id: int) -> dict | None:
    return db.query("SELECT * FROM discount_codes WHERE id = ?", (discount_id,), one=True)


def list_discount_codes(db) -> list[dict]:
    return db.query("SELECT * FROM discount_codes ORDER BY code ASC")


def create_discount_code(db, code: str | None, percent=0) -> dict:
    require_fields("Please provide the discount code", code=code)
    pct = parse_int(percent, 0)
    if not 0 <= pct <= 100:
        raise ValidationError("Discount percent must be between 0 and 100")
    if db.query("SELECT id FROM discount_codes WHERE code = ?", (code,), one=True):
        raise ConflictError(f"Discount code '{code}' already exists")
    did = db.execute(
        "INSERT INTO discount_codes (code, percent) VALUES (?, ?)", (code, pct)
    )
    return get_discount_code(db, did)
