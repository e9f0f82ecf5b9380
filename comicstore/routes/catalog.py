"""
Catalog routes — categories, comics, editions and discount codes.
Reads are public; writes need an admin token.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from comicstore import catalog, inventory
from comicstore.database import Database
from comicstore.errors import NotFoundError
from comicstore.models import User
from comicstore.routes.deps import CamelModel, get_db, ok, paged, require_admin

router = APIRouter(tags=["catalog"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CategoryRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ComicRequest(CamelModel):
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None


class EditionRequest(CamelModel):
    comic_id: Optional[int] = None
    name: Optional[str] = None
    image: Optional[str] = None
    price: Any = None
    page_count: Any = None
    stock_available: Any = None
    stock_sold: Any = None


class DiscountCodeRequest(CamelModel):
    code: Optional[str] = None
    percent: Any = 0


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@router.get("/categories")
def list_categories(page: Optional[str] = None, limit: Optional[str] = None,
                    db: Database = Depends(get_db)):
    return paged(catalog.list_categories_page(db, page, limit))


@router.get("/categories/all")
def all_categories(db: Database = Depends(get_db)):
    return ok(catalog.list_categories(db))


@router.get("/categories/search")
def search_categories(keyword: str = "", page: Optional[str] = None,
                      limit: Optional[str] = None, db: Database = Depends(get_db)):
    return paged(catalog.search_categories(db, keyword, page, limit))


@router.get("/categories/{category_id}")
def get_category(category_id: int, db: Database = Depends(get_db)):
    return ok(catalog.get_category(db, category_id))


@router.post("/categories", status_code=201)
def create_category(req: CategoryRequest, db: Database = Depends(get_db),
                    admin: User = Depends(require_admin)):
    return ok(catalog.create_category(db, req.name, req.description), "Category created")


@router.put("/categories/{category_id}")
def update_category(category_id: int, req: CategoryRequest, db: Database = Depends(get_db),
                    admin: User = Depends(require_admin)):
    category = catalog.update_category(db, category_id, req.name, req.description)
    return ok(category, "Category updated")


@router.delete("/categories/{category_id}")
def delete_category(category_id: int, db: Database = Depends(get_db),
                    admin: User = Depends(require_admin)):
    catalog.delete_category(db, category_id)
    return ok(message="Category deleted")


# ---------------------------------------------------------------------------
# Comics
# ---------------------------------------------------------------------------

@router.get("/comics")
def list_comics(page: Optional[str] = None, limit: Optional[str] = None,
                db: Database = Depends(get_db)):
    return paged(catalog.list_comics(db, page, limit))


@router.get("/comics/search")
def search_comics(keyword: Optional[str] = None,
                  category_id: Optional[str] = Query(None, alias="categoryId"),
                  page: Optional[str] = None, limit: Optional[str] = None,
                  db: Database = Depends(get_db)):
    return paged(catalog.search_comics(db, keyword, category_id, page, limit))


@router.get("/comics/{comic_id}")
def get_comic(comic_id: int, db: Database = Depends(get_db)):
    return ok(catalog.get_comic(db, comic_id))


@router.post("/comics", status_code=201)
def create_comic(req: ComicRequest, db: Database = Depends(get_db),
                 admin: User = Depends(require_admin)):
    comic = catalog.create_comic(db, req.title, req.author, req.description, req.category_id)
    return ok(comic, "Comic created")


@router.put("/comics/{comic_id}")
def update_comic(comic_id: int, req: ComicRequest, db: Database = Depends(get_db),
                 admin: User = Depends(require_admin)):
    comic = catalog.update_comic(
        db, comic_id, req.title, req.author, req.description, req.category_id
    )
    return ok(comic, "Comic updated")


@router.delete("/comics/{comic_id}")
def delete_comic(comic_id: int, db: Database = Depends(get_db),
                 admin: User = Depends(require_admin)):
    catalog.delete_comic(db, comic_id)
    return ok(message="Comic deleted")


# ---------------------------------------------------------------------------
# Editions
# ---------------------------------------------------------------------------

@router.get("/editions")
def list_editions(page: Optional[str] = None, limit: Optional[str] = None,
                  db: Database = Depends(get_db)):
    return paged(catalog.list_editions(db, page, limit))


@router.get("/editions/search")
def search_editions(keyword: str = "", page: Optional[str] = None,
                    limit: Optional[str] = None, db: Database = Depends(get_db)):
    return paged(catalog.search_editions(db, keyword, page, limit))


@router.get("/editions/low-stock")
def low_stock(threshold: int = 5, db: Database = Depends(get_db),
              admin: User = Depends(require_admin)):
    return ok(inventory.get_low_stock(db, threshold))


@router.get("/editions/comic/{comic_id}")
def editions_by_comic(comic_id: int, page: Optional[str] = None,
                      limit: Optional[str] = None, db: Database = Depends(get_db)):
    return paged(catalog.list_editions_by_comic(db, comic_id, page, limit))


@router.get("/editions/{edition_id}")
def get_edition(edition_id: int, db: Database = Depends(get_db)):
    return ok(catalog.get_edition(db, edition_id))


@router.post("/editions", status_code=201)
def create_edition(req: EditionRequest, db: Database = Depends(get_db),
                   admin: User = Depends(require_admin)):
    edition = catalog.create_edition(
        db, req.comic_id, req.name, req.price, req.page_count,
        stock_available=req.stock_available or 0,
        stock_sold=req.stock_sold or 0,
        image=req.image,
    )
    return ok(edition, "Edition created")


@router.put("/editions/{edition_id}")
def update_edition(edition_id: int, req: EditionRequest, db: Database = Depends(get_db),
                   admin: User = Depends(require_admin)):
    edition = catalog.update_edition(
        db, edition_id,
        name=req.name, price=req.price, page_count=req.page_count,
        stock_available=req.stock_available, stock_sold=req.stock_sold,
        image=req.image, comic_id=req.comic_id,
    )
    return ok(edition, "Edition updated")


@router.delete("/editions/{edition_id}")
def delete_edition(edition_id: int, db: Database = Depends(get_db),
                   admin: User = Depends(require_admin)):
    catalog.delete_edition(db, edition_id)
    return ok(message="Edition deleted")


# ---------------------------------------------------------------------------
# Discount codes
# ---------------------------------------------------------------------------

@router.get("/discount-codes")
def list_discount_codes(db: Database = Depends(get_db)):
    return ok(catalog.list_discount_codes(db))


@router.get("/discount-codes/{discount_id}")
def get_discount_code(discount_id: int, db: Database = Depends(get_db)):
    code = catalog.get_discount_code(db, discount_id)
    if code is None:
        raise NotFoundError("Discount code", discount_id)
    return ok(code)


@router.post("/discount-codes", status_code=201)
def create_discount_code(req: DiscountCodeRequest, db: Database = Depends(get_db),
                         admin: User = Depends(require_admin)):
    return ok(catalog.create_discount_code(db, req.code, req.percent), "Discount code created")
