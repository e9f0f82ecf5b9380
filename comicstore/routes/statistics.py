from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from comicstore import statistics
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import get_db, ok, require_admin

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("/overview")
def overview(db: Database = Depends(get_db), admin: User = Depends(require_admin)):
    return ok(statistics.overview(db))


@router.get("/revenue/daily")
def daily(date: Optional[str] = None, db: Database = Depends(get_db),
          admin: User = Depends(require_admin)):
    return ok(statistics.daily_revenue(db, date))


@router.get("/revenue/weekly")
def weekly(db: Database = Depends(get_db), admin: User = Depends(require_admin)):
    return ok(statistics.weekly_revenue(db))


@router.get("/revenue/monthly")
def monthly(month: Optional[str] = None, year: Optional[str] = None,
            db: Database = Depends(get_db), admin: User = Depends(require_admin)):
    return ok(statistics.monthly_revenue(db, month, year))


@router.get("/revenue/yearly")
def yearly(year: Optional[str] = None, db: Database = Depends(get_db),
           admin: User = Depends(require_admin)):
    return ok(statistics.yearly_revenue(db, year))


@router.get("/revenue/all")
def all_periods(db: Database = Depends(get_db), admin: User = Depends(require_admin)):
    return ok(statistics.all_revenue(db))
