"""
Statistics for the admin dashboard.

Revenue only counts delivered (SUCCESS) orders and is bucketed in Python
over the rows of the requested period.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from comicstore.catalog import count_categories, count_comics
from comicstore.errors import ValidationError
from comicstore.models import OrderStatus
from comicstore.users import count_users
from comicstore.utils.helpers import parse_date, parse_int

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def overview(db) -> dict:
    counts = {
        row["status"]: row["n"]
        for row in db.query("SELECT status, COUNT(*) AS n FROM orders GROUP BY status")
    }
    return {
        "totalCategories": count_categories(db),
        "totalComics": count_comics(db),
        "pendingOrders": counts.get(OrderStatus.PENDING.value, 0),
        "shippingOrders": counts.get(OrderStatus.SHIPPING.value, 0),
        "successOrders": counts.get(OrderStatus.SUCCESS.value, 0),
        "backPendingOrders": counts.get(OrderStatus.BACK_PENDING.value, 0),
        "returnedOrders": counts.get(OrderStatus.BACK.value, 0),
        "totalUsers": count_users(db),
    }


def _successful_orders(db, start: datetime, end: datetime) -> list[tuple[datetime, Decimal]]:
    rows = db.query(
        "SELECT total, created_at FROM orders "
        "WHERE status = ? AND created_at >= ? AND created_at <= ?",
        (OrderStatus.SUCCESS.value,
         start.isoformat(timespec="seconds"),
         end.isoformat(timespec="seconds")),
    )
    return [(datetime.fromisoformat(r["created_at"]), Decimal(r["total"])) for r in rows]


def _buckets(labels: list[str]) -> list[dict]:
    return [{"label": label, "value": Decimal("0")} for label in labels]


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time(23, 59, 59))


def _to_date(raw) -> date:
    if raw is None or raw == "":
        return date.today()
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    parsed = parse_date(str(raw))
    if parsed is None:
        raise ValidationError(f"Invalid date: {raw}")
    return parsed.date()


def _year(raw, default: int) -> int:
    year = parse_int(raw, default)
    if not 1 <= year <= 9999:
        raise ValidationError("Year must be between 1 and 9999")
    return year


def daily_revenue(db, day=None) -> list[dict]:
    """Hourly revenue for one day."""
    day = _to_date(day)
    buckets = _buckets([f"{h}:00" for h in range(24)])
    for created, total in _successful_orders(db, *_day_bounds(day)):
        buckets[created.hour]["value"] += total
    return buckets


def weekly_revenue(db, today=None) -> list[dict]:
    """Revenue per day, Monday to Sunday of the week containing ``today``."""
    today = _to_date(today)
    monday = today - timedelta(days=today.weekday())
    start, _ = _day_bounds(monday)
    _, end = _day_bounds(monday + timedelta(days=6))

    buckets = _buckets(DAY_NAMES)
    for created, total in _successful_orders(db, start, end):
        offset = (created.date() - monday).days
        if 0 <= offset < 7:
            buckets[offset]["value"] += total
    return buckets


def monthly_revenue(db, month=None, year=None, today=None) -> list[dict]:
    """Revenue per day of the month."""
    today = _to_date(today)
    month = parse_int(month, today.month)
    year = _year(year, today.year)
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")

    days = calendar.monthrange(year, month)[1]
    start, _ = _day_bounds(date(year, month, 1))
    _, end = _day_bounds(date(year, month, days))

    buckets = _buckets([str(d) for d in range(1, days + 1)])
    for created, total in _successful_orders(db, start, end):
        buckets[created.day - 1]["value"] += total
    return buckets


def yearly_revenue(db, year=None, today=None) -> list[dict]:
    """Revenue per month of the year."""
    year = _year(year, _to_date(today).year)
    start, _ = _day_bounds(date(year, 1, 1))
    _, end = _day_bounds(date(year, 12, 31))

    buckets = _buckets(MONTH_NAMES)
    for created, total in _successful_orders(db, start, end):
        buckets[created.month - 1]["value"] += total
    return buckets


def all_revenue(db, today=None) -> dict:
    today = _to_date(today)
    return {
        "daily": daily_revenue(db, today),
        "weekly": weekly_revenue(db, today),
        "monthly": monthly_revenue(db, today=today),
        "yearly": yearly_revenue(db, today=today),
    }
