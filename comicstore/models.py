"""
Data models — plain dataclasses and enums over the SQLite rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

from comicstore.errors import ValidationError


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    SHIPPING = "SHIPPING"
    SUCCESS = "SUCCESS"
    BACK_PENDING = "BACK_PENDING"
    BACK = "BACK"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]

    @classmethod
    def parse(cls, raw) -> "OrderStatus":
        """Return the member for ``raw`` or raise ValidationError listing valid values."""
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError(
                f"Invalid status. Status must be one of: {', '.join(cls.values())}",
                validStatuses=cls.values(),
            ) from None


class CancellationDecision(IntEnum):
    PENDING = 0
    ACCEPTED = 1
    REJECTED = 2


class StockEffect(Enum):
    NONE = "none"
    RESTORE = "restore"


# Every status may move to every status; only a return from a shipped or
# delivered order puts copies back on the shelf.
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(OrderStatus),
    OrderStatus.SHIPPING: frozenset(OrderStatus),
    OrderStatus.SUCCESS: frozenset(OrderStatus),
    OrderStatus.BACK_PENDING: frozenset(OrderStatus),
    OrderStatus.BACK: frozenset(OrderStatus),
}

_STOCK_RESTORING = frozenset({
    (OrderStatus.SUCCESS, OrderStatus.BACK),
    (OrderStatus.SHIPPING, OrderStatus.BACK),
})

_missing = set(OrderStatus) - set(ORDER_TRANSITIONS)
if _missing:
    raise RuntimeError(f"Order transition table is missing states: {sorted(s.value for s in _missing)}")


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in ORDER_TRANSITIONS[current]


def transition_effect(current: OrderStatus, requested: OrderStatus) -> StockEffect:
    """Validate ``current -> requested`` and return its effect on stock."""
    if not can_transition(current, requested):
        raise ValidationError(
            f"Cannot move order from {current.value} to {requested.value}"
        )
    if (current, requested) in _STOCK_RESTORING:
        return StockEffect.RESTORE
    return StockEffect.NONE


@dataclass
class User:
    id: int = 0
    username: str = ""
    email: str = ""
    full_name: Optional[str] = None
    role: Role = Role.USER
    is_active: bool = True
    created_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def owns(self, row: dict) -> bool:
        return row.get("user_id") == self.id

    def can_access(self, row: dict) -> bool:
        """Owner of the row, or an admin."""
        return self.is_admin or self.owns(row)

    @classmethod
    def from_row(cls, row: dict) -> "User":
        return cls(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            full_name=row.get("full_name"),
            role=Role(row.get("role", "user")),
            is_active=bool(row.get("is_active", 1)),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }


@dataclass
class ComicEdition:
    id: int
    comic_id: int
    name: str
    price: Decimal
    page_count: int
    stock_available: int = 0
    stock_sold: int = 0
    image: Optional[str] = None

    def has_stock(self, qty: int) -> bool:
        return self.stock_available >= qty

    def price_for(self, qty: int) -> Decimal:
        return self.price * qty

    @classmethod
    def from_row(cls, row: dict) -> "ComicEdition":
        return cls(
            id=row["id"],
            comic_id=row["comic_id"],
            name=row["name"],
            price=Decimal(row["price"]),
            page_count=row["page_count"],
            stock_available=row["stock_available"],
            stock_sold=row["stock_sold"],
            image=row.get("image"),
        )
