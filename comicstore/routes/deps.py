"""
Shared FastAPI dependencies and response helpers.
"""

from __future__ import annotations

from fastapi import Depends, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from comicstore.auth import get_current_user
from comicstore.database import Database
from comicstore.errors import ForbiddenError
from comicstore.models import User
from comicstore.utils.helpers import Page


class CamelModel(BaseModel):
    """Request body accepting camelCase (or snake_case) field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_payment_client(request: Request):
    return request.app.state.payment_client


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.cookies.get("accessToken")


def current_user(request: Request, db: Database = Depends(get_db)) -> User:
    return get_current_user(db, _bearer_token(request))


def require_admin(user: User = Depends(current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user


def ok(data=None, message: str | None = None) -> dict:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def paged(page: Page, message: str | None = None) -> dict:
    return {**ok(page.items, message), **page.meta()}
