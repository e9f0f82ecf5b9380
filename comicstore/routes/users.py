from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from comicstore import users
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import CamelModel, get_db, ok, paged, require_admin

router = APIRouter(prefix="/users", tags=["users"])


class RoleRequest(CamelModel):
    role: Optional[str] = None


@router.get("")
def list_users(role: Optional[str] = None, page: Optional[str] = None,
               limit: Optional[str] = None, db: Database = Depends(get_db),
               admin: User = Depends(require_admin)):
    return paged(users.list_users(db, page, limit, role))


@router.get("/search")
def search_users(keyword: str = "", page: Optional[str] = None, limit: Optional[str] = None,
                 db: Database = Depends(get_db), admin: User = Depends(require_admin)):
    return paged(users.search_users(db, keyword, page, limit))


@router.get("/{user_id}")
def get_user(user_id: int, db: Database = Depends(get_db),
             admin: User = Depends(require_admin)):
    return ok(users.get_user(db, user_id))


@router.put("/{user_id}/role")
def update_role(user_id: int, req: RoleRequest, db: Database = Depends(get_db),
                admin: User = Depends(require_admin)):
    return ok(users.update_user_role(db, user_id, req.role, admin), "Role updated")


@router.put("/{user_id}/toggle-status")
def toggle_status(user_id: int, db: Database = Depends(get_db),
                  admin: User = Depends(require_admin)):
    return ok(users.toggle_user_status(db, user_id, admin), "Status updated")


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Database = Depends(get_db),
                admin: User = Depends(require_admin)):
    users.delete_user(db, user_id, admin)
    return ok(message="User deleted")
