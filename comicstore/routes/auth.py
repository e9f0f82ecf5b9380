"""
Auth routes — registration, login, profile.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response

from comicstore import auth
from comicstore.config import TOKEN_EXPIRY_MINUTES
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import CamelModel, current_user, get_db, ok

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=201)
def register(req: RegisterRequest, db: Database = Depends(get_db)):
    user = auth.register_user(db, req.username, req.email, req.password, req.full_name)
    return ok(user.to_dict(), "Registration successful")


@router.post("/login")
def login(req: LoginRequest, response: Response, db: Database = Depends(get_db)):
    user, token = auth.login_user(db, req.username, req.password)
    response.set_cookie(
        "accessToken", token, httponly=True, max_age=TOKEN_EXPIRY_MINUTES * 60, samesite="lax"
    )
    return ok({"user": user.to_dict(), "accessToken": token}, "Login successful")


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie("accessToken")
    return ok(message="Logged out")


@router.get("/profile")
def profile(user: User = Depends(current_user)):
    return ok(user.to_dict())
