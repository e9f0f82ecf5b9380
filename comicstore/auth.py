"""
Authentication & authorization helpers.
Handles password hashing, signed token creation, and login/register flows.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
import time

from comicstore.config import SECRET_KEY, TOKEN_ALGORITHM, TOKEN_EXPIRY_MINUTES
from comicstore.errors import AuthenticationError, ConflictError, ValidationError
from comicstore.models import Role, User
from comicstore.utils.helpers import now_iso
from comicstore.utils.validators import (
    check, require_fields, validate_email, validate_password, validate_username,
)

logger = logging.getLogger(__name__)

_PBKDF2_ROUNDS = 120_000


# --------------- Password hashing -----------------------------------------

def hash_password(plain: str, salt: str | None = None) -> str:
    """PBKDF2-SHA256; the result embeds its salt as ``salt$hexdigest``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", plain.encode(), salt.encode(), _PBKDF2_ROUNDS)
    return f"{salt}${digest.hex()}"


def verify_password(plain: str, hashed: str) -> bool:
    salt, _, _ = hashed.partition("$")
    return hmac.compare_digest(hash_password(plain, salt), hashed)


# --------------- Signed tokens --------------------------------------------

def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _sign(header: str, payload: str) -> str:
    return hmac.new(SECRET_KEY.encode(), f"{header}.{payload}".encode(), hashlib.sha256).hexdigest()


def create_token(user: User, expires_in: int = TOKEN_EXPIRY_MINUTES * 60) -> str:
    """Create a compact HMAC-signed token for ``user``."""
    header = _b64(json.dumps({"alg": TOKEN_ALGORITHM, "typ": "JWT"}).encode())
    payload_data = {
        "sub": user.id,
        "name": user.username,
        "role": user.role.value,
        "exp": int(time.time()) + expires_in,
    }
    payload = _b64(json.dumps(payload_data).encode())
    return f"{header}.{payload}.{_sign(header, payload)}"


def decode_token(token: str) -> dict | None:
    """Verify and decode the token. Returns None if invalid or expired."""
    parts = (token or "").split(".")
    if len(parts) != 3:
        return None
    header, payload, sig = parts
    if not hmac.compare_digest(sig, _sign(header, payload)):
        return None
    try:
        data = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
    except (ValueError, TypeError):
        return None
    if data.get("exp", 0) < time.time():
        return None
    return data


# --------------- High‑level auth flows ------------------------------------

def load_user(db, user_id: int) -> User | None:
    row = db.query("SELECT * FROM users WHERE id = ?", (user_id,), one=True)
    return User.from_row(row) if row else None


def create_user(db, username: str, email: str, password: str,
                full_name: str | None = None, role: Role = Role.USER) -> User:
    """Insert a user row; callers validate input first."""
    if db.query("SELECT id FROM users WHERE username = ?", (username,), one=True):
        raise ConflictError("Username already taken")
    uid = db.execute(
        "INSERT INTO users (username, email, password_hash, full_name, role, is_active, created_at) "
        "VALUES (?, ?, ?, ?, ?, 1, ?)",
        (username, email, hash_password(password), full_name, Role(role).value, now_iso()),
    )
    return load_user(db, uid)


def register_user(db, username: str | None, email: str | None, password: str | None,
                  full_name: str | None = None) -> User:
    """Create a new customer account."""
    require_fields(
        "Username, email and password are required",
        username=username, email=email, password=password,
    )
    username = username.strip()
    check(validate_username(username))
    if not validate_email(email):
        raise ValidationError("Invalid email address")
    check(validate_password(password))

    user = create_user(db, username, email.strip(), password, full_name)
    logger.info(f"Registered user {user.id} ({user.username})")
    return user


def login_user(db, username: str | None, password: str | None) -> tuple[User, str]:
    """Validate credentials and return the user with a fresh token."""
    row = db.query("SELECT * FROM users WHERE username = ?", (username or "",), one=True)
    if not row or not verify_password(password or "", row["password_hash"]):
        raise AuthenticationError("Invalid credentials")
    user = User.from_row(row)
    if not user.is_active:
        raise AuthenticationError("This account has been disabled")
    return user, create_token(user)


def get_current_user(db, token: str | None) -> User:
    """Decode ``token`` and fetch the user, or raise AuthenticationError."""
    if not token:
        raise AuthenticationError("Missing authentication token")
    data = decode_token(token)
    if data is None:
        raise AuthenticationError("Invalid or expired token")
    user = load_user(db, data["sub"])
    if user is None:
        raise AuthenticationError("User no longer exists")
    if not user.is_active:
        raise AuthenticationError("This account has been disabled")
    return user
