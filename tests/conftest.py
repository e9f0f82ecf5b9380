"""Pytest fixtures for comic store tests."""

import pytest
from fastapi.testclient import TestClient

from comicstore import auth, catalog
from comicstore.database import Database
from comicstore.main import create_app
from comicstore.models import Role
from comicstore.payment_client import PaymentClient

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Keep password hashing cheap in tests."""
    monkeypatch.setattr(auth, "_PBKDF2_ROUNDS", 1000)


@pytest.fixture
def db(tmp_path):
    """A fresh SQLite database per test."""
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    yield database
    database.close()


@pytest.fixture
def admin(db):
    return auth.create_user(db, "admin", "admin@example.com", PASSWORD, "Admin", Role.ADMIN)


@pytest.fixture
def alice(db):
    return auth.create_user(db, "alice", "alice@example.com", PASSWORD, "Alice Reader")


@pytest.fixture
def bob(db):
    return auth.create_user(db, "bob", "bob@example.com", PASSWORD, "Bob Reader")


@pytest.fixture
def comic(db):
    category = catalog.create_category(db, "Manga", "Japanese comics")
    return catalog.create_comic(db, "One Piece", "Eiichiro Oda", "Pirates", category["id"])


@pytest.fixture
def edition(db, comic):
    """Edition with 5 copies on the shelf at 10 each."""
    return catalog.create_edition(
        db, comic["id"], "Volume 1", "10", 200, stock_available=5, stock_sold=0
    )


def stock_of(db, edition_id):
    row = db.query(
        "SELECT stock_available, stock_sold FROM comic_editions WHERE id = ?",
        (edition_id,), one=True,
    )
    return row["stock_available"], row["stock_sold"]


@pytest.fixture
def payment_client():
    return PaymentClient(base_url="https://gateway.test/api", api_key="test-key")


@pytest.fixture
def client(db, payment_client):
    return TestClient(create_app(db, payment_client))


def bearer(user):
    return {"Authorization": f"Bearer {auth.create_token(user)}"}
