"""Tests for authentication and user administration."""

import pytest

from comicstore import addresses, auth, cancellations, cart, orders, users
from comicstore.errors import (
    AuthenticationError, ConflictError, NotFoundError, ValidationError,
)
from comicstore.models import Role

from conftest import PASSWORD


class TestAuth:
    def test_register_and_login(self, db):
        user = auth.register_user(db, "carol", "carol@example.com", "hunter22", "Carol")
        assert user.role is Role.USER
        logged_in, token = auth.login_user(db, "carol", "hunter22")
        assert logged_in.id == user.id
        assert auth.get_current_user(db, token).username == "carol"

    def test_duplicate_username(self, db, alice):
        with pytest.raises(ConflictError):
            auth.register_user(db, "alice", "other@example.com", "hunter22")

    @pytest.mark.parametrize("username, email, password", [
        ("ab", "ab@example.com", "hunter22"),
        ("carol", "not-an-email", "hunter22"),
        ("carol", "carol@example.com", "short"),
        ("carol", "carol@example.com", "nodigits"),
        (None, "carol@example.com", "hunter22"),
    ])
    def test_register_validation(self, db, username, email, password):
        with pytest.raises(ValidationError):
            auth.register_user(db, username, email, password)

    def test_wrong_password(self, db, alice):
        with pytest.raises(AuthenticationError):
            auth.login_user(db, "alice", "wrong1")

    def test_disabled_account(self, db, admin, alice):
        users.toggle_user_status(db, alice.id, admin)
        with pytest.raises(AuthenticationError):
            auth.login_user(db, "alice", PASSWORD)

    def test_disabled_account_token_rejected(self, db, admin, alice):
        token = auth.create_token(alice)
        users.toggle_user_status(db, alice.id, admin)
        with pytest.raises(AuthenticationError):
            auth.get_current_user(db, token)

    def test_tampered_token(self, db, alice):
        token = auth.create_token(alice)
        header, payload, sig = token.split(".")
        with pytest.raises(AuthenticationError):
            auth.get_current_user(db, f"{header}.{payload}.{'0' * len(sig)}")

    def test_expired_token(self, db, alice):
        token = auth.create_token(alice, expires_in=-10)
        assert auth.decode_token(token) is None

    def test_missing_token(self, db):
        with pytest.raises(AuthenticationError):
            auth.get_current_user(db, None)


class TestUserAdmin:
    def test_list_and_filter_by_role(self, db, admin, alice, bob):
        assert users.list_users(db).total_count == 3
        page = users.list_users(db, role="admin")
        assert [u["username"] for u in page.items] == ["admin"]
        assert "password_hash" not in page.items[0]

    def test_search(self, db, admin, alice, bob):
        page = users.search_users(db, "reader")
        assert {u["username"] for u in page.items} == {"alice", "bob"}

    def test_get_counts_orders(self, db, alice, edition):
        orders.create_order(db, alice, edition["id"], 1)
        assert users.get_user(db, alice.id)["order_count"] == 1

    def test_update_role(self, db, admin, alice):
        assert users.update_user_role(db, alice.id, "admin", admin)["role"] == "admin"

    def test_invalid_role(self, db, admin, alice):
        with pytest.raises(ValidationError):
            users.update_user_role(db, alice.id, "superuser", admin)

    def test_cannot_demote_self(self, db, admin):
        with pytest.raises(ValidationError):
            users.update_user_role(db, admin.id, "user", admin)

    def test_toggle_status(self, db, admin, alice):
        assert users.toggle_user_status(db, alice.id, admin)["is_active"] is False
        assert users.toggle_user_status(db, alice.id, admin)["is_active"] is True


class TestDeleteUser:
    def test_deletes_dependents(self, db, admin, bob, edition):
        cart.add_to_cart(db, bob, edition["id"], 1)
        addresses.create_address(db, bob, "3 Hill Rd", "Bob", "555-0102")

        users.delete_user(db, bob.id, admin)

        with pytest.raises(NotFoundError):
            users.get_user(db, bob.id)
        assert db.scalar("SELECT COUNT(*) FROM cart_items") == 0
        assert db.scalar("SELECT COUNT(*) FROM shipping_addresses") == 0

    def test_refuses_user_with_orders(self, db, admin, alice, edition):
        order = orders.create_order(db, alice, edition["id"], 1)
        cancellations.create_cancellation(db, alice, order["id"], "Wrong item")
        with pytest.raises(ValidationError):
            users.delete_user(db, alice.id, admin)
        assert users.get_user(db, alice.id)["username"] == "alice"

    def test_refuses_self(self, db, admin):
        with pytest.raises(ValidationError):
            users.delete_user(db, admin.id, admin)
