"""Tests for the FastAPI API."""

import pytest
from fastapi.testclient import TestClient

from comicstore import orders, users
from comicstore.main import create_app

from conftest import PASSWORD, bearer, stock_of


class TestHealthCheck:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestErrorEnvelope:
    def test_missing_token(self, client):
        response = client.get("/orders")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_admin_only(self, client, alice):
        response = client.get("/users", headers=bearer(alice))
        assert response.status_code == 403

    def test_unknown_route(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_malformed_body(self, client, alice, edition):
        response = client.post(
            "/orders", json={"editionId": edition["id"], "quantity": "many"}, headers=bearer(alice)
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "quantity"

    def test_disabled_account_token_rejected(self, client, db, admin, alice, edition):
        headers = bearer(alice)
        users.toggle_user_status(db, alice.id, admin)
        response = client.post(
            "/orders", json={"editionId": edition["id"], "quantity": 1}, headers=headers
        )
        assert response.status_code == 401
        assert response.json()["message"] == "This account has been disabled"
        assert stock_of(db, edition["id"]) == (5, 0)

    def test_unexpected_error(self, db, alice, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(orders, "list_orders", explode)
        client = TestClient(create_app(db), raise_server_exceptions=False)
        response = client.get("/orders", headers=bearer(alice))
        assert response.status_code == 500
        assert response.json()["error"] == "disk on fire"


class TestOrderEndpoints:
    def test_create_order(self, client, db, alice, edition):
        response = client.post(
            "/orders", json={"editionId": edition["id"], "quantity": 3}, headers=bearer(alice)
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "PENDING"
        assert body["data"]["total"] == 30
        assert stock_of(db, edition["id"]) == (2, 3)

    def test_missing_fields(self, client, alice):
        response = client.post("/orders", json={}, headers=bearer(alice))
        assert response.status_code == 400
        assert set(response.json()["missing"]) == {"edition_id", "quantity"}

    def test_insufficient_stock(self, client, alice, edition):
        response = client.post(
            "/orders", json={"editionId": edition["id"], "quantity": 9}, headers=bearer(alice)
        )
        assert response.status_code == 400
        assert response.json()["available"] == 5

    def test_unknown_edition(self, client, alice):
        response = client.post(
            "/orders", json={"editionId": 999, "quantity": 1}, headers=bearer(alice)
        )
        assert response.status_code == 404

    def test_status_update_and_return(self, client, db, admin, alice, edition):
        order = orders.create_order(db, alice, edition["id"], 2)
        for status in ("SHIPPING", "SUCCESS", "BACK"):
            response = client.put(
                f"/orders/{order['id']}/status", json={"status": status}, headers=bearer(admin)
            )
            assert response.status_code == 200
        assert response.json()["data"]["status"] == "BACK"
        assert stock_of(db, edition["id"]) == (5, 0)

    def test_invalid_status(self, client, db, admin, alice, edition):
        order = orders.create_order(db, alice, edition["id"], 1)
        response = client.put(
            f"/orders/{order['id']}/status", json={"status": "LOST"}, headers=bearer(admin)
        )
        assert response.status_code == 400
        assert "SHIPPING" in response.json()["validStatuses"]

    def test_status_update_by_stranger(self, client, db, alice, bob, edition):
        order = orders.create_order(db, alice, edition["id"], 1)
        response = client.put(
            f"/orders/{order['id']}/status", json={"status": "SUCCESS"}, headers=bearer(bob)
        )
        assert response.status_code == 403

    def test_list_orders_pagination(self, client, db, alice, edition):
        for _ in range(3):
            orders.create_order(db, alice, edition["id"], 1)
        response = client.get("/orders?page=2&limit=2", headers=bearer(alice))
        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 1
        assert body["totalCount"] == 3
        assert body["currentPage"] == 2
        assert body["totalPages"] == 2
        assert body["hasNext"] is False
        assert body["hasPrev"] is True

    def test_list_orders_invalid_status(self, client, alice):
        response = client.get("/orders?status=LOST", headers=bearer(alice))
        assert response.status_code == 400

    def test_pending_shortcut(self, client, db, alice, edition):
        orders.create_order(db, alice, edition["id"], 1)
        response = client.get("/orders/pending", headers=bearer(alice))
        assert response.json()["totalCount"] == 1


class TestCancellationEndpoints:
    @pytest.fixture
    def order(self, db, alice, edition):
        return orders.create_order(db, alice, edition["id"], 1)

    def test_create_and_decide(self, client, admin, alice, order):
        response = client.post(
            "/cancellation-requests",
            json={"orderId": order["id"], "reason": "Late"},
            headers=bearer(alice),
        )
        assert response.status_code == 201
        request_id = response.json()["data"]["id"]

        response = client.put(
            f"/cancellation-requests/{request_id}",
            json={"decision": 1, "replyContent": "Refunded"},
            headers=bearer(admin),
        )
        assert response.status_code == 200
        assert response.json()["data"]["decision"] == 1
        assert response.json()["data"]["reply_content"] == "Refunded"

    def test_owner_decision_without_reason(self, client, alice, order):
        created = client.post(
            "/cancellation-requests",
            json={"orderId": order["id"], "reason": "Late"},
            headers=bearer(alice),
        ).json()["data"]
        response = client.put(
            f"/cancellation-requests/{created['id']}", json={"decision": 1}, headers=bearer(alice)
        )
        assert response.status_code == 400

    def test_list_own(self, client, alice, order):
        client.post(
            "/cancellation-requests",
            json={"orderId": order["id"], "reason": "Late"},
            headers=bearer(alice),
        )
        response = client.get("/cancellation-requests/user", headers=bearer(alice))
        assert response.json()["totalCount"] == 1

    def test_list_other_user_forbidden(self, client, alice, bob):
        response = client.get(f"/cancellation-requests/user/{alice.id}", headers=bearer(bob))
        assert response.status_code == 403


class TestCatalogEndpoints:
    def test_public_reads(self, client, edition):
        assert client.get("/comics").json()["totalCount"] == 1
        assert client.get(f"/editions/{edition['id']}").json()["data"]["name"] == "Volume 1"

    def test_writes_need_admin(self, client, alice):
        response = client.post("/categories", json={"name": "Horror"}, headers=bearer(alice))
        assert response.status_code == 403

    def test_admin_creates_edition(self, client, admin, comic):
        response = client.post(
            "/editions",
            json={"comicId": comic["id"], "name": "Volume 9", "price": "8.50",
                  "pageCount": 180, "stockAvailable": 4},
            headers=bearer(admin),
        )
        assert response.status_code == 201
        assert response.json()["data"]["price"] == 8.5

    def test_duplicate_category(self, client, admin, comic):
        response = client.post("/categories", json={"name": "Manga"}, headers=bearer(admin))
        assert response.status_code == 409

    def test_locked_edition(self, client, db, admin, alice, edition):
        orders.create_order(db, alice, edition["id"], 1)
        response = client.delete(f"/editions/{edition['id']}", headers=bearer(admin))
        assert response.status_code == 400

    def test_low_stock(self, client, admin, edition):
        response = client.get("/editions/low-stock?threshold=10", headers=bearer(admin))
        assert [e["id"] for e in response.json()["data"]] == [edition["id"]]


class TestCartEndpoints:
    def test_add_view_clear(self, client, alice, edition):
        response = client.post(
            "/cart", json={"editionId": edition["id"], "quantity": 2}, headers=bearer(alice)
        )
        assert response.status_code == 201

        cart = client.get("/cart", headers=bearer(alice)).json()["data"]
        assert cart["count"] == 1
        assert cart["total_amount"] == 20

        response = client.delete("/cart/clear", headers=bearer(alice))
        assert response.json()["data"] == {"removed": 1}


class TestAuthEndpoints:
    def test_register_login_profile_with_cookie(self, client):
        response = client.post(
            "/auth/register",
            json={"username": "dave", "email": "dave@example.com",
                  "password": "pass1234", "fullName": "Dave"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["full_name"] == "Dave"

        response = client.post("/auth/login", json={"username": "dave", "password": "pass1234"})
        assert response.status_code == 200
        assert response.json()["data"]["accessToken"]

        profile = client.get("/auth/profile")
        assert profile.status_code == 200
        assert profile.json()["data"]["username"] == "dave"

    def test_bad_login(self, client, alice):
        response = client.post("/auth/login", json={"username": "alice", "password": "nope12"})
        assert response.status_code == 401

    def test_admin_lists_users(self, client, admin, alice):
        response = client.get("/users", headers=bearer(admin))
        assert response.json()["totalCount"] == 2

    def test_statistics_overview(self, client, admin):
        response = client.get("/statistics/overview", headers=bearer(admin))
        assert response.status_code == 200
        assert response.json()["data"]["totalUsers"] == 1

    def test_login_with_seeded_password(self, client, alice):
        response = client.post("/auth/login", json={"username": "alice", "password": PASSWORD})
        assert response.status_code == 200
