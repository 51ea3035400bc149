"""HTTP-level tests with the database and identity dependencies overridden."""
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.main import app
from core.auth.auth import get_current_user
from infrastructure.database.client import get_db

BUYER_ID = ObjectId()
ADMIN_ID = ObjectId()
BUYER = {"_id": BUYER_ID, "name": "Buyer", "email": "buyer@example.com", "role": "user"}
ADMIN = {"_id": ADMIN_ID, "name": "Admin", "email": "admin@example.com", "role": "admin"}


@pytest.fixture
def mock_db() -> MagicMock:
    db = MagicMock()
    db.users.find.return_value = [BUYER]
    return db


@pytest.fixture
def client(mock_db):
    app.dependency_overrides[get_db] = lambda: mock_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login_as(user: dict) -> None:
    app.dependency_overrides[get_current_user] = lambda: user


def _stored_order(mock_db, **fields) -> str:
    order_id = ObjectId()
    document = {
        "_id": order_id, "userId": str(BUYER_ID), "status": "pending", "proposalStatus": "none",
        "items": [{"itemId": "i1", "name": "Rice", "qty": 10, "priceRange": {"min": 1.5, "max": 2.2}}],
        "messages": [], "version": 0, **fields,
    }
    mock_db.orders.find_one.return_value = document
    mock_db.orders.replace_one.return_value.matched_count = 1
    return str(order_id)


def test_health(client) -> None:
    response = client.get("/v1/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "b2b-backend"}


def test_orders_require_bearer_token(client) -> None:
    response = client.post("/v1/orders", json={"items": [{"name": "Rice", "qty": 1}]})
    assert response.status_code == 401


def test_create_order_returns_camel_case(client, mock_db) -> None:
    _login_as(BUYER)
    mock_db.orders.insert_one.return_value.inserted_id = ObjectId()
    response = client.post("/v1/orders", json={
        "items": [{"id": "p-1", "name": "Rice", "qty": 10, "priceRange": {"min": 1.5, "max": 2.2, "currency": "EUR"}}],
        "note": "Deliver to Hamburg",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["totalMin"] == pytest.approx(15)
    assert body["items"][0]["productId"] == "p-1"
    assert body["user"]["email"] == "buyer@example.com"


def test_create_order_with_string_qty(client, mock_db) -> None:
    _login_as(BUYER)
    mock_db.orders.insert_one.return_value.inserted_id = ObjectId()
    response = client.post("/v1/orders", json={"items": [{"name": "Rice", "qty": "0"}]})
    assert response.status_code == 201
    assert response.json()["items"][0]["qty"] == 1


def test_create_order_with_unknown_field(client) -> None:
    _login_as(BUYER)
    response = client.post("/v1/orders", json={"items": [], "coupon": "FREE"})
    assert response.status_code == 422


def test_create_order_without_items(client) -> None:
    _login_as(BUYER)
    response = client.post("/v1/orders", json={"items": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "No items provided"


def test_approve_without_proposal(client, mock_db) -> None:
    _login_as(BUYER)
    order_id = _stored_order(mock_db)
    response = client.post(f"/v1/orders/{order_id}/approve")
    assert response.status_code == 400
    assert response.json()["detail"] == "No proposal to approve"


def test_admin_proposal_then_buyer_approval(client, mock_db) -> None:
    _login_as(ADMIN)
    order_id = _stored_order(mock_db)
    response = client.post(f"/v1/orders/{order_id}/propose",
                           json={"items": [{"index": 0, "unitPrice": 2, "qty": 10}], "note": "final"})
    assert response.status_code == 200
    assert response.json()["proposal"]["total"] == pytest.approx(20)

    _stored_order(mock_db, status="proposed", proposalStatus="sent", proposal=response.json()["proposal"])
    _login_as(BUYER)
    response = client.post(f"/v1/orders/{order_id}/approve")
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    assert response.json()["finalTotal"] == pytest.approx(20)


def test_buyer_cannot_ship(client, mock_db) -> None:
    _login_as(BUYER)
    order_id = _stored_order(mock_db)
    assert client.post(f"/v1/orders/{order_id}/ship").status_code == 403


def test_stale_write_is_409(client, mock_db) -> None:
    _login_as(BUYER)
    order_id = _stored_order(mock_db)
    mock_db.orders.replace_one.return_value.matched_count = 0
    response = client.post(f"/v1/orders/{order_id}/messages", json={"body": "hello"})
    assert response.status_code == 409


def test_list_orders_rejects_bad_status(client) -> None:
    _login_as(BUYER)
    assert client.get("/v1/orders", params={"status": "pending,lost"}).status_code == 400


def test_user_list_is_admin_only(client, mock_db) -> None:
    _login_as(BUYER)
    assert client.get("/v1/users").status_code == 403

    _login_as(ADMIN)
    mock_db.users.find.return_value = MagicMock(**{"sort.return_value": [BUYER, ADMIN]})
    response = client.get("/v1/users")
    assert response.status_code == 200
    assert [user["email"] for user in response.json()] == ["buyer@example.com", "admin@example.com"]


def test_contact_honeypot(client) -> None:
    response = client.post("/v1/contact", json={
        "name": "Bot", "email": "bot@spam.io", "message": "Buy now", "hp": "filled",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Bad request"


def test_upload_rejects_non_images(client) -> None:
    _login_as(ADMIN)
    response = client.post("/v1/upload/image", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400


def test_upload_image(client) -> None:
    _login_as(ADMIN)
    response = client.post("/v1/upload/image", files={"file": ("photo.png", b"\x89PNG fake", "image/png")})
    assert response.status_code == 201
    assert response.json()["url"].startswith("/uploads/")
    assert response.json()["url"].endswith(".png")


def test_contact_accepts_captcha_token(client, mock_db) -> None:
    mock_db.contact_messages.count_documents.return_value = 0
    mock_db.contact_messages.insert_one.return_value.inserted_id = ObjectId()
    response = client.post("/v1/contact", json={
        "name": "Ana", "email": "ana@example.com", "message": "Need 2t of rice", "hcaptchaToken": "tok",
    })
    assert response.status_code == 201
    assert response.json()["ok"] is True
