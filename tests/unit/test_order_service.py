"""Unit tests for the order service using a MagicMock database."""
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from domain.entities.order import OrderStatus
from domain.schemas.order import MessageCreate, OrderCreate
from domain.workflows import order_workflow
from services import orders as order_service


@pytest.fixture
def stored(db, make_order, buyer):
    """Make ``db.orders.find_one`` return one stored order."""
    order = make_order()
    document = order.to_document()
    document["_id"] = ObjectId(order.id)
    db.orders.find_one.return_value = document
    db.orders.replace_one.return_value.matched_count = 1
    db.users.find.return_value = [
        {"_id": ObjectId(buyer.id), "name": "Buyer", "email": "buyer@example.com", "role": "user"},
    ]
    return order


class TestCreateOrder:
    def test_inserts_and_returns_owner(self, db, buyer) -> None:
        new_id = ObjectId()
        db.orders.insert_one.return_value.inserted_id = new_id
        db.users.find.return_value = [{"_id": ObjectId(buyer.id), "name": "Buyer", "email": "b@x.io", "role": "user"}]

        data = OrderCreate.model_validate({"items": [{"id": "p1", "name": "Rice", "qty": 10}]})
        response = order_service.create_order(db, buyer, data)

        assert response.id == str(new_id)
        assert response.user.email == "b@x.io"
        inserted = db.orders.insert_one.call_args[0][0]
        assert inserted["userId"] == buyer.id
        assert inserted["status"] == "pending"
        assert inserted["items"][0]["productId"] == "p1"
        assert inserted["version"] == 0
        assert "_id" not in inserted

    def test_empty_cart(self, db, buyer) -> None:
        with pytest.raises(ValidationError):
            order_service.create_order(db, buyer, OrderCreate())
        db.orders.insert_one.assert_not_called()


class TestMutations:
    def test_message_is_saved_with_version_check(self, db, stored, buyer) -> None:
        response = order_service.post_message(db, stored.id, buyer, MessageCreate(body="Hello"))

        query, document = db.orders.replace_one.call_args[0]
        assert query == {"_id": ObjectId(stored.id), "version": 0}
        assert document["version"] == 1
        assert document["status"] == "negotiating"
        assert document["messages"][-1]["body"] == "Hello"
        assert response.status == OrderStatus.NEGOTIATING
        assert response.user.name == "Buyer"

    def test_stale_write_is_a_conflict(self, db, stored, buyer) -> None:
        db.orders.replace_one.return_value.matched_count = 0
        with pytest.raises(ConflictError):
            order_service.post_message(db, stored.id, buyer, MessageCreate(body="Hello"))

    def test_get_does_not_write(self, db, stored, buyer) -> None:
        response = order_service.get_order(db, stored.id, buyer)
        assert response.id == stored.id
        db.orders.replace_one.assert_not_called()

    def test_stranger_is_forbidden(self, db, stored, other_buyer) -> None:
        with pytest.raises(ForbiddenError):
            order_service.get_order(db, stored.id, other_buyer)

    def test_admin_cancel_of_cancelled_skips_write(self, db, stored, buyer, admin) -> None:
        order_workflow.cancel(stored, buyer)
        document = stored.to_document()
        document["_id"] = ObjectId(stored.id)
        db.orders.find_one.return_value = document

        response = order_service.cancel_order(db, stored.id, admin)
        assert response.status == OrderStatus.CANCELLED
        db.orders.replace_one.assert_not_called()

    def test_missing_order(self, db, buyer) -> None:
        db.orders.find_one.return_value = None
        with pytest.raises(NotFoundError):
            order_service.get_order(db, str(ObjectId()), buyer)

    def test_malformed_id(self, db, buyer) -> None:
        with pytest.raises(ValidationError):
            order_service.get_order(db, "not-an-id", buyer)


class TestListOrders:
    def test_buyer_sees_own_orders(self, db, stored, buyer) -> None:
        db.orders.find.return_value.sort.return_value = [db.orders.find_one.return_value]
        result = order_service.list_orders(db, buyer, status="pending,negotiating")

        query = db.orders.find.call_args[0][0]
        assert query == {"userId": buyer.id, "status": {"$in": ["pending", "negotiating"]}}
        assert [order.id for order in result] == [stored.id]
        assert result[0].user.id == buyer.id

    def test_admin_filters_by_owner_and_phase(self, db, admin, buyer) -> None:
        db.orders.find.return_value.sort.return_value = []
        order_service.list_orders(db, admin, phase="in_transit", user_id=buyer.id)
        query = db.orders.find.call_args[0][0]
        assert query == {"userId": buyer.id, "shipment.phase": "in_transit"}

    def test_buyer_cannot_widen_scope(self, db, buyer, other_buyer) -> None:
        db.orders.find.return_value.sort.return_value = []
        order_service.list_orders(db, buyer, user_id=other_buyer.id)
        assert db.orders.find.call_args[0][0] == {"userId": buyer.id}

    def test_unknown_status(self, db, buyer) -> None:
        with pytest.raises(ValidationError):
            order_service.list_orders(db, buyer, status="pending,lost")

    def test_owner_lookup_is_batched(self, db, admin) -> None:
        db.orders.find.return_value.sort.return_value = []
        db.users.find = MagicMock()
        order_service.list_orders(db, admin)
        db.users.find.assert_not_called()
