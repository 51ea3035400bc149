"""Shared test fixtures."""
import os
import tempfile

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB", "b2b_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="b2b-uploads-"))

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from domain.entities.user import Actor, Role
from domain.schemas.order import OrderCreate
from domain.workflows import order_workflow


@pytest.fixture
def buyer() -> Actor:
    return Actor(id=str(ObjectId()), role=Role.USER)


@pytest.fixture
def other_buyer() -> Actor:
    return Actor(id=str(ObjectId()), role=Role.USER)


@pytest.fixture
def admin() -> Actor:
    return Actor(id=str(ObjectId()), role=Role.ADMIN)


@pytest.fixture
def make_order(buyer):
    """Build a persisted-looking pending order owned by ``buyer``."""
    def _make(items=None, note=None):
        data = OrderCreate.model_validate({
            "items": items or [
                {"name": "Rice", "qty": 10, "priceRange": {"min": 1.5, "max": 2.2, "currency": "EUR"}},
            ],
            "note": note,
        })
        order = order_workflow.build_order(buyer, data)
        order.id = str(ObjectId())
        return order
    return _make


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()
