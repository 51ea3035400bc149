"""Unit tests for request schemas."""
import pytest
from pydantic import ValidationError

from domain.schemas.auth import RegisterRequest
from domain.schemas.contact import ContactCreate
from domain.schemas.order import ItemReference, MessageCreate, OrderCreate, ProposalCreate, ShipmentUpdate


class TestItemReference:
    def test_index(self) -> None:
        assert ItemReference(index=2).index == 2

    def test_item_id_alias(self) -> None:
        assert ItemReference.model_validate({"itemId": "abc"}).item_id == "abc"

    def test_both_raise(self) -> None:
        with pytest.raises(ValidationError):
            ItemReference.model_validate({"index": 0, "itemId": "abc"})

    def test_neither_raises(self) -> None:
        with pytest.raises(ValidationError):
            ItemReference.model_validate({})

    def test_negative_index_raises(self) -> None:
        with pytest.raises(ValidationError):
            ItemReference(index=-1)


class TestOrderInput:
    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({"items": [], "discount": 10})

    def test_blank_qty_becomes_one(self) -> None:
        data = OrderCreate.model_validate({"items": [{"name": "Rice", "qty": ""}]})
        assert data.items[0].qty == 1

    @pytest.mark.parametrize("qty", ["0", "-3", -3.0, 0])
    def test_low_qty_becomes_one(self, qty) -> None:
        data = OrderCreate.model_validate({"items": [{"name": "Rice", "qty": qty}]})
        assert data.items[0].qty == 1

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({"items": [{"name": "Rice", "priceRange": {"min": -1}}]})

    def test_empty_message_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MessageCreate.model_validate({"body": "   "})

    def test_proposal_only_message(self) -> None:
        message = MessageCreate.model_validate({"priceProposal": [{"index": 0, "price": 3.5}]})
        assert message.price_proposal[0].price == 3.5

    def test_proposal_qty_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ProposalCreate.model_validate({"items": [{"index": 0, "qty": 0}]})

    def test_unknown_phase_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ShipmentUpdate.model_validate({"phase": "teleporting"})


class TestOtherInput:
    def test_register_normalizes_email(self) -> None:
        data = RegisterRequest.model_validate({"name": " Ana ", "email": " Ana@Example.COM ", "password": "secret1"})
        assert data.email == "ana@example.com"
        assert data.name == "Ana"

    def test_register_short_password(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate({"name": "Ana", "email": "ana@example.com", "password": "123"})

    def test_contact_requires_message(self) -> None:
        with pytest.raises(ValidationError):
            ContactCreate.model_validate({"name": "Ana", "email": "ana@example.com", "message": ""})
