"""Unit tests for the inquiry workflow."""
import pytest
from bson import ObjectId

from core.errors import ForbiddenError, NotFoundError, PreconditionFailedError, ValidationError
from domain.entities.inquiry import InquiryStatus
from domain.schemas.inquiry import InquiryAgree, InquiryCreate, InquiryMessageCreate
from domain.workflows import inquiry_workflow

RICE_ID = str(ObjectId())
TEA_ID = str(ObjectId())

CATALOG = [
    {"_id": ObjectId(RICE_ID), "name": "Basmati Rice", "unit": "per kg",
     "priceRange": {"min": 1.5, "max": 2.2, "currency": "EUR"}},
    {"_id": ObjectId(TEA_ID), "name": "Green Tea", "unit": "per box",
     "priceRange": {"min": 4, "max": 6, "currency": "EUR"}},
]


@pytest.fixture
def inquiry(buyer):
    data = InquiryCreate.model_validate({
        "items": [{"productId": RICE_ID, "quantity": 500}, {"productId": TEA_ID, "quantity": 20, "unit": "per case"}],
        "note": "Monthly supply",
    })
    built = inquiry_workflow.build_inquiry(buyer, data, CATALOG)
    built.id = str(ObjectId())
    return built


class TestBuildInquiry:
    def test_snapshots_catalog_data(self, inquiry, buyer) -> None:
        assert inquiry.user_id == buyer.id
        assert inquiry.status == InquiryStatus.OPEN
        assert inquiry.items[0].name == "Basmati Rice"
        assert inquiry.items[0].unit == "per kg"
        assert inquiry.items[0].price_range.max == 2.2
        assert inquiry.items[0].notes == "Monthly supply"
        assert inquiry.items[1].unit == "per case"

    def test_missing_product(self, buyer) -> None:
        data = InquiryCreate.model_validate({"items": [{"productId": str(ObjectId()), "quantity": 1}]})
        with pytest.raises(NotFoundError) as exc:
            inquiry_workflow.build_inquiry(buyer, data, CATALOG)
        assert exc.value.detail == "Product not found"

    def test_no_items(self, buyer) -> None:
        with pytest.raises(ValidationError):
            inquiry_workflow.build_inquiry(buyer, InquiryCreate(), CATALOG)


class TestInquiryFlow:
    def test_price_proposal_moves_to_negotiating(self, inquiry, buyer) -> None:
        inquiry_workflow.post_message(inquiry, buyer, InquiryMessageCreate(body="1.4?", price_proposal=1.4))
        assert inquiry.status == InquiryStatus.NEGOTIATING
        assert inquiry.messages[-1].price_proposal == 1.4

    def test_plain_message_keeps_status(self, inquiry, buyer) -> None:
        inquiry_workflow.post_message(inquiry, buyer, InquiryMessageCreate(body="Any news?"))
        assert inquiry.status == InquiryStatus.OPEN

    def test_stranger_cannot_post(self, inquiry, other_buyer) -> None:
        with pytest.raises(ForbiddenError):
            inquiry_workflow.post_message(inquiry, other_buyer, InquiryMessageCreate(body="hi"))

    def test_agree_partially_then_fully(self, inquiry, admin) -> None:
        inquiry_workflow.agree(inquiry, admin, InquiryAgree.model_validate({"agreements": [{"index": 0, "price": 1.8}]}))
        assert inquiry.status == InquiryStatus.NEGOTIATING

        tea = inquiry.items[1].item_id
        inquiry_workflow.agree(inquiry, admin, InquiryAgree.model_validate({"agreements": [{"itemId": tea, "price": 5}]}))
        assert inquiry.status == InquiryStatus.AGREED
        assert [item.agreed_price for item in inquiry.items] == [1.8, 5]

    def test_only_admin_agrees(self, inquiry, buyer) -> None:
        with pytest.raises(ForbiddenError):
            inquiry_workflow.agree(inquiry, buyer, InquiryAgree.model_validate({"agreements": []}))

    def test_closed_is_terminal(self, inquiry, buyer, admin) -> None:
        inquiry_workflow.close(inquiry, buyer)
        assert inquiry.status == InquiryStatus.CLOSED
        with pytest.raises(PreconditionFailedError):
            inquiry_workflow.post_message(inquiry, buyer, InquiryMessageCreate(price_proposal=1))
        with pytest.raises(PreconditionFailedError):
            inquiry_workflow.agree(inquiry, admin, InquiryAgree.model_validate({"agreements": [{"index": 0, "price": 1}]}))
        with pytest.raises(PreconditionFailedError):
            inquiry_workflow.close(inquiry, admin)
