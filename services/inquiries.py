# services/inquiries.py
import logging
from datetime import datetime, timezone
from typing import Callable, List

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import OperationFailure

from core.errors import BaseError, ConflictError, InternalServerError, NotFoundError, ValidationError
from core.utils.validation import validate_object_id
from domain.entities.inquiry import Inquiry
from domain.entities.user import Actor
from domain.schemas.inquiry import InquiryAgree, InquiryCreate, InquiryMessageCreate, InquiryResponse
from domain.workflows import inquiry_workflow
from services.orders import owner_summaries

logger = logging.getLogger(__name__)


def _to_response(inquiry: Inquiry, owners) -> InquiryResponse:
    data = inquiry.model_dump(by_alias=True)
    data["user"] = owners.get(inquiry.user_id)
    return InquiryResponse.model_validate(data)


def _load_inquiry(db: Database, inquiry_id: str) -> Inquiry:
    validate_object_id(inquiry_id, "inquiry_id")
    document = db.inquiries.find_one({"_id": ObjectId(inquiry_id)})
    if not document:
        raise NotFoundError(f"Inquiry with ID {inquiry_id} not found")
    return Inquiry.from_document(document)


def _save_inquiry(db: Database, inquiry: Inquiry) -> Inquiry:
    expected_version = inquiry.version
    inquiry.version = expected_version + 1
    inquiry.updated_at = datetime.now(timezone.utc)
    result = db.inquiries.replace_one(
        {"_id": ObjectId(inquiry.id), "version": expected_version},
        inquiry.to_document()
    )
    if result.matched_count == 0:
        raise ConflictError(f"Inquiry {inquiry.id} was changed by another request, reload and retry")
    return inquiry


def _apply(db: Database, inquiry_id: str, actor: Actor, label: str,
           mutate: Callable[[Inquiry], bool]) -> InquiryResponse:
    logger.debug(f"{label} on inquiry {inquiry_id} by {actor.role} {actor.id}")
    try:
        inquiry = _load_inquiry(db, inquiry_id)
        if mutate(inquiry) is not False:
            inquiry = _save_inquiry(db, inquiry)
        logger.info(f"{label} succeeded - inquiry: {inquiry_id}, status: {inquiry.status}, actor: {actor.id}")
        return _to_response(inquiry, owner_summaries(db, [inquiry.user_id]))
    except BaseError as be:
        logger.error(f"{label} failed on inquiry {inquiry_id}: {be.detail}")
        raise
    except OperationFailure as of:
        logger.error(f"Database operation failed in {label}: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to {label.lower()}: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in {label}: {str(e)}, inquiry_id: {inquiry_id}", exc_info=True)
        raise InternalServerError(f"Failed to {label.lower()}: {str(e)}")


def create_inquiry(db: Database, actor: Actor, data: InquiryCreate) -> InquiryResponse:
    """Create an inquiry, snapshotting catalog data for each requested product.

    Raises:
        ValidationError: If no items are given or a product ID is malformed.
        NotFoundError: If a requested product does not exist.
        InternalServerError: For unexpected errors or database failures.
    """
    logger.debug(f"Creating inquiry for user_id: {actor.id} with {len(data.items)} items")
    try:
        if not data.items:
            raise ValidationError("No items provided")
        for line in data.items:
            if not ObjectId.is_valid(line.product_id):
                raise NotFoundError("Product not found")
        product_ids = list({ObjectId(line.product_id) for line in data.items})
        products = list(db.products.find({"_id": {"$in": product_ids}}))

        inquiry = inquiry_workflow.build_inquiry(actor, data, products)
        result = db.inquiries.insert_one(inquiry.to_document())
        inquiry.id = str(result.inserted_id)
        logger.info(f"Inquiry created successfully - ID: {inquiry.id}, user_id: {actor.id}")
        return _to_response(inquiry, owner_summaries(db, [inquiry.user_id]))
    except BaseError as be:
        logger.error(f"Error in create_inquiry: {be.detail}, user_id: {actor.id}")
        raise
    except OperationFailure as of:
        logger.error(f"Database operation failed in create_inquiry: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to create inquiry: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in create_inquiry: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to create inquiry: {str(e)}")


def list_inquiries(db: Database, actor: Actor) -> List[InquiryResponse]:
    """List inquiries, owner-scoped unless the actor is an admin."""
    try:
        query = {} if actor.is_admin else {"userId": actor.id}
        inquiries = [Inquiry.from_document(document)
                     for document in db.inquiries.find(query).sort("createdAt", DESCENDING)]
        owners = owner_summaries(db, [inquiry.user_id for inquiry in inquiries])
        logger.info(f"Retrieved {len(inquiries)} inquiries for {actor.role} {actor.id}")
        return [_to_response(inquiry, owners) for inquiry in inquiries]
    except OperationFailure as of:
        logger.error(f"Database operation failed in list_inquiries: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to list inquiries: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in list_inquiries: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to list inquiries: {str(e)}")


def get_inquiry(db: Database, inquiry_id: str, actor: Actor) -> InquiryResponse:
    def view(inquiry: Inquiry) -> bool:
        inquiry_workflow.ensure_owner_or_admin(inquiry, actor)
        return False

    return _apply(db, inquiry_id, actor, "Get inquiry", view)


def post_message(db: Database, inquiry_id: str, actor: Actor, data: InquiryMessageCreate) -> InquiryResponse:
    return _apply(db, inquiry_id, actor, "Post inquiry message",
                  lambda inquiry: inquiry_workflow.post_message(inquiry, actor, data))


def agree(db: Database, inquiry_id: str, actor: Actor, data: InquiryAgree) -> InquiryResponse:
    """Record agreed prices for inquiry items (admin)."""
    return _apply(db, inquiry_id, actor, "Agree inquiry prices",
                  lambda inquiry: inquiry_workflow.agree(inquiry, actor, data))


def close_inquiry(db: Database, inquiry_id: str, actor: Actor) -> InquiryResponse:
    return _apply(db, inquiry_id, actor, "Close inquiry",
                  lambda inquiry: inquiry_workflow.close(inquiry, actor))
