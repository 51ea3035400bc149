# domain/workflows/inquiry_workflow.py
import logging
from typing import Dict, FrozenSet, List

from core.errors import ForbiddenError, NotFoundError, PreconditionFailedError, ValidationError
from domain.entities.inquiry import Inquiry, InquiryItem, InquiryMessage, InquiryStatus
from domain.entities.order import PriceRange
from domain.entities.user import Actor
from domain.schemas.inquiry import InquiryAgree, InquiryCreate, InquiryMessageCreate
from domain.schemas.order import ItemReference

logger = logging.getLogger(__name__)

_S = InquiryStatus
TRANSITIONS: Dict[InquiryStatus, FrozenSet[InquiryStatus]] = {
    _S.OPEN: frozenset({_S.NEGOTIATING, _S.AGREED, _S.CLOSED}),
    _S.NEGOTIATING: frozenset({_S.NEGOTIATING, _S.AGREED, _S.CLOSED}),
    _S.AGREED: frozenset({_S.NEGOTIATING, _S.AGREED, _S.CLOSED}),
    _S.CLOSED: frozenset(),
}


def is_owner(inquiry: Inquiry, actor: Actor) -> bool:
    return inquiry.user_id == actor.id


def ensure_owner_or_admin(inquiry: Inquiry, actor: Actor) -> None:
    if not (actor.is_admin or is_owner(inquiry, actor)):
        raise ForbiddenError("Forbidden")


def ensure_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise ForbiddenError("Forbidden")


def transition(inquiry: Inquiry, target: InquiryStatus) -> None:
    current = InquiryStatus(inquiry.status)
    target = InquiryStatus(target)
    if target not in TRANSITIONS[current]:
        raise PreconditionFailedError(f"Cannot move inquiry from {current.value} to {target.value}")
    inquiry.status = target


def resolve_item_index(inquiry: Inquiry, ref: ItemReference) -> int:
    if ref.item_id is not None:
        for position, item in enumerate(inquiry.items):
            if item.item_id == ref.item_id:
                return position
        raise NotFoundError(f"Item {ref.item_id} not found in inquiry")
    if ref.index >= len(inquiry.items):
        raise NotFoundError(f"Item at index {ref.index} not found in inquiry")
    return ref.index


def build_inquiry(owner: Actor, data: InquiryCreate, products: List[dict]) -> Inquiry:
    """Snapshot catalog prices for each requested product.

    Args:
        owner (Actor): Buyer creating the inquiry.
        data (InquiryCreate): Requested items and an optional shared note.
        products (List[dict]): Catalog product documents matching the requested IDs.

    Raises:
        ValidationError: If no items are given.
        NotFoundError: If a requested product is missing from the catalog.
    """
    if not data.items:
        raise ValidationError("No items provided")
    by_id = {str(product["_id"]): product for product in products}

    items = []
    for line in data.items:
        product = by_id.get(line.product_id)
        if product is None:
            raise NotFoundError("Product not found")
        items.append(InquiryItem(
            product_id=line.product_id,
            name=product.get("name", ""),
            quantity=line.quantity,
            unit=line.unit or product.get("unit") or "per kg",
            price_range=PriceRange.model_validate(product.get("priceRange") or {}),
            notes=line.notes or data.note,
        ))
    return Inquiry(user_id=owner.id, items=items, status=InquiryStatus.OPEN)


def post_message(inquiry: Inquiry, actor: Actor, data: InquiryMessageCreate) -> Inquiry:
    ensure_owner_or_admin(inquiry, actor)
    if data.price_proposal is not None:
        transition(inquiry, InquiryStatus.NEGOTIATING)
    inquiry.messages.append(InquiryMessage(
        sender=actor.id,
        sender_role=actor.role,
        body=data.body,
        price_proposal=data.price_proposal,
    ))
    return inquiry


def agree(inquiry: Inquiry, actor: Actor, data: InquiryAgree) -> Inquiry:
    """Fix agreed prices; the inquiry is agreed once every item carries one."""
    ensure_admin(actor)
    if InquiryStatus(inquiry.status) == InquiryStatus.CLOSED:
        raise PreconditionFailedError("Inquiry is closed")

    positions = [(resolve_item_index(inquiry, entry), entry.price) for entry in data.agreements]
    for position, price in positions:
        inquiry.items[position].agreed_price = price
    transition(inquiry, InquiryStatus.AGREED if inquiry.all_items_agreed() else InquiryStatus.NEGOTIATING)
    return inquiry


def close(inquiry: Inquiry, actor: Actor) -> Inquiry:
    ensure_owner_or_admin(inquiry, actor)
    if InquiryStatus(inquiry.status) == InquiryStatus.CLOSED:
        raise PreconditionFailedError("Inquiry is already closed")
    transition(inquiry, InquiryStatus.CLOSED)
    return inquiry
