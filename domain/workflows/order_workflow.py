# domain/workflows/order_workflow.py
"""Order negotiation state machine.

Every mutating operation here works on an in-memory ``Order`` and is
persisted by the caller as one document write. Each operation first passes
through ``authorize`` (who may invoke it) and changes status only through
``transition`` (which edges exist).
"""
import logging
from enum import Enum
from typing import Dict, FrozenSet, Set

from core.errors import (
    ForbiddenError, InternalServerError, NotFoundError, PreconditionFailedError, ValidationError,
)
from domain.entities.base import utc_now
from domain.entities.order import (
    DEFAULT_CURRENCY, Order, OrderItem, OrderMessage, OrderStatus, PriceProposal, PriceRange,
    Proposal, ProposalItem, ProposalStatus, Shipment, ShipmentEvent,
)
from domain.entities.user import Actor
from domain.schemas.order import ItemReference, MessageCreate, OrderCreate, ProposalCreate, ShipmentUpdate

logger = logging.getLogger(__name__)


class OrderAction(str, Enum):
    VIEW = "view"
    POST_MESSAGE = "post_message"
    PROPOSE = "propose"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    SHIP = "ship"
    COMPLETE = "complete"
    UPDATE_SHIPMENT = "update_shipment"


class Capability(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"


OWNER_OR_ADMIN = frozenset({Capability.OWNER, Capability.ADMIN})
ADMIN_ONLY = frozenset({Capability.ADMIN})
OWNER_ONLY = frozenset({Capability.OWNER})

PERMISSIONS: Dict[OrderAction, FrozenSet[Capability]] = {
    OrderAction.VIEW: OWNER_OR_ADMIN,
    OrderAction.POST_MESSAGE: OWNER_OR_ADMIN,
    OrderAction.PROPOSE: ADMIN_ONLY,
    OrderAction.APPROVE: OWNER_ONLY,
    OrderAction.REJECT: OWNER_ONLY,
    OrderAction.CANCEL: OWNER_OR_ADMIN,
    OrderAction.SHIP: ADMIN_ONLY,
    OrderAction.COMPLETE: ADMIN_ONLY,
    OrderAction.UPDATE_SHIPMENT: ADMIN_ONLY,
}

_S = OrderStatus
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    _S.PENDING: frozenset({_S.NEGOTIATING, _S.PROPOSED, _S.SHIPPED, _S.COMPLETED, _S.CANCELLED}),
    _S.NEGOTIATING: frozenset({_S.NEGOTIATING, _S.PROPOSED, _S.SHIPPED, _S.COMPLETED, _S.CANCELLED}),
    _S.PROPOSED: frozenset({_S.NEGOTIATING, _S.PROPOSED, _S.CONFIRMED, _S.SHIPPED, _S.COMPLETED, _S.CANCELLED}),
    _S.CONFIRMED: frozenset({_S.SHIPPED, _S.COMPLETED, _S.CANCELLED}),
    _S.SHIPPED: frozenset({_S.SHIPPED, _S.COMPLETED, _S.CANCELLED}),
    _S.COMPLETED: frozenset({_S.COMPLETED}),
    _S.CANCELLED: frozenset(),
}

# an owner may cancel only before fulfilment starts
OWNER_CANCEL_BLOCKED = frozenset({_S.SHIPPED, _S.COMPLETED, _S.CANCELLED})


def status_of(order: Order) -> OrderStatus:
    return OrderStatus(order.status)


def capabilities(order: Order, actor: Actor) -> Set[Capability]:
    caps = set()
    if actor.is_admin:
        caps.add(Capability.ADMIN)
    if actor.id == order.user_id:
        caps.add(Capability.OWNER)
    return caps


def authorize(order: Order, actor: Actor, action: OrderAction) -> Set[Capability]:
    """Refuse the action unless the actor holds a capability it requires."""
    caps = capabilities(order, actor)
    if not caps & PERMISSIONS[action]:
        logger.warning(f"Actor {actor.id} ({actor.role}) refused {action.value} on order {order.id}")
        raise ForbiddenError("Forbidden")
    return caps


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]


def transition(order: Order, target: OrderStatus) -> None:
    current = status_of(order)
    target = OrderStatus(target)
    if not can_transition(current, target):
        raise PreconditionFailedError(f"Cannot move order from {current.value} to {target.value}")
    if current != target:
        logger.debug(f"Order {order.id}: {current.value} -> {target.value}")
    order.status = target


def resolve_item_index(order: Order, ref: ItemReference) -> int:
    """Map an index or itemId reference onto a position in ``order.items``."""
    if ref.item_id is not None:
        for position, item in enumerate(order.items):
            if item.item_id == ref.item_id:
                return position
        raise NotFoundError(f"Item {ref.item_id} not found in order")
    if ref.index >= len(order.items):
        raise NotFoundError(f"Item at index {ref.index} not found in order")
    return ref.index


def _append_message(order: Order, actor: Actor, body: str, proposals=None) -> OrderMessage:
    message = OrderMessage(
        sender=actor.id,
        sender_role=actor.role,
        body=body,
        price_proposal=proposals or [],
    )
    order.messages.append(message)
    return message


def sum_agreed(order: Order) -> float:
    return sum((item.agreed_price or 0) * item.qty for item in order.items)


def unit_price_for(item: OrderItem) -> float:
    if item.agreed_price is not None:
        return item.agreed_price
    if item.price_range is not None and item.price_range.min is not None:
        return item.price_range.min
    return 0


def build_order(owner: Actor, data: OrderCreate) -> Order:
    """Snapshot the cart into a new pending order."""
    if not data.items:
        raise ValidationError("No items provided")

    items = []
    for line in data.items:
        price_range = line.price_range
        items.append(OrderItem(
            name=line.name,
            qty=line.qty,
            unit=line.unit,
            price_range=PriceRange(
                min=(price_range.min if price_range and price_range.min is not None else 0),
                max=(price_range.max if price_range and price_range.max is not None else 0),
                currency=(price_range.currency if price_range and price_range.currency else DEFAULT_CURRENCY),
            ),
            image=line.image,
            product_id=line.product_id,
        ))

    order = Order(
        user_id=owner.id,
        items=items,
        status=OrderStatus.PENDING,
        proposal_status=ProposalStatus.NONE,
        note=data.note or "",
        currency=items[0].price_range.currency or DEFAULT_CURRENCY,
        total_min=sum(item.price_range.min * item.qty for item in items),
        total_max=sum(item.price_range.max * item.qty for item in items),
    )
    logger.debug(f"Built order for user {owner.id} with {len(items)} items")
    return order


def post_message(order: Order, actor: Actor, data: MessageCreate) -> Order:
    authorize(order, actor, OrderAction.POST_MESSAGE)

    proposals = []
    for entry in data.price_proposal:
        position = resolve_item_index(order, entry)
        proposals.append(PriceProposal(index=position, item_id=order.items[position].item_id, price=entry.price))

    if proposals:
        # check the edge before touching items so a refused message leaves no trace
        target = OrderStatus.PROPOSED if _all_agreed_after(order, proposals) else OrderStatus.NEGOTIATING
        if not can_transition(status_of(order), target):
            raise PreconditionFailedError(f"Prices can no longer change on a {status_of(order).value} order")
        for proposal in proposals:
            order.items[proposal.index].agreed_price = proposal.price
        if ProposalStatus(order.proposal_status) == ProposalStatus.SENT:
            # a counter-price withdraws the open formal proposal
            order.proposal_status = ProposalStatus.NONE
        transition(order, target)
    elif status_of(order) == OrderStatus.PENDING:
        transition(order, OrderStatus.NEGOTIATING)

    _append_message(order, actor, data.body, proposals)
    return order


def _all_agreed_after(order: Order, proposals) -> bool:
    priced = {proposal.index for proposal in proposals}
    return all(item.agreed_price is not None or position in priced for position, item in enumerate(order.items))


def send_proposal(order: Order, actor: Actor, data: ProposalCreate) -> Order:
    """Apply admin overrides and freeze a formal proposal for the buyer."""
    authorize(order, actor, OrderAction.PROPOSE)
    if not can_transition(status_of(order), OrderStatus.PROPOSED):
        raise PreconditionFailedError(f"Cannot send a proposal on a {status_of(order).value} order")

    overrides = [(resolve_item_index(order, entry), entry) for entry in data.items]
    for position, entry in overrides:
        item = order.items[position]
        if entry.unit_price is not None:
            item.agreed_price = entry.unit_price
        if entry.qty is not None:
            item.qty = entry.qty

    snapshot = [
        ProposalItem(
            item_id=item.item_id,
            name=item.name,
            qty=item.qty,
            unit=item.unit,
            unit_price=unit_price_for(item),
            product_id=item.product_id,
            image=item.image,
        )
        for item in order.items
    ]
    order.proposal = Proposal(
        items=snapshot,
        total=sum(entry.unit_price * entry.qty for entry in snapshot),
        currency=order.currency or DEFAULT_CURRENCY,
        note=data.note or "",
        created_at=utc_now(),
    )
    order.proposal_status = ProposalStatus.SENT
    transition(order, OrderStatus.PROPOSED)
    _append_message(order, actor, "Sent final proposal")
    return order


def _require_open_proposal(order: Order, verb: str) -> None:
    if ProposalStatus(order.proposal_status) != ProposalStatus.SENT:
        raise PreconditionFailedError(f"No proposal to {verb}")


def approve_proposal(order: Order, actor: Actor) -> Order:
    authorize(order, actor, OrderAction.APPROVE)
    _require_open_proposal(order, "approve")

    transition(order, OrderStatus.CONFIRMED)
    order.proposal_status = ProposalStatus.APPROVED
    if order.proposal is not None and order.proposal.total is not None:
        order.final_total = order.proposal.total
    else:
        order.final_total = sum_agreed(order)
    _append_message(order, actor, "Approved proposal")
    return order


def reject_proposal(order: Order, actor: Actor) -> Order:
    authorize(order, actor, OrderAction.REJECT)
    _require_open_proposal(order, "reject")

    transition(order, OrderStatus.NEGOTIATING)
    order.proposal_status = ProposalStatus.REJECTED
    _append_message(order, actor, "Rejected proposal")
    return order


def cancel(order: Order, actor: Actor) -> bool:
    """Cancel the order. Returns False when nothing changed (admin on a cancelled order)."""
    caps = authorize(order, actor, OrderAction.CANCEL)
    current = status_of(order)

    if Capability.ADMIN in caps:
        if current == OrderStatus.CANCELLED:
            logger.info(f"Order {order.id} already cancelled, nothing to do")
            return False
    elif ProposalStatus(order.proposal_status) == ProposalStatus.APPROVED or current in OWNER_CANCEL_BLOCKED:
        raise PreconditionFailedError("Cannot cancel at this stage")

    transition(order, OrderStatus.CANCELLED)
    _append_message(order, actor, "Order cancelled")
    return True


def mark_shipped(order: Order, actor: Actor) -> Order:
    authorize(order, actor, OrderAction.SHIP)
    transition(order, OrderStatus.SHIPPED)
    return order


def mark_completed(order: Order, actor: Actor) -> Order:
    authorize(order, actor, OrderAction.COMPLETE)
    transition(order, OrderStatus.COMPLETED)
    return order


def update_shipment(order: Order, actor: Actor, data: ShipmentUpdate) -> Order:
    """Set supplied shipment fields and log an event when phase or note is given."""
    authorize(order, actor, OrderAction.UPDATE_SHIPMENT)
    supplied = data.model_fields_set

    shipment = order.shipment or Shipment()
    if data.phase:
        shipment.phase = data.phase
    if "tracking_id" in supplied:
        shipment.tracking_id = data.tracking_id
    if "eta" in supplied:
        shipment.eta = data.eta
    if data.phase or data.note:
        shipment.events.append(ShipmentEvent(phase=data.phase or shipment.phase, note=data.note or ""))
    order.shipment = shipment
    return order


APPROVED_STATUSES = frozenset({_S.CONFIRMED, _S.SHIPPED, _S.COMPLETED, _S.CANCELLED})


def check_invariants(order: Order, item_count: int) -> None:
    """Refuse to persist an order that breaks a lifecycle invariant."""
    if len(order.items) != item_count:
        raise InternalServerError(f"Order {order.id} item count changed from {item_count} to {len(order.items)}")
    if ProposalStatus(order.proposal_status) == ProposalStatus.APPROVED:
        if status_of(order) not in APPROVED_STATUSES:
            raise InternalServerError(f"Order {order.id} has an approved proposal while {order.status}")
        if order.final_total is None:
            raise InternalServerError(f"Order {order.id} has an approved proposal without finalTotal")
