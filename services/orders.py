# services/orders.py
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import OperationFailure

from core.errors import BaseError, ConflictError, InternalServerError, NotFoundError, ValidationError
from core.utils.validation import validate_object_id
from domain.entities.order import Order, OrderStatus, ShipmentPhase
from domain.entities.user import Actor
from domain.schemas.order import (
    MessageCreate, OrderCreate, OrderResponse, OwnerSummary, ProposalCreate, ShipmentUpdate,
)
from domain.workflows import order_workflow
from domain.workflows.order_workflow import OrderAction

logger = logging.getLogger(__name__)


def owner_summaries(db: Database, user_ids: Iterable[str]) -> Dict[str, OwnerSummary]:
    """Resolve owner IDs to display fields with a single query."""
    ids = [ObjectId(user_id) for user_id in set(user_ids) if ObjectId.is_valid(user_id)]
    if not ids:
        return {}
    users = db.users.find({"_id": {"$in": ids}}, {"name": 1, "email": 1, "role": 1})
    return {
        str(user["_id"]): OwnerSummary(
            id=str(user["_id"]), name=user.get("name"), email=user.get("email"), role=user.get("role")
        )
        for user in users
    }


def _to_response(order: Order, owners: Dict[str, OwnerSummary]) -> OrderResponse:
    data = order.model_dump(by_alias=True)
    data["user"] = owners.get(order.user_id)
    return OrderResponse.model_validate(data)


def _load_order(db: Database, order_id: str) -> Order:
    validate_object_id(order_id, "order_id")
    document = db.orders.find_one({"_id": ObjectId(order_id)})
    if not document:
        logger.warning(f"Order with ID {order_id} not found")
        raise NotFoundError(f"Order with ID {order_id} not found")
    return Order.from_document(document)


def _save_order(db: Database, order: Order, item_count: int) -> Order:
    """Write the whole document back if nobody else wrote it since it was loaded."""
    order_workflow.check_invariants(order, item_count)
    expected_version = order.version
    order.version = expected_version + 1
    order.updated_at = datetime.now(timezone.utc)
    result = db.orders.replace_one(
        {"_id": ObjectId(order.id), "version": expected_version},
        order.to_document()
    )
    if result.matched_count == 0:
        logger.warning(f"Stale write on order {order.id}, expected version {expected_version}")
        raise ConflictError(f"Order {order.id} was changed by another request, reload and retry")
    return order


def _apply(db: Database, order_id: str, actor: Actor, label: str,
           mutate: Callable[[Order], bool]) -> OrderResponse:
    """Load an order, run one workflow step on it and persist the result.

    ``mutate`` returns False when the step left the order untouched, in which
    case nothing is written.
    """
    logger.debug(f"{label} on order {order_id} by {actor.role} {actor.id}")
    try:
        order = _load_order(db, order_id)
        item_count = len(order.items)
        if mutate(order) is not False:
            order = _save_order(db, order, item_count)
        logger.info(f"{label} succeeded - order: {order_id}, status: {order.status}, "
                    f"proposal_status: {order.proposal_status}, actor: {actor.id}")
        return _to_response(order, owner_summaries(db, [order.user_id]))
    except BaseError as be:
        logger.error(f"{label} failed on order {order_id}: {be.detail}")
        raise
    except OperationFailure as of:
        logger.error(f"Database operation failed in {label}: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to {label.lower()}: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in {label}: {str(e)}, order_id: {order_id}", exc_info=True)
        raise InternalServerError(f"Failed to {label.lower()}: {str(e)}")


def create_order(db: Database, actor: Actor, data: OrderCreate) -> OrderResponse:
    """Create a new pending order from cart items.

    Args:
        db (Database): MongoDB database instance.
        actor (Actor): The buyer placing the order.
        data (OrderCreate): Cart lines and an optional note.

    Returns:
        OrderResponse: The created order.

    Raises:
        ValidationError: If no items are provided.
        InternalServerError: For unexpected errors or database failures.
    """
    logger.debug(f"Creating order for user_id: {actor.id} with {len(data.items)} items")
    try:
        order = order_workflow.build_order(actor, data)
        result = db.orders.insert_one(order.to_document())
        order.id = str(result.inserted_id)
        logger.info(f"Order created successfully - ID: {order.id}, user_id: {actor.id}, "
                    f"total_min: {order.total_min}, total_max: {order.total_max} {order.currency}")
        return _to_response(order, owner_summaries(db, [order.user_id]))
    except ValidationError as ve:
        logger.error(f"Validation error in create_order: {ve.detail}, user_id: {actor.id}")
        raise ve
    except OperationFailure as of:
        logger.error(f"Database operation failed in create_order: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to create order: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in create_order: {str(e)}, user_id: {actor.id}", exc_info=True)
        raise InternalServerError(f"Failed to create order: {str(e)}")


def _parse_statuses(status: str) -> List[str]:
    statuses = [value.strip() for value in status.split(",") if value.strip()]
    valid = {member.value for member in OrderStatus}
    for value in statuses:
        if value not in valid:
            raise ValidationError(f"Invalid status value: {value}")
    return statuses


def list_orders(db: Database, actor: Actor, status: Optional[str] = None, phase: Optional[str] = None,
                user_id: Optional[str] = None) -> List[OrderResponse]:
    """List orders visible to the actor, newest first.

    Args:
        db (Database): MongoDB database instance.
        actor (Actor): The caller; non-admins only ever see their own orders.
        status (Optional[str]): Comma-separated set of statuses to include.
        phase (Optional[str]): Shipment phase to match.
        user_id (Optional[str]): Owner filter, honoured for admins only.

    Returns:
        List[OrderResponse]: Matching orders with owners resolved.

    Raises:
        ValidationError: If a filter value is invalid.
        InternalServerError: For unexpected errors or database failures.
    """
    logger.debug(f"Listing orders for {actor.role} {actor.id}, status={status}, phase={phase}, user_id={user_id}")
    try:
        if actor.is_admin:
            query = {}
            if user_id:
                validate_object_id(user_id, "user_id")
                query["userId"] = user_id
        else:
            query = {"userId": actor.id}
        if status:
            query["status"] = {"$in": _parse_statuses(status)}
        if phase:
            if phase not in {member.value for member in ShipmentPhase}:
                raise ValidationError(f"Invalid shipment phase: {phase}")
            query["shipment.phase"] = phase

        orders = [Order.from_document(document)
                  for document in db.orders.find(query).sort("createdAt", DESCENDING)]
        owners = owner_summaries(db, [order.user_id for order in orders])
        logger.info(f"Retrieved {len(orders)} orders for {actor.role} {actor.id}")
        return [_to_response(order, owners) for order in orders]
    except ValidationError as ve:
        logger.error(f"Validation error in list_orders: {ve.detail}")
        raise ve
    except OperationFailure as of:
        logger.error(f"Database operation failed in list_orders: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to list orders: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in list_orders: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to list orders: {str(e)}")


def get_order(db: Database, order_id: str, actor: Actor) -> OrderResponse:
    """Retrieve an order visible to its owner or an admin."""
    def view(order: Order) -> bool:
        order_workflow.authorize(order, actor, OrderAction.VIEW)
        return False

    return _apply(db, order_id, actor, "Get order", view)


def post_message(db: Database, order_id: str, actor: Actor, data: MessageCreate) -> OrderResponse:
    """Append a chat message, applying any price proposals it carries."""
    return _apply(db, order_id, actor, "Post message",
                  lambda order: order_workflow.post_message(order, actor, data))


def send_proposal(db: Database, order_id: str, actor: Actor, data: ProposalCreate) -> OrderResponse:
    """Send the admin's formal proposal for buyer approval."""
    return _apply(db, order_id, actor, "Send proposal",
                  lambda order: order_workflow.send_proposal(order, actor, data))


def approve_proposal(db: Database, order_id: str, actor: Actor) -> OrderResponse:
    return _apply(db, order_id, actor, "Approve proposal",
                  lambda order: order_workflow.approve_proposal(order, actor))


def reject_proposal(db: Database, order_id: str, actor: Actor) -> OrderResponse:
    return _apply(db, order_id, actor, "Reject proposal",
                  lambda order: order_workflow.reject_proposal(order, actor))


def cancel_order(db: Database, order_id: str, actor: Actor) -> OrderResponse:
    return _apply(db, order_id, actor, "Cancel order",
                  lambda order: order_workflow.cancel(order, actor))


def mark_shipped(db: Database, order_id: str, actor: Actor) -> OrderResponse:
    return _apply(db, order_id, actor, "Mark shipped",
                  lambda order: order_workflow.mark_shipped(order, actor))


def mark_completed(db: Database, order_id: str, actor: Actor) -> OrderResponse:
    return _apply(db, order_id, actor, "Mark completed",
                  lambda order: order_workflow.mark_completed(order, actor))


def update_shipment(db: Database, order_id: str, actor: Actor, data: ShipmentUpdate) -> OrderResponse:
    """Record shipment phase, tracking details and an event for the timeline."""
    return _apply(db, order_id, actor, "Update shipment",
                  lambda order: order_workflow.update_shipment(order, actor, data))
