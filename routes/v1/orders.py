# routes/v1/orders.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import get_current_actor
from core.errors import BaseError
from domain.entities.user import Actor
from domain.schemas.order import MessageCreate, OrderCreate, OrderResponse, ProposalCreate, ShipmentUpdate
from infrastructure.database.client import get_db
from services import orders as order_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=OrderResponse, status_code=201, summary="Create a new order")
@limiter.limit("10/minute")
async def create_order_route(
    request: Request,
    order_data: OrderCreate,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Create a pending order from the buyer's cart."""
    try:
        order = order_service.create_order(db, actor, order_data)
        logger.info(f"Order created by user {actor.id}: {order.id}")
        return order
    except BaseError as be:
        logger.error(f"Failed to create order: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to create order: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("", response_model=List[OrderResponse], summary="List orders")
@limiter.limit("30/minute")
async def list_orders_route(
    request: Request,
    status: Optional[str] = Query(None, description="Comma-separated statuses"),
    phase: Optional[str] = Query(None, description="Shipment phase"),
    user_id: Optional[str] = Query(None, alias="userId", description="Owner filter (admin only)"),
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """List the caller's orders, or every order for admins."""
    try:
        return order_service.list_orders(db, actor, status=status, phase=phase, user_id=user_id)
    except BaseError as be:
        logger.error(f"Failed to list orders: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list orders: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order by ID")
@limiter.limit("30/minute")
async def get_order_route(
    request: Request,
    order_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return order_service.get_order(db, order_id, actor)
    except BaseError as be:
        logger.error(f"Failed to get order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to get order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/messages", response_model=OrderResponse, summary="Post a chat message")
@limiter.limit("30/minute")
async def post_message_route(
    request: Request,
    order_id: str,
    message: MessageCreate,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Post a message, optionally proposing unit prices for items."""
    try:
        return order_service.post_message(db, order_id, actor, message)
    except BaseError as be:
        logger.error(f"Failed to post message on order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to post message on order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/propose", response_model=OrderResponse, summary="Send final proposal")
@limiter.limit("10/minute")
async def propose_route(
    request: Request,
    order_id: str,
    proposal: ProposalCreate,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Send the formal proposal (admin only)."""
    try:
        return order_service.send_proposal(db, order_id, actor, proposal)
    except BaseError as be:
        logger.error(f"Failed to send proposal on order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to send proposal on order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/approve", response_model=OrderResponse, summary="Approve proposal")
@limiter.limit("10/minute")
async def approve_route(
    request: Request,
    order_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return order_service.approve_proposal(db, order_id, actor)
    except BaseError as be:
        logger.error(f"Failed to approve order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to approve order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/reject", response_model=OrderResponse, summary="Reject proposal")
@limiter.limit("10/minute")
async def reject_route(
    request: Request,
    order_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return order_service.reject_proposal(db, order_id, actor)
    except BaseError as be:
        logger.error(f"Failed to reject order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to reject order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/cancel", response_model=OrderResponse, summary="Cancel order")
@limiter.limit("10/minute")
async def cancel_route(
    request: Request,
    order_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return order_service.cancel_order(db, order_id, actor)
    except BaseError as be:
        logger.error(f"Failed to cancel order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to cancel order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/ship", response_model=OrderResponse, summary="Mark order shipped")
@limiter.limit("10/minute")
async def ship_route(
    request: Request,
    order_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return order_service.mark_shipped(db, order_id, actor)
    except BaseError as be:
        logger.error(f"Failed to ship order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to ship order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/complete", response_model=OrderResponse, summary="Mark order completed")
@limiter.limit("10/minute")
async def complete_route(
    request: Request,
    order_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return order_service.mark_completed(db, order_id, actor)
    except BaseError as be:
        logger.error(f"Failed to complete order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to complete order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{order_id}/shipment", response_model=OrderResponse, summary="Update shipment tracking")
@limiter.limit("20/minute")
async def update_shipment_route(
    request: Request,
    order_id: str,
    shipment: ShipmentUpdate,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Set phase, tracking ID or ETA and log a shipment event (admin only)."""
    try:
        return order_service.update_shipment(db, order_id, actor, shipment)
    except BaseError as be:
        logger.error(f"Failed to update shipment on order {order_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to update shipment on order {order_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
