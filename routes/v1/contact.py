# routes/v1/contact.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import require_admin
from core.errors import BaseError
from domain.entities.contact_message import ContactMessage
from domain.schemas.contact import ContactCreate, ContactStatusUpdate
from infrastructure.database.client import get_db
from services.contact import client_ip, list_contact_messages, submit_contact, update_contact_status

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=dict, status_code=201, summary="Submit contact form")
@limiter.limit("10/minute")
async def submit_contact_route(request: Request, contact_data: ContactCreate, db: Database = Depends(get_db)):
    """Accept a website contact message (public access)."""
    try:
        ip = client_ip(request.headers.get("x-forwarded-for"), request.client.host if request.client else None)
        message = submit_contact(db, contact_data, ip, request.headers.get("user-agent"))
        return {"ok": True, "id": message.id}
    except BaseError as be:
        logger.error(f"Failed to submit contact message: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to submit contact message: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("", response_model=List[ContactMessage], summary="List contact messages")
@limiter.limit("30/minute")
async def list_contact_route(
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        return list_contact_messages(db)
    except BaseError as be:
        logger.error(f"Failed to list contact messages: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list contact messages: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{message_id}/status", response_model=ContactMessage, summary="Update contact message status")
@limiter.limit("30/minute")
async def update_contact_status_route(
    request: Request,
    message_id: str,
    update: ContactStatusUpdate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        return update_contact_status(db, message_id, update.status)
    except BaseError as be:
        logger.error(f"Failed to update contact message {message_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to update contact message {message_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
