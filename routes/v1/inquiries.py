# routes/v1/inquiries.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import get_current_actor
from core.errors import BaseError
from domain.entities.user import Actor
from domain.schemas.inquiry import InquiryAgree, InquiryCreate, InquiryMessageCreate, InquiryResponse
from infrastructure.database.client import get_db
from services import inquiries as inquiry_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=InquiryResponse, status_code=201, summary="Create a new inquiry")
@limiter.limit("10/minute")
async def create_inquiry_route(
    request: Request,
    inquiry_data: InquiryCreate,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Ask for prices on catalog products."""
    try:
        inquiry = inquiry_service.create_inquiry(db, actor, inquiry_data)
        logger.info(f"Inquiry created by user {actor.id}: {inquiry.id}")
        return inquiry
    except BaseError as be:
        logger.error(f"Failed to create inquiry: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to create inquiry: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("", response_model=List[InquiryResponse], summary="List inquiries")
@limiter.limit("30/minute")
async def list_inquiries_route(
    request: Request,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return inquiry_service.list_inquiries(db, actor)
    except BaseError as be:
        logger.error(f"Failed to list inquiries: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list inquiries: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{inquiry_id}", response_model=InquiryResponse, summary="Get inquiry by ID")
@limiter.limit("30/minute")
async def get_inquiry_route(
    request: Request,
    inquiry_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return inquiry_service.get_inquiry(db, inquiry_id, actor)
    except BaseError as be:
        logger.error(f"Failed to get inquiry {inquiry_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to get inquiry {inquiry_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{inquiry_id}/messages", response_model=InquiryResponse, summary="Post an inquiry message")
@limiter.limit("30/minute")
async def post_inquiry_message_route(
    request: Request,
    inquiry_id: str,
    message: InquiryMessageCreate,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return inquiry_service.post_message(db, inquiry_id, actor, message)
    except BaseError as be:
        logger.error(f"Failed to post message on inquiry {inquiry_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to post message on inquiry {inquiry_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{inquiry_id}/agree", response_model=InquiryResponse, summary="Agree item prices")
@limiter.limit("10/minute")
async def agree_inquiry_route(
    request: Request,
    inquiry_id: str,
    agreement: InquiryAgree,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Fix agreed prices for items (admin only)."""
    try:
        return inquiry_service.agree(db, inquiry_id, actor, agreement)
    except BaseError as be:
        logger.error(f"Failed to agree inquiry {inquiry_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to agree inquiry {inquiry_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{inquiry_id}/close", response_model=InquiryResponse, summary="Close inquiry")
@limiter.limit("10/minute")
async def close_inquiry_route(
    request: Request,
    inquiry_id: str,
    db: Database = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    try:
        return inquiry_service.close_inquiry(db, inquiry_id, actor)
    except BaseError as be:
        logger.error(f"Failed to close inquiry {inquiry_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to close inquiry {inquiry_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
