# routes/v1/quotes.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import require_admin
from core.errors import BaseError
from domain.entities.quote import ProductQuote
from domain.schemas.quote import QuoteCreate, QuoteResponse, QuoteStatusUpdate
from infrastructure.database.client import get_db
from services.quotes import create_quote, list_quotes, update_quote_status

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=ProductQuote, status_code=201, summary="Request a quote")
@limiter.limit("5/minute")
async def create_quote_route(request: Request, quote_data: QuoteCreate, db: Database = Depends(get_db)):
    """Request a price quote for a product (public access)."""
    try:
        return create_quote(db, quote_data)
    except BaseError as be:
        logger.error(f"Failed to create quote: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to create quote: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("", response_model=List[QuoteResponse], summary="List quote requests")
@limiter.limit("30/minute")
async def list_quotes_route(
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        return list_quotes(db)
    except BaseError as be:
        logger.error(f"Failed to list quotes: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list quotes: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{quote_id}/status", response_model=ProductQuote, summary="Update quote status")
@limiter.limit("30/minute")
async def update_quote_status_route(
    request: Request,
    quote_id: str,
    update: QuoteStatusUpdate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        return update_quote_status(db, quote_id, update.status)
    except BaseError as be:
        logger.error(f"Failed to update quote {quote_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to update quote {quote_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
