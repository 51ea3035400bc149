# routes/v1/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import require_admin
from core.errors import BaseError
from domain.schemas.user import UserResponse
from infrastructure.database.client import get_db
from services.users import UserService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[UserResponse], summary="List users")
@limiter.limit("30/minute")
async def list_users_route(
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    """List every account, newest first (admin only)."""
    try:
        users = UserService(db).list_users()
        logger.info(f"Admin {current_user['_id']} listed {len(users)} users")
        return users
    except BaseError as be:
        logger.error(f"Failed to list users: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list users: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
