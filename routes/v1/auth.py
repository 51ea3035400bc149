# routes/v1/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import get_current_user
from core.errors import BaseError
from domain.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from domain.schemas.user import UserResponse
from infrastructure.database.client import get_db
from services.auth import AuthService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_auth_service(db: Database = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit("5/minute")
async def register(
        request: Request,
        data: RegisterRequest,
        auth_service: AuthService = Depends(get_auth_service)
):
    """Register a buyer account and return a bearer token."""
    try:
        return auth_service.register(data)
    except BaseError as be:
        logger.error(f"Registration failed: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Registration failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")
async def login(
        request: Request,
        data: LoginRequest,
        auth_service: AuthService = Depends(get_auth_service)
):
    try:
        return auth_service.login(data)
    except BaseError as be:
        logger.error(f"Login failed: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Login failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/me", response_model=UserResponse)
@limiter.limit("30/minute")
async def me(
        request: Request,
        current_user: dict = Depends(get_current_user),
        auth_service: AuthService = Depends(get_auth_service)
):
    """Return the account behind the bearer token."""
    return auth_service.me(current_user)
