# core/auth/auth.py
import logging
from typing import Optional

from bson import ObjectId
from fastapi import Depends, Header
from pymongo.database import Database
from pymongo.errors import OperationFailure

from core.errors import ForbiddenError, InternalServerError, UnauthorizedError
from domain.entities.user import Actor, Role
from infrastructure.database.client import get_db
from .jwt import decode_token

logger = logging.getLogger(__name__)


async def get_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the token from the Authorization header.

    Args:
        authorization (str): Authorization header value.

    Returns:
        str: Extracted token.

    Raises:
        UnauthorizedError: If the header is missing, malformed, or empty.
    """
    if not authorization or not authorization.startswith("Bearer "):
        logger.error("Missing or malformed authorization header")
        raise UnauthorizedError("Unauthorized")
    token = authorization[len("Bearer "):].strip()
    if not token:
        logger.error("Empty token in authorization header")
        raise UnauthorizedError("Unauthorized")
    return token


def get_current_user(token: str = Depends(get_token), db: Database = Depends(get_db)) -> dict:
    """Retrieve the current user based on the provided token.

    Args:
        token (str): JWT token from the Authorization header.
        db (Database): MongoDB database instance.

    Returns:
        dict: User document from the database.

    Raises:
        UnauthorizedError: If the token is invalid or the user no longer exists.
        InternalServerError: If the user lookup fails.
    """
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id or not ObjectId.is_valid(user_id):
        logger.error(f"Invalid user_id in token payload: {user_id}")
        raise UnauthorizedError("Unauthorized")

    try:
        user = db.users.find_one({"_id": ObjectId(user_id)})
    except OperationFailure as of:
        logger.error(f"Database operation failed during authentication: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to authenticate: {str(of)}")
    if user is None:
        logger.error(f"No user found for ID: {user_id}")
        raise UnauthorizedError("Unauthorized")

    logger.debug(f"User validated: {user_id}")
    return user


def get_current_actor(current_user: dict = Depends(get_current_user)) -> Actor:
    return Actor.from_user(current_user)


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Ensure the user holds the admin role.

    Raises:
        ForbiddenError: If the user is not an admin.
    """
    if current_user.get("role") != Role.ADMIN.value:
        logger.error(f"User {current_user.get('_id')} does not have required role: admin")
        raise ForbiddenError("Forbidden")
    logger.debug(f"Role admin verified for user {current_user.get('_id')}")
    return current_user
