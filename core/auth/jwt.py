# core/auth/jwt.py
import logging
from datetime import datetime, timezone, timedelta

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from app.config.settings import settings
from core.errors import UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(user_id: str, role: str) -> str:
    """Create an access token for a user.

    Args:
        user_id (str): Unique identifier of the user as a string.
        role (str): Role of the user (user/admin).

    Returns:
        str: Encoded JWT access token.

    Raises:
        ValidationError: If token creation fails due to invalid input or encoding issues.
    """
    try:
        if not user_id or not isinstance(user_id, str):
            raise ValidationError("user_id must be a non-empty string")

        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": user_id,
            "role": role,
            "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            "iat": now
        }
        encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
        logger.info(f"Access token created for user {user_id}")
        return encoded_jwt
    except ValidationError as ve:
        logger.error(f"Validation error creating access token: {ve.detail}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating access token: {str(e)}", exc_info=True)
        raise ValidationError(f"Failed to create access token: {str(e)}")


def decode_token(token: str) -> dict:
    """Decode a JWT token and return its payload.

    Raises:
        UnauthorizedError: If the token is empty, expired, or has a bad signature.
    """
    if not token or not isinstance(token, str):
        raise UnauthorizedError("Token must be a non-empty string")
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        logger.debug(f"Token decoded successfully for user: {payload.get('sub')}")
        return payload
    except ExpiredSignatureError:
        logger.error("Token has expired")
        raise UnauthorizedError("Token has expired")
    except InvalidTokenError:
        logger.error("Invalid token format or signature")
        raise UnauthorizedError("Invalid token")
