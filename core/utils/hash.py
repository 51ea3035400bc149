import logging

from passlib.context import CryptContext
from passlib.exc import UnknownHashError, PasslibSecurityError

from core.errors import InternalServerError, ValidationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    try:
        if not password or not isinstance(password, str):
            raise ValidationError("Password must be a non-empty string")
        hashed = pwd_context.hash(password)
        logger.debug("Password hashed successfully")
        return hashed
    except ValidationError as ve:
        logger.error(f"Validation error: {ve.detail}")
        raise ve
    except PasslibSecurityError as pre:
        logger.error(f"Runtime error: {str(pre)}", exc_info=True)
        raise InternalServerError(f"Failed to hash password: {str(pre)}")
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to hash password: {str(e)}")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password.

    A missing or unreadable stored hash counts as a mismatch.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        is_valid = pwd_context.verify(plain_password, hashed_password)
        logger.debug(f"Password verification result: {is_valid}")
        return is_valid
    except (UnknownHashError, ValueError) as uhe:
        logger.warning(f"Unreadable password hash: {str(uhe)}")
        return False
    except PasslibSecurityError as pre:
        logger.error(f"Runtime error: {str(pre)}", exc_info=True)
        raise InternalServerError(f"Failed to verify password: {str(pre)}")
