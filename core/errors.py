# core/errors.py
import logging
from typing import Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)

class BaseError(HTTPException):
    """Base class for custom HTTP exceptions.

    Args:
        status_code (int): HTTP status code for the error.
        detail (str): Detailed message describing the error.
    """
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)
        logger.error(f"Error occurred: {detail} (Status: {status_code})")

class NotFoundError(BaseError):
    """Exception raised for resources that cannot be found.

    Args:
        detail (str, optional): Specific detail about what was not found. Defaults to "Not found".
    """

    def __init__(self, detail: Optional[str] = "Not found"):
        super().__init__(status_code=404, detail=detail)

class ValidationError(BaseError):
    """Exception raised for invalid input data.

    Args:
        detail (str, optional): Specific detail about the validation failure. Defaults to "Invalid input".
    """

    def __init__(self, detail: Optional[str] = "Invalid input"):
        super().__init__(status_code=400, detail=detail)

class UnauthorizedError(BaseError):
    """Exception raised when no valid credential accompanies the request.

    Args:
        detail (str, optional): Specific detail about the authentication failure. Defaults to "Unauthorized".
    """

    def __init__(self, detail: Optional[str] = "Unauthorized"):
        super().__init__(status_code=401, detail=detail)
        self.headers = {"WWW-Authenticate": "Bearer"}

class ForbiddenError(BaseError):
    """Exception raised when an authenticated caller is neither the owner nor an admin.

    Args:
        detail (str, optional): Specific detail about the refused action. Defaults to "Forbidden".
    """

    def __init__(self, detail: Optional[str] = "Forbidden"):
        super().__init__(status_code=403, detail=detail)

class PreconditionFailedError(BaseError):
    """Exception raised when a business rule forbids the action in the current state.

    Reported with status 400, like other client errors.

    Args:
        detail (str, optional): Which rule refused the action. Defaults to "Precondition failed".
    """

    def __init__(self, detail: Optional[str] = "Precondition failed"):
        super().__init__(status_code=400, detail=detail)

class ConflictError(BaseError):
    """Exception raised when a document changed between read and write.

    Args:
        detail (str, optional): Specific detail about the conflict. Defaults to "Conflict".
    """

    def __init__(self, detail: Optional[str] = "Conflict"):
        super().__init__(status_code=409, detail=detail)

class TooManyRequestsError(BaseError):
    """Exception raised when a caller exceeds a business submission limit.

    Args:
        detail (str, optional): Specific detail about the limit. Defaults to "Too many requests".
    """

    def __init__(self, detail: Optional[str] = "Too many requests"):
        super().__init__(status_code=429, detail=detail)

class InternalServerError(BaseError):
    """Exception raised for unexpected server-side errors.

    Args:
        detail (str, optional): Specific detail about the server error. Defaults to "Internal server error".
    """

    def __init__(self, detail: Optional[str] = "Internal server error"):
        super().__init__(status_code=500, detail=detail)
