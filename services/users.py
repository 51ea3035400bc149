# services/users.py
import logging
from typing import List

from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import OperationFailure

from core.errors import InternalServerError
from domain.schemas.user import UserResponse

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Database):
        """Initialize UserService with a database instance."""
        self.db = db

    def list_users(self) -> List[UserResponse]:
        """Retrieve all users, newest first, without password hashes.

        Returns:
            List[UserResponse]: Public views of every account.

        Raises:
            InternalServerError: For unexpected errors or database failures.
        """
        try:
            users = self.db.users.find({}, {"passwordHash": 0}).sort("createdAt", DESCENDING)
            result = [UserResponse.from_document(user) for user in users]
            logger.info(f"Retrieved {len(result)} users")
            return result
        except OperationFailure as of:
            logger.error(f"Database operation failed in list_users: {str(of)}", exc_info=True)
            raise InternalServerError(f"Failed to list users: {str(of)}")
        except Exception as e:
            logger.error(f"Unexpected error in list_users: {str(e)}", exc_info=True)
            raise InternalServerError(f"Failed to list users: {str(e)}")
