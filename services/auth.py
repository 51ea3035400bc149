import logging
from typing import Any, Dict

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, OperationFailure

from core.auth.jwt import create_access_token
from core.errors import InternalServerError, ValidationError
from core.utils.hash import hash_password, verify_password
from domain.entities.user import Role, User
from domain.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from domain.schemas.user import UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Service class for authentication-related operations."""

    def __init__(self, db: Database):
        self.db = db

    def register(self, data: RegisterRequest) -> AuthResponse:
        """Register a buyer account and sign it in."""
        logger.debug(f"Registering user with email: {data.email}")
        try:
            if self.db.users.find_one({"email": data.email}):
                raise ValidationError("Email already registered")

            user = User(
                name=data.name,
                email=data.email,
                password_hash=hash_password(data.password),
                role=Role.USER,
                company_name=data.company_name,
                vat_id=data.vat_id,
            )
            document = user.to_document()
            result = self.db.users.insert_one(document)
            document["_id"] = result.inserted_id

            logger.info(f"User registered with ID: {result.inserted_id}")
            return self._issue(document)
        except DuplicateKeyError:
            logger.warning(f"Duplicate registration attempt for email: {data.email}")
            raise ValidationError("Email already registered")
        except ValidationError as ve:
            raise ve
        except OperationFailure as of:
            logger.error(f"Database operation failed in register: {str(of)}", exc_info=True)
            raise InternalServerError(f"Failed to register: {str(of)}")
        except Exception as e:
            logger.error(f"Unexpected error in register: {str(e)}", exc_info=True)
            raise InternalServerError(f"Failed to register: {str(e)}")

    def login(self, data: LoginRequest) -> AuthResponse:
        """Exchange email and password for a bearer token."""
        try:
            user = self.db.users.find_one({"email": data.email})
            if not user or not verify_password(data.password, user.get("passwordHash", "")):
                logger.warning(f"Failed login for email: {data.email}")
                raise ValidationError("Invalid credentials")

            logger.info(f"User logged in: {user['_id']}")
            return self._issue(user)
        except ValidationError as ve:
            raise ve
        except OperationFailure as of:
            logger.error(f"Database operation failed in login: {str(of)}", exc_info=True)
            raise InternalServerError(f"Failed to login: {str(of)}")
        except Exception as e:
            logger.error(f"Unexpected error in login: {str(e)}", exc_info=True)
            raise InternalServerError(f"Failed to login: {str(e)}")

    def me(self, current_user: Dict[str, Any]) -> UserResponse:
        return UserResponse.from_document(current_user)

    def _issue(self, user: Dict[str, Any]) -> AuthResponse:
        token = create_access_token(str(user["_id"]), user.get("role", Role.USER.value))
        return AuthResponse(token=token, user=UserResponse.from_document(user))
