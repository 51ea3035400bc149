# services/contact.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import httpx
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import OperationFailure

from app.config.settings import settings
from core.errors import InternalServerError, NotFoundError, TooManyRequestsError, ValidationError
from core.utils.validation import validate_object_id
from domain.entities.contact_message import ContactMessage, ContactStatus
from domain.schemas.contact import ContactCreate

logger = logging.getLogger(__name__)

HCAPTCHA_VERIFY_URL = "https://hcaptcha.com/siteverify"


def client_ip(forwarded_for: Optional[str], client_host: Optional[str]) -> Optional[str]:
    """First X-Forwarded-For entry, else the socket peer."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return client_host


def verify_captcha(token: Optional[str], ip: Optional[str]) -> bool:
    """Check an hCaptcha token when a secret is configured.

    Only an explicit unsuccessful answer from the verifier fails the check.
    """
    if not settings.HCAPTCHA_SECRET or not token:
        return True
    form = {"secret": settings.HCAPTCHA_SECRET, "response": token}
    if ip:
        form["remoteip"] = ip
    try:
        response = httpx.post(HCAPTCHA_VERIFY_URL, data=form, timeout=5.0)
        result = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Captcha verification skipped, verifier unavailable: {str(e)}")
        return True
    return bool(result.get("success"))


def submit_contact(db: Database, data: ContactCreate, ip: Optional[str],
                   user_agent: Optional[str] = None) -> ContactMessage:
    """Store a website contact message.

    Args:
        db (Database): MongoDB database instance.
        data (ContactCreate): Submitted form fields including the honeypot.
        ip (Optional[str]): Client address used for the hourly limit.
        user_agent (Optional[str]): Browser user agent, kept for triage.

    Returns:
        ContactMessage: The stored message.

    Raises:
        ValidationError: If the honeypot field is filled in or the captcha fails.
        TooManyRequestsError: If the address already sent the hourly maximum.
        InternalServerError: For unexpected errors or database failures.
    """
    try:
        if data.hp:
            logger.warning(f"Honeypot triggered from {ip}")
            raise ValidationError("Bad request")

        if ip:
            since = datetime.now(timezone.utc) - timedelta(hours=1)
            recent = db.contact_messages.count_documents({"ip": ip, "createdAt": {"$gte": since}})
            if recent >= settings.CONTACT_HOURLY_LIMIT:
                logger.warning(f"Contact limit reached for {ip}: {recent} messages in the last hour")
                raise TooManyRequestsError("Too many messages, please try again later")

        if not verify_captcha(data.hcaptcha_token, ip):
            logger.warning(f"Captcha verification failed for {ip}")
            raise ValidationError("Captcha verification failed")

        message = ContactMessage(
            **data.model_dump(exclude={"hp", "hcaptcha_token"}),
            status=ContactStatus.NEW,
            ip=ip,
            user_agent=user_agent,
        )
        result = db.contact_messages.insert_one(message.to_document())
        message.id = str(result.inserted_id)
        logger.info(f"Contact message stored - ID: {message.id}, source: {message.source}")
        return message
    except (ValidationError, TooManyRequestsError) as e:
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in submit_contact: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to submit contact message: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in submit_contact: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to submit contact message: {str(e)}")


def list_contact_messages(db: Database) -> List[ContactMessage]:
    try:
        messages = [ContactMessage.from_document(message)
                    for message in db.contact_messages.find().sort("createdAt", DESCENDING)]
        logger.info(f"Retrieved {len(messages)} contact messages")
        return messages
    except OperationFailure as of:
        logger.error(f"Database operation failed in list_contact_messages: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to list contact messages: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in list_contact_messages: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to list contact messages: {str(e)}")


def update_contact_status(db: Database, message_id: str, status: ContactStatus) -> ContactMessage:
    try:
        validate_object_id(message_id, "message_id")
        updated = db.contact_messages.find_one_and_update(
            {"_id": ObjectId(message_id)},
            {"$set": {"status": ContactStatus(status).value, "updatedAt": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFoundError(f"Contact message with ID {message_id} not found")
        logger.info(f"Contact message {message_id} marked {ContactStatus(status).value}")
        return ContactMessage.from_document(updated)
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in update_contact_status: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in update_contact_status: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to update contact message: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in update_contact_status: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to update contact message: {str(e)}")
