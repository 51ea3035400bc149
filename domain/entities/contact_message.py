# domain/entities/contact_message.py
from enum import Enum
from typing import Optional

from domain.entities.base import Document


class ContactStatus(str, Enum):
    NEW = "new"
    HANDLED = "handled"


class ContactMessage(Document):
    name: str
    email: str
    company: str = ""
    message: str
    source: str = "website"
    status: ContactStatus = ContactStatus.NEW
    ip: Optional[str] = None
    user_agent: Optional[str] = None
