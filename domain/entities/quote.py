# domain/entities/quote.py
from enum import Enum
from typing import Optional

from pydantic import Field

from domain.entities.base import Document


class QuoteStatus(str, Enum):
    NEW = "new"
    VIEWED = "viewed"
    CLOSED = "closed"


class ProductQuote(Document):
    """A public request for a price quote on one product."""
    name: str
    email: str
    phone: Optional[str] = None
    country: Optional[str] = None
    product_id: str = Field(..., description="Product the quote is requested for")
    status: QuoteStatus = QuoteStatus.NEW
