# domain/entities/inquiry.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from domain.entities.base import Document, DocumentModel, utc_now
from domain.entities.order import PriceRange, new_item_id
from domain.entities.user import Role


class InquiryStatus(str, Enum):
    OPEN = "open"
    NEGOTIATING = "negotiating"
    AGREED = "agreed"
    CLOSED = "closed"


class InquiryItem(DocumentModel):
    item_id: str = Field(default_factory=new_item_id)
    product_id: str = Field(..., description="Catalog product the buyer asks about")
    name: str = Field("", description="Product name at inquiry time")
    quantity: int = Field(..., ge=1)
    unit: str = Field("per kg")
    price_range: PriceRange = Field(..., description="Catalog price range at inquiry time")
    notes: Optional[str] = None
    agreed_price: Optional[float] = Field(None, ge=0)


class InquiryMessage(DocumentModel):
    sender: str
    sender_role: Role
    body: str = ""
    price_proposal: Optional[float] = Field(None, ge=0)
    timestamp: datetime = Field(default_factory=utc_now)


class Inquiry(Document):
    """A pre-order price request against catalog products."""
    user_id: str
    items: List[InquiryItem] = Field(..., min_length=1)
    status: InquiryStatus = InquiryStatus.OPEN
    messages: List[InquiryMessage] = Field(default_factory=list)
    version: int = Field(0, ge=0)

    def all_items_agreed(self) -> bool:
        return all(item.agreed_price is not None for item in self.items)
