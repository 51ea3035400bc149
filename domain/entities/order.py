# domain/entities/order.py
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import Field, field_validator

from domain.entities.base import Document, DocumentModel, utc_now
from domain.entities.user import Role

DEFAULT_CURRENCY = "EUR"


class OrderStatus(str, Enum):
    PENDING = "pending"
    NEGOTIATING = "negotiating"
    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProposalStatus(str, Enum):
    NONE = "none"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"


class ShipmentPhase(str, Enum):
    HARVESTING = "harvesting"
    PACKING = "packing"
    LOADING = "loading"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


def new_item_id() -> str:
    return uuid4().hex


class PriceRange(DocumentModel):
    """Catalog price bounds frozen onto an item when the order or inquiry is created."""
    min: Optional[float] = Field(None, ge=0, description="Lower bound of the unit price")
    max: Optional[float] = Field(None, ge=0, description="Upper bound of the unit price")
    currency: str = Field(DEFAULT_CURRENCY, description="ISO currency code")


class OrderItem(DocumentModel):
    item_id: str = Field(default_factory=new_item_id, description="Stable identifier of the line item")
    name: str = Field(..., description="Display name of the product")
    qty: int = Field(..., ge=1, description="Ordered quantity")
    unit: Optional[str] = Field(None, description="Unit the quantity is expressed in")
    price_range: PriceRange = Field(default_factory=PriceRange, description="Price range snapshot")
    image: Optional[str] = Field(None, description="Image URL of the product")
    product_id: Optional[str] = Field(None, description="Catalog product reference")
    agreed_price: Optional[float] = Field(None, ge=0, description="Unit price fixed during negotiation")


class PriceProposal(DocumentModel):
    index: int = Field(..., ge=0, description="Position of the item in the order")
    item_id: str = Field(..., description="Stable identifier of the item")
    price: float = Field(..., ge=0, description="Proposed unit price")


class OrderMessage(DocumentModel):
    sender: str = Field(..., description="ID of the user who wrote the message")
    sender_role: Role = Field(..., description="Role of the sender when the message was written")
    body: str = Field("", description="Message text")
    price_proposal: List[PriceProposal] = Field(default_factory=list, description="Prices proposed with the message")
    timestamp: datetime = Field(default_factory=utc_now, description="When the message was posted (UTC)")


class ProposalItem(DocumentModel):
    item_id: Optional[str] = None
    name: str
    qty: int
    unit: Optional[str] = None
    unit_price: float
    product_id: Optional[str] = None
    image: Optional[str] = None


class Proposal(DocumentModel):
    """Admin's formal offer; replaced wholesale by a new proposal, never edited."""
    items: List[ProposalItem] = Field(default_factory=list)
    total: float = Field(0, ge=0)
    currency: str = Field(DEFAULT_CURRENCY)
    note: str = Field("")
    created_at: datetime = Field(default_factory=utc_now)


class ShipmentEvent(DocumentModel):
    phase: Optional[ShipmentPhase] = None
    note: str = ""
    timestamp: datetime = Field(default_factory=utc_now)


class Shipment(DocumentModel):
    phase: Optional[ShipmentPhase] = Field(None, description="Current fulfilment phase")
    tracking_id: Optional[str] = Field(None, description="Carrier tracking reference")
    eta: Optional[datetime] = Field(None, description="Estimated arrival")
    events: List[ShipmentEvent] = Field(default_factory=list, description="Append-only tracking history")


class Order(Document):
    """Entity representing a negotiated B2B order."""
    user_id: str = Field(..., description="ID of the buyer who owns the order")
    items: List[OrderItem] = Field(..., min_length=1, description="Line items, fixed in number and position")
    status: OrderStatus = Field(OrderStatus.PENDING, description="Lifecycle status")
    note: str = Field("", description="Buyer note supplied at checkout")
    total_min: float = Field(0, ge=0, description="Sum of min price times quantity")
    total_max: float = Field(0, ge=0, description="Sum of max price times quantity")
    currency: str = Field(DEFAULT_CURRENCY, description="Currency of the totals")
    final_total: Optional[float] = Field(None, ge=0, description="Total agreed on approval")
    messages: List[OrderMessage] = Field(default_factory=list, description="Negotiation chat, append-only")
    proposal: Optional[Proposal] = Field(None, description="Latest formal proposal")
    proposal_status: ProposalStatus = Field(ProposalStatus.NONE, description="State of the formal proposal")
    shipment: Optional[Shipment] = Field(None, description="Shipment tracking")
    version: int = Field(0, ge=0, description="Revision counter used to detect stale writes")

    @field_validator("user_id", mode="before")
    def validate_user_id(cls, value):
        if value is not None and not isinstance(value, str):
            value = str(value)
        if not value or not value.strip():
            raise ValueError("user_id must be a non-empty string")
        return value
