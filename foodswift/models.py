"""
Document Models

Shapes of the records the application writes to and reads from the
document store. Field names on the wire and in the store keep the
camelCase used by the web front end; Python attributes are snake_case.

Collections:
    - users: Identity records (email, role, isBlock)
    - locations: Append-only delivery agent positions
    - messages: Append-only chat messages
    - orders / restaurants: Free-form documents from the HTTP API

Author: Food Swift Team
Version: 1.0.0
"""

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


USERS = "users"
RESTAURANTS = "restaurants"
ORDERS = "orders"
LOCATIONS = "locations"
MESSAGES = "messages"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """Roles a user record may carry."""
    CUSTOMER = "customer"
    DELIVERY_AGENT = "deliveryAgent"
    ADMIN = "admin"


class OrderStatus(str, enum.Enum):
    """Status assigned to orders on creation."""
    PENDING = "pending"


class Identity(BaseModel):
    """A user record as read from the `users` collection."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: str
    role: Optional[str] = None
    is_block: Optional[bool] = Field(default=None, alias="isBlock")

    @property
    def is_delivery_agent(self) -> bool:
        return self.role == UserRole.DELIVERY_AGENT.value


class _Record(BaseModel):
    """Base for append-only realtime records."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(default_factory=utc_now)

    def to_document(self) -> dict[str, Any]:
        """Dict ready for insertion into the store."""
        return self.model_dump(by_alias=True)

    def to_event(self, record_id: Optional[str] = None) -> dict[str, Any]:
        """JSON-safe dict for broadcasting to Socket.IO clients."""
        data = self.model_dump(by_alias=True, mode="json")
        if record_id is not None:
            data["_id"] = record_id
        return data


class LocationUpdate(_Record):
    """One delivery agent position for one order."""

    order_id: str = Field(alias="orderId")
    delivery_agent_email: str = Field(alias="deliveryAgentEmail")
    latitude: float
    longitude: float


class ChatMessage(_Record):
    """One chat message between two participants."""

    sender_email: str = Field(alias="senderEmail")
    receiver_email: str = Field(alias="receiverEmail")
    message: str
