"""
Realtime Event Schemas

Pydantic models for every client-to-server Socket.IO event. Payloads are
validated here, at the boundary, so relay handlers only ever see typed,
range-checked values.

Events:
    - joinOrderRoom: bare order id string
    - updateLocation: {orderId, latitude, longitude}
    - joinChatRoom: {senderEmail, receiverEmail}
    - sendMessage: {senderEmail, receiverEmail, message}

Validation failures surface as ValidationError carrying the
human-readable reason the front end displays.

Author: Food Swift Team
Version: 1.0.0
"""

import math
from typing import Any, ClassVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from foodswift.core.exceptions import ValidationError
from foodswift.realtime.rooms import chat_room

PAYLOAD_ERROR = "realtime_payload"


def _non_empty_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value:
        raise PydanticCustomError(PAYLOAD_ERROR, message)
    return value


def _coordinate(value: Any) -> float:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError(PAYLOAD_ERROR, "Invalid latitude or longitude")
    try:
        coordinate = float(value)
    except OverflowError:
        raise PydanticCustomError(PAYLOAD_ERROR, "Latitude or longitude out of range")
    if not math.isfinite(coordinate):
        raise PydanticCustomError(PAYLOAD_ERROR, "Invalid latitude or longitude")
    return coordinate


class RealtimeEvent(BaseModel):
    """Base for inbound events; `name` is the Socket.IO event name."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: ClassVar[str]
    invalid_message: ClassVar[str] = "Invalid payload"

    @classmethod
    def parse(cls, payload: Any) -> "RealtimeEvent":
        """
        Validate a raw Socket.IO payload.

        Raises:
            ValidationError: with the first human-readable reason
        """
        try:
            return cls.model_validate(payload)
        except pydantic.ValidationError as e:
            for error in e.errors():
                if error["type"] == PAYLOAD_ERROR:
                    raise ValidationError(error["msg"]) from e
            raise ValidationError(cls.invalid_message) from e


class JoinOrderRoom(RealtimeEvent):
    name: ClassVar[str] = "joinOrderRoom"
    invalid_message: ClassVar[str] = "Invalid or missing orderId"

    order_id: str = Field(default=None, alias="orderId", validate_default=True)

    @field_validator("order_id", mode="before")
    @classmethod
    def validate_order_id(cls, v: Any) -> str:
        return _non_empty_text(v, "Invalid or missing orderId")

    @classmethod
    def parse(cls, payload: Any) -> "JoinOrderRoom":
        # The client sends the order id itself, not an object
        return super().parse({"orderId": payload})


class UpdateLocation(RealtimeEvent):
    name: ClassVar[str] = "updateLocation"

    order_id: str = Field(default=None, alias="orderId", validate_default=True)
    latitude: float = Field(default=None, validate_default=True)
    longitude: float = Field(default=None, validate_default=True)

    @field_validator("order_id", mode="before")
    @classmethod
    def validate_order_id(cls, v: Any) -> str:
        return _non_empty_text(v, "Invalid or missing orderId")

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def validate_coordinate(cls, v: Any) -> float:
        return _coordinate(v)

    @model_validator(mode="after")
    def validate_range(self) -> "UpdateLocation":
        if not (-90 <= self.latitude <= 90 and -180 <= self.longitude <= 180):
            raise PydanticCustomError(PAYLOAD_ERROR, "Latitude or longitude out of range")
        return self


class JoinChatRoom(RealtimeEvent):
    name: ClassVar[str] = "joinChatRoom"
    invalid_message: ClassVar[str] = "Missing fields in chat room request"

    sender_email: str = Field(default=None, alias="senderEmail", validate_default=True)
    receiver_email: str = Field(default=None, alias="receiverEmail", validate_default=True)

    @field_validator("sender_email", "receiver_email", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> str:
        return _non_empty_text(v, "Missing fields in chat room request")

    @property
    def room(self) -> str:
        return chat_room(self.sender_email, self.receiver_email)


class SendMessage(RealtimeEvent):
    name: ClassVar[str] = "sendMessage"
    invalid_message: ClassVar[str] = "Missing fields in message"

    sender_email: str = Field(default=None, alias="senderEmail", validate_default=True)
    receiver_email: str = Field(default=None, alias="receiverEmail", validate_default=True)
    message: str = Field(default=None, validate_default=True)

    @field_validator("sender_email", "receiver_email", "message", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> str:
        return _non_empty_text(v, "Missing fields in message")

    @property
    def room(self) -> str:
        return chat_room(self.sender_email, self.receiver_email)
