"""
Room Router

Canonical room identifiers for the two kinds of Socket.IO rooms:
    - Order rooms: the caller-supplied order id, unchanged
    - Chat rooms: the two participant emails, sorted and joined

Both functions are pure so every participant computes the same id
without coordinating with anyone.
"""

from typing import Any

from foodswift.core.exceptions import ValidationError

CHAT_ROOM_SEPARATOR = "_"


def order_room(order_id: Any) -> str:
    """
    Room id for tracking one order.

    No lookup against the orders collection is made; any non-empty
    string is a valid room.

    Raises:
        ValidationError: order_id is not a non-empty string
    """
    if not isinstance(order_id, str) or not order_id:
        raise ValidationError("Invalid or missing orderId")
    return order_id


def chat_room(first_email: str, second_email: str) -> str:
    """Room id shared by two chat participants, independent of argument order."""
    return CHAT_ROOM_SEPARATOR.join(sorted((first_email, second_email)))
