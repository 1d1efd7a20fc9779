"""
Realtime Module

Socket.IO layer for live delivery tracking and customer/agent chat.

Usage:
    from foodswift.realtime import RealtimeGateway

    gateway = RealtimeGateway(store=get_document_store()).attach()

Author: Food Swift Team
Version: 1.0.0
"""

from foodswift.realtime.events import (
    RealtimeEvent,
    JoinOrderRoom,
    UpdateLocation,
    JoinChatRoom,
    SendMessage,
)
from foodswift.realtime.relay import RelayHandlers
from foodswift.realtime.rooms import chat_room, order_room
from foodswift.realtime.server import RealtimeGateway, create_socket_server
from foodswift.realtime.sessions import Session, SessionRegistry

__all__ = [
    # Gateway
    "RealtimeGateway",
    "create_socket_server",
    "RelayHandlers",
    # Sessions and rooms
    "Session",
    "SessionRegistry",
    "chat_room",
    "order_room",
    # Events
    "RealtimeEvent",
    "JoinOrderRoom",
    "UpdateLocation",
    "JoinChatRoom",
    "SendMessage",
]
