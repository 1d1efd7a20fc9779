"""
Realtime Relay Handlers

Handles every client-to-server Socket.IO event for delivery tracking
and chat. Each handler follows the same order:

    1. validate the payload (events.py schemas)
    2. check authorization against the store, if the event needs it
    3. persist the record
    4. broadcast to the room

A failure at any step emits `error` to the sender only and stops; the
room never sees a record that was not written. Nothing is retried.

Supported Events:
    - joinOrderRoom: join the room tracking one order
    - updateLocation: delivery agent position, broadcast as locationUpdate
    - joinChatRoom: join the room shared by two participants
    - sendMessage: chat message, broadcast as receiveMessage

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from typing import Any, Awaitable, Callable

import pydantic

from foodswift.core.exceptions import (
    AuthorizationError,
    FoodSwiftError,
    NotFoundError,
    PersistenceError,
)
from foodswift.models import (
    LOCATIONS,
    MESSAGES,
    USERS,
    ChatMessage,
    Identity,
    LocationUpdate,
)
from foodswift.realtime.events import (
    JoinChatRoom,
    JoinOrderRoom,
    SendMessage,
    UpdateLocation,
)
from foodswift.realtime.rooms import order_room
from foodswift.realtime.sessions import RoomServer, SessionRegistry
from foodswift.services.store import BaseDocumentStore

logger = logging.getLogger(__name__)

EventHandler = Callable[[str, Any], Awaitable[None]]

LOCATION_UPDATE = "locationUpdate"
RECEIVE_MESSAGE = "receiveMessage"
ERROR = "error"


class RelayHandlers:
    """
    Event handlers for one Socket.IO server.

    Attributes:
        store: Document store for identities, locations and messages
        registry: Session registry for the same server
    """

    def __init__(
        self,
        server: RoomServer,
        registry: SessionRegistry,
        store: BaseDocumentStore,
    ):
        self.server = server
        self.registry = registry
        self.store = store

        logger.info(f"RelayHandlers initialized (store={store.provider_name})")

    def handlers(self) -> dict[str, EventHandler]:
        """Socket.IO event name -> handler."""
        return {
            JoinOrderRoom.name: self.join_order_room,
            UpdateLocation.name: self.update_location,
            JoinChatRoom.name: self.join_chat_room,
            SendMessage.name: self.send_message,
        }

    # =========================================================================
    # ORDER TRACKING
    # =========================================================================

    async def join_order_room(self, sid: str, payload: Any = None) -> None:
        try:
            session = self.registry.get(sid)
            event = JoinOrderRoom.parse(payload)
            room = order_room(event.order_id)
            await self.registry.join(sid, room)
        except FoodSwiftError as e:
            await self._reject(sid, JoinOrderRoom.name, e)
            return

        logger.info(f"{session.email} joined order room: {room}")

    async def update_location(self, sid: str, payload: Any = None) -> None:
        try:
            session = self.registry.get(sid)
            event = UpdateLocation.parse(payload)
            record = LocationUpdate(
                order_id=event.order_id,
                delivery_agent_email=session.email,
                latitude=event.latitude,
                longitude=event.longitude,
            )
            record_id = await self._persist_location(record)
        except FoodSwiftError as e:
            await self._reject(sid, UpdateLocation.name, e)
            return

        await self.server.emit(
            LOCATION_UPDATE,
            record.to_event(record_id),
            to=order_room(record.order_id),
        )
        logger.info(
            f"Location update for order {record.order_id}: "
            f"{record.latitude}, {record.longitude}"
        )

    async def _persist_location(self, record: LocationUpdate) -> str:
        """Role check and write; the role is re-read on every update."""
        try:
            user = await self.store.find_one(USERS, {"email": record.delivery_agent_email})
            if user is None:
                raise NotFoundError("User not found")

            try:
                identity = Identity.model_validate(user)
            except pydantic.ValidationError as e:
                raise PersistenceError(
                    f"Malformed user record for {record.delivery_agent_email}",
                    details=str(e),
                ) from e
            if not identity.is_delivery_agent:
                raise AuthorizationError(
                    "unauthorized: Only delivery agents can update location"
                )

            result = await self.store.insert_one(LOCATIONS, record.to_document())
        except PersistenceError as e:
            logger.exception(f"Failed to persist location for order {record.order_id}")
            raise PersistenceError(
                "Failed to update location",
                details=e.details or e.message,
            ) from e
        return result.inserted_id

    # =========================================================================
    # CHAT
    # =========================================================================

    async def join_chat_room(self, sid: str, payload: Any = None) -> None:
        try:
            self.registry.get(sid)
            event = JoinChatRoom.parse(payload)
            await self.registry.join(sid, event.room)
        except FoodSwiftError as e:
            await self._reject(sid, JoinChatRoom.name, e)
            return

        logger.info(f"{event.sender_email} joined chat room with {event.receiver_email}")

    async def send_message(self, sid: str, payload: Any = None) -> None:
        try:
            self.registry.get(sid)
            event = SendMessage.parse(payload)
            record = ChatMessage(
                sender_email=event.sender_email,
                receiver_email=event.receiver_email,
                message=event.message,
            )
            record_id = await self._persist_message(record)
        except FoodSwiftError as e:
            await self._reject(sid, SendMessage.name, e)
            return

        await self.server.emit(RECEIVE_MESSAGE, record.to_event(record_id), to=event.room)
        logger.info(
            f"Message from {record.sender_email} to {record.receiver_email}: "
            f"{record.message}"
        )

    async def _persist_message(self, record: ChatMessage) -> str:
        try:
            result = await self.store.insert_one(MESSAGES, record.to_document())
        except PersistenceError as e:
            logger.exception(
                f"Failed to persist message from {record.sender_email} "
                f"to {record.receiver_email}"
            )
            raise PersistenceError(
                "Failed to send message",
                details=e.details or e.message,
            ) from e
        return result.inserted_id

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _reject(self, sid: str, event_name: str, error: FoodSwiftError) -> None:
        """Send an `error` event to the offending socket only."""
        logger.warning(f"Rejected {event_name} from {sid}: {error.message}")
        await self.server.emit(ERROR, error.to_payload(), to=sid)

