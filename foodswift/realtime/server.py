"""
Socket.IO Gateway

Creates the python-socketio AsyncServer and wires it to the session
registry and relay handlers.

Connection lifecycle:
    connect     -> verify auth.token, refuse with "Authentication error: ..."
                   before any event handler is reachable, open a Session
    <events>    -> RelayHandlers
    disconnect  -> release the Session and its room memberships
    shutdown    -> release every remaining Session

Usage:
    from foodswift.realtime import RealtimeGateway

    gateway = RealtimeGateway(store=get_document_store())
    asgi_app = socketio.ASGIApp(gateway.server, other_asgi_app=app)

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from typing import Any, Callable, Optional

import socketio

from foodswift.core.config import Settings, get_settings
from foodswift.core.exceptions import AuthError
from foodswift.realtime.relay import RelayHandlers
from foodswift.realtime.sessions import SessionRegistry
from foodswift.services.store import BaseDocumentStore
from foodswift.services.tokens import TokenService, get_token_service

logger = logging.getLogger(__name__)


def create_socket_server(settings: Optional[Settings] = None) -> socketio.AsyncServer:
    """Build the ASGI Socket.IO server with the configured CORS origins."""
    settings = settings or get_settings()
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.allowed_origins_list,
        logger=settings.debug,
        engineio_logger=False,
    )


class RealtimeGateway:
    """
    Owns the realtime layer for one Socket.IO server.

    Attributes:
        server: The Socket.IO server (or any object with the same room API)
        registry: Live sessions on that server
        relay: Event handlers bound to `store`
    """

    def __init__(
        self,
        store: BaseDocumentStore,
        server: Optional[Any] = None,
        token_provider: Callable[[], TokenService] = get_token_service,
    ):
        self.server = server if server is not None else create_socket_server()
        self.registry = SessionRegistry(self.server)
        self.relay = RelayHandlers(self.server, self.registry, store)
        self._token_provider = token_provider

    def attach(self) -> "RealtimeGateway":
        """Register connection and event handlers on the server."""
        self.server.on("connect", self.on_connect)
        self.server.on("disconnect", self.on_disconnect)
        for event, handler in self.relay.handlers().items():
            self.server.on(event, handler)
        return self

    async def on_connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        """
        Handshake gate.

        Raises:
            socketio.exceptions.ConnectionRefusedError: missing or invalid token
        """
        token = auth.get("token") if isinstance(auth, dict) else None
        try:
            email = self._token_provider().authenticate(token)
        except AuthError as e:
            logger.warning(f"Socket.io connection refused: {sid} ({e.message})")
            raise socketio.exceptions.ConnectionRefusedError(
                f"Authentication error: {e.message}"
            )

        self.registry.open(sid, email)
        logger.info(f"Socket.io connected: {sid}, User: {email}")

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        session = await self.registry.release(sid)
        if session is not None:
            logger.info(f"Socket.io disconnected: {sid} ({session.email})")

    async def shutdown(self) -> int:
        """Release all sessions; returns how many were live."""
        released = await self.registry.release_all()
        if released:
            logger.info(f"Released {released} realtime sessions")
        return released
