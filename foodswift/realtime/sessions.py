"""
Realtime Session Registry

Binds each live Socket.IO connection to the email it authenticated with
and tracks the rooms it has joined. Room membership itself lives in the
Socket.IO server's manager; the registry mirrors it so memberships can
be released explicitly, exactly once, on every exit path:

    - client disconnect (on_disconnect -> release)
    - server shutdown (release_all)
    - scoped use in scripts and tests (async with registry.scoped(...))

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Optional, Protocol

from foodswift.core.exceptions import AuthError
from foodswift.models import utc_now

logger = logging.getLogger(__name__)


class RoomServer(Protocol):
    """The subset of socketio.AsyncServer the realtime layer relies on."""

    async def enter_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None: ...

    async def leave_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None: ...

    async def emit(self, event: str, data=None, to: Optional[str] = None, **kwargs) -> None: ...


@dataclass(frozen=True)
class Session:
    """
    One authenticated connection.

    Attributes:
        sid: Socket.IO session id
        email: Identity established at handshake; never reassigned
        rooms: Rooms joined through the registry
        connected_at: Handshake time
    """
    sid: str
    email: str
    rooms: set[str] = field(default_factory=set)
    connected_at: datetime = field(default_factory=utc_now)


class SessionRegistry:
    """Tracks live sessions and their room memberships."""

    def __init__(self, server: RoomServer):
        self._server = server
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sid: object) -> bool:
        return sid in self._sessions

    def open(self, sid: str, email: str) -> Session:
        """Bind a freshly authenticated connection."""
        if sid in self._sessions:
            raise RuntimeError(f"Session {sid} is already open")
        session = Session(sid=sid, email=email)
        self._sessions[sid] = session
        logger.debug(f"Session opened: {sid} ({email})")
        return session

    def get(self, sid: str) -> Session:
        """
        Look up the session for a connection.

        Raises:
            AuthError: No authenticated session for this sid
        """
        session = self._sessions.get(sid)
        if session is None:
            raise AuthError("Authentication error: Unknown session")
        return session

    async def join(self, sid: str, room: str) -> bool:
        """
        Add the connection to a room.

        Returns:
            False if it was already a member (joining is idempotent)
        """
        session = self.get(sid)
        if room in session.rooms:
            return False
        await self._server.enter_room(sid, room)
        session.rooms.add(room)
        return True

    async def release(self, sid: str) -> Optional[Session]:
        """
        Drop a session and leave all of its rooms.

        Safe to call more than once; only the first call does anything.
        """
        session = self._sessions.pop(sid, None)
        if session is None:
            return None

        for room in sorted(session.rooms):
            await self._server.leave_room(sid, room)
        logger.debug(f"Session released: {sid} ({len(session.rooms)} rooms)")
        return session

    async def release_all(self) -> int:
        """Release every live session; used at shutdown."""
        sids = list(self._sessions)
        for sid in sids:
            await self.release(sid)
        return len(sids)

    @asynccontextmanager
    async def scoped(self, sid: str, email: str) -> AsyncIterator[Session]:
        """Open a session for the duration of a block."""
        session = self.open(sid, email)
        try:
            yield session
        finally:
            await self.release(sid)
