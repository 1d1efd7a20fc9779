from __future__ import annotations

import os
from collections import defaultdict
from typing import Any, Optional

import pytest

# Unit-test-safe configuration: in-memory store, fixed signing secret.
os.environ["ENV_MODE"] = "development"
os.environ["ACCESS_TOKEN_SECRET"] = "test-secret"
for _key in ("DB_USER", "DB_PASS", "MONGODB_URI", "NODE_ENV"):
    os.environ.pop(_key, None)

from foodswift.models import USERS  # noqa: E402
from foodswift.realtime import RealtimeGateway  # noqa: E402
from foodswift.services.store import MemoryDocumentStore  # noqa: E402
from foodswift.services.tokens import TokenService  # noqa: E402

AGENT = "agent@x.com"
CUSTOMER = "customer@x.com"


class FakeSocketServer:
    """Records room membership and emits like socketio.AsyncServer would."""

    def __init__(self) -> None:
        self.rooms: dict[str, set[str]] = defaultdict(set)
        self.handlers: dict[str, Any] = {}
        self.emitted: list[dict[str, Any]] = []
        self.enter_calls = 0

    def on(self, event: str, handler: Any = None) -> None:
        self.handlers[event] = handler

    async def enter_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None:
        self.enter_calls += 1
        self.rooms[room].add(sid)

    async def leave_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None:
        self.rooms[room].discard(sid)

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None, **kwargs: Any) -> None:
        target = to or kwargs.get("room")
        members = self.rooms.get(target)
        recipients = set(members) if members else {target}
        self.emitted.append({"event": event, "data": data, "to": target, "recipients": recipients})

    def received(self, sid: str, event: Optional[str] = None) -> list[Any]:
        return [
            e["data"]
            for e in self.emitted
            if sid in e["recipients"] and (event is None or e["event"] == event)
        ]

    def broadcasts(self, event: str) -> list[dict[str, Any]]:
        return [e for e in self.emitted if e["event"] == event]


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def server() -> FakeSocketServer:
    return FakeSocketServer()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret="test-secret")


@pytest.fixture
def gateway(store: MemoryDocumentStore, server: FakeSocketServer, tokens: TokenService) -> RealtimeGateway:
    return RealtimeGateway(store=store, server=server, token_provider=lambda: tokens).attach()


@pytest.fixture
def connect(gateway: RealtimeGateway, tokens: TokenService):
    """Run the handshake for `sid` as `email`."""

    async def _connect(sid: str, email: str) -> None:
        await gateway.on_connect(sid, {}, {"token": tokens.issue({"email": email})})

    return _connect


@pytest.fixture
async def seeded_store(store: MemoryDocumentStore) -> MemoryDocumentStore:
    await store.insert_one(USERS, {"email": AGENT, "role": "deliveryAgent", "isBlock": False})
    await store.insert_one(USERS, {"email": CUSTOMER, "role": "customer", "isBlock": False})
    return store
