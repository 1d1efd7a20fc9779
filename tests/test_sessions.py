import dataclasses

import pytest

from foodswift.core.exceptions import AuthError
from foodswift.realtime.sessions import SessionRegistry


@pytest.fixture
def registry(server):
    return SessionRegistry(server)


def test_open_binds_email(registry):
    session = registry.open("sid-1", "a@x.com")
    assert registry.get("sid-1") is session
    assert session.email == "a@x.com"
    assert "sid-1" in registry
    assert len(registry) == 1


def test_session_email_is_immutable(registry):
    session = registry.open("sid-1", "a@x.com")
    with pytest.raises(dataclasses.FrozenInstanceError):
        session.email = "b@x.com"


def test_open_twice_is_rejected(registry):
    registry.open("sid-1", "a@x.com")
    with pytest.raises(RuntimeError):
        registry.open("sid-1", "b@x.com")


def test_unknown_sid_is_unauthenticated(registry):
    with pytest.raises(AuthError):
        registry.get("ghost")


async def test_join_is_idempotent(registry, server):
    registry.open("sid-1", "a@x.com")
    assert await registry.join("sid-1", "order-1") is True
    assert await registry.join("sid-1", "order-1") is False
    assert server.enter_calls == 1
    assert server.rooms["order-1"] == {"sid-1"}


async def test_release_leaves_every_room_once(registry, server):
    registry.open("sid-1", "a@x.com")
    await registry.join("sid-1", "order-1")
    await registry.join("sid-1", "a@x.com_b@x.com")

    released = await registry.release("sid-1")
    assert released.rooms == {"order-1", "a@x.com_b@x.com"}
    assert server.rooms["order-1"] == set()
    assert server.rooms["a@x.com_b@x.com"] == set()

    assert await registry.release("sid-1") is None
    assert "sid-1" not in registry


async def test_released_sid_cannot_join(registry):
    registry.open("sid-1", "a@x.com")
    await registry.release("sid-1")
    with pytest.raises(AuthError):
        await registry.join("sid-1", "order-1")


async def test_reconnect_starts_with_no_rooms(registry, server):
    registry.open("sid-1", "a@x.com")
    await registry.join("sid-1", "order-1")
    await registry.release("sid-1")

    fresh = registry.open("sid-2", "a@x.com")
    assert fresh.rooms == set()
    assert server.rooms["order-1"] == set()


async def test_release_all(registry, server):
    for n in range(3):
        registry.open(f"sid-{n}", f"user{n}@x.com")
        await registry.join(f"sid-{n}", "order-1")

    assert await registry.release_all() == 3
    assert len(registry) == 0
    assert server.rooms["order-1"] == set()


async def test_scoped_session_released_on_error(registry, server):
    with pytest.raises(ValueError):
        async with registry.scoped("sid-1", "a@x.com"):
            await registry.join("sid-1", "order-1")
            raise ValueError("boom")

    assert "sid-1" not in registry
    assert server.rooms["order-1"] == set()
