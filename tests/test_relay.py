import pytest
import socketio

from foodswift.models import LOCATIONS, MESSAGES, USERS
from tests.conftest import AGENT, CUSTOMER


def _location(order_id="order-1", latitude=23.81, longitude=90.41):
    return {"orderId": order_id, "latitude": latitude, "longitude": longitude}


# =============================================================================
# HANDSHAKE
# =============================================================================

async def test_handshake_without_token_is_refused(gateway, server):
    with pytest.raises(socketio.exceptions.ConnectionRefusedError) as exc:
        await gateway.on_connect("sid-1", {}, None)

    assert exc.value.error_args["message"] == "Authentication error: No token provided"
    assert "sid-1" not in gateway.registry


async def test_handshake_with_bad_token_is_refused(gateway):
    with pytest.raises(socketio.exceptions.ConnectionRefusedError) as exc:
        await gateway.on_connect("sid-1", {}, {"token": "not-a-jwt"})

    assert exc.value.error_args["message"] == "Authentication error: Invalid token"
    assert len(gateway.registry) == 0


async def test_handshake_opens_session(gateway, connect):
    await connect("sid-1", CUSTOMER)
    assert gateway.registry.get("sid-1").email == CUSTOMER


async def test_events_from_unauthenticated_sid_never_reach_store(gateway, server, seeded_store):
    await gateway.relay.update_location("ghost", _location())
    await gateway.relay.send_message(
        "ghost", {"senderEmail": AGENT, "receiverEmail": CUSTOMER, "message": "hi"}
    )

    assert seeded_store.documents(LOCATIONS) == []
    assert seeded_store.documents(MESSAGES) == []
    assert [e["event"] for e in server.emitted] == ["error", "error"]


def test_attach_registers_all_events(gateway, server):
    assert set(server.handlers) == {
        "connect",
        "disconnect",
        "joinOrderRoom",
        "updateLocation",
        "joinChatRoom",
        "sendMessage",
    }


# =============================================================================
# ORDER TRACKING
# =============================================================================

async def test_location_update_reaches_order_room(gateway, server, connect, seeded_store):
    await connect("customer", CUSTOMER)
    await connect("agent", AGENT)
    await gateway.relay.join_order_room("customer", "order-1")

    await gateway.relay.update_location("agent", _location())

    stored = seeded_store.documents(LOCATIONS)
    assert len(stored) == 1
    assert stored[0]["deliveryAgentEmail"] == AGENT

    [update] = server.received("customer", "locationUpdate")
    assert update["orderId"] == "order-1"
    assert update["deliveryAgentEmail"] == AGENT
    assert (update["latitude"], update["longitude"]) == (23.81, 90.41)
    assert update["_id"] == stored[0]["_id"]
    assert isinstance(update["timestamp"], str)


async def test_agent_email_comes_from_session_not_payload(gateway, server, connect, seeded_store):
    await connect("agent", AGENT)
    payload = dict(_location(), deliveryAgentEmail="someone@else.com")

    await gateway.relay.update_location("agent", payload)

    assert seeded_store.documents(LOCATIONS)[0]["deliveryAgentEmail"] == AGENT


@pytest.mark.parametrize(
    "payload",
    [_location(), _location(latitude=100), {"orderId": ""}, None],
)
async def test_non_agent_never_writes_or_broadcasts(gateway, server, connect, seeded_store, payload):
    await connect("customer", CUSTOMER)
    await gateway.relay.join_order_room("customer", "order-1")

    await gateway.relay.update_location("customer", payload)

    assert seeded_store.documents(LOCATIONS) == []
    assert server.broadcasts("locationUpdate") == []
    assert len(server.received("customer", "error")) == 1


async def test_non_agent_gets_authorization_reason(gateway, server, connect, seeded_store):
    await connect("customer", CUSTOMER)
    await gateway.relay.update_location("customer", _location())

    [error] = server.received("customer", "error")
    assert error["message"] == "unauthorized: Only delivery agents can update location"


async def test_unknown_user_cannot_update_location(gateway, server, connect, seeded_store):
    await connect("stranger", "nobody@x.com")
    await gateway.relay.update_location("stranger", _location())

    [error] = server.received("stranger", "error")
    assert error["message"] == "User not found"
    assert seeded_store.documents(LOCATIONS) == []


async def test_corrupt_user_record_yields_error(gateway, server, connect, store):
    await store.insert_one(USERS, {"email": AGENT, "role": 7})
    await connect("agent", AGENT)

    await gateway.relay.update_location("agent", _location())

    [error] = server.received("agent", "error")
    assert error["message"] == "Failed to update location"
    assert "role" in error["error"]
    assert store.documents(LOCATIONS) == []
    assert server.broadcasts("locationUpdate") == []


@pytest.mark.parametrize(
    "latitude,longitude",
    [(-90.5, 0), (91, 10), (0, 180.01), (0, -200), (10**400, 0)],
)
async def test_out_of_range_coordinates_are_rejected(
    gateway, server, connect, seeded_store, latitude, longitude
):
    await connect("agent", AGENT)
    await gateway.relay.update_location("agent", _location(latitude=latitude, longitude=longitude))

    [error] = server.received("agent", "error")
    assert error["message"] == "Latitude or longitude out of range"
    assert seeded_store.documents(LOCATIONS) == []
    assert server.broadcasts("locationUpdate") == []


async def test_failed_write_is_not_broadcast(gateway, server, connect, seeded_store):
    await connect("customer", CUSTOMER)
    await connect("agent", AGENT)
    await gateway.relay.join_order_room("customer", "order-1")
    seeded_store.fail_writes = True

    await gateway.relay.update_location("agent", _location())

    assert server.broadcasts("locationUpdate") == []
    assert server.received("customer", "error") == []
    [error] = server.received("agent", "error")
    assert error["message"] == "Failed to update location"
    assert "locations" in error["error"]


async def test_role_is_rechecked_on_every_update(gateway, server, connect, seeded_store):
    await connect("agent", AGENT)
    await gateway.relay.update_location("agent", _location())

    await seeded_store.update_one(USERS, {"email": AGENT}, {"role": "customer"})
    await gateway.relay.update_location("agent", _location(latitude=23.82))

    assert len(seeded_store.documents(LOCATIONS)) == 1
    assert len(server.broadcasts("locationUpdate")) == 1
    [error] = server.received("agent", "error")
    assert error["message"].startswith("unauthorized")


async def test_every_update_is_appended(gateway, server, connect, seeded_store):
    await connect("agent", AGENT)
    for _ in range(3):
        await gateway.relay.update_location("agent", _location())

    assert len(seeded_store.documents(LOCATIONS)) == 3
    assert len(server.broadcasts("locationUpdate")) == 3


async def test_invalid_order_room_join_keeps_session(gateway, server, connect):
    await connect("customer", CUSTOMER)
    await gateway.relay.join_order_room("customer", 12345)

    [error] = server.received("customer", "error")
    assert error == {"message": "Invalid or missing orderId"}
    assert gateway.registry.get("customer").rooms == set()


async def test_late_joiner_gets_no_history(gateway, server, connect, seeded_store):
    await connect("agent", AGENT)
    await gateway.relay.update_location("agent", _location())

    await connect("customer", CUSTOMER)
    await gateway.relay.join_order_room("customer", "order-1")

    assert server.received("customer", "locationUpdate") == []


# =============================================================================
# CHAT
# =============================================================================

async def test_chat_round_trip(gateway, server, connect, store):
    await connect("A", "a@x.com")
    await connect("B", "b@x.com")
    await gateway.relay.join_chat_room("A", {"senderEmail": "a@x.com", "receiverEmail": "b@x.com"})
    await gateway.relay.join_chat_room("B", {"senderEmail": "b@x.com", "receiverEmail": "a@x.com"})

    assert server.rooms["a@x.com_b@x.com"] == {"A", "B"}

    await gateway.relay.send_message(
        "A", {"senderEmail": "a@x.com", "receiverEmail": "b@x.com", "message": "hi"}
    )

    [received] = server.received("B", "receiveMessage")
    assert received["senderEmail"] == "a@x.com"
    assert received["receiverEmail"] == "b@x.com"
    assert received["message"] == "hi"
    assert len(store.documents(MESSAGES)) == 1


async def test_chat_join_requires_both_emails(gateway, server, connect):
    await connect("A", "a@x.com")
    await gateway.relay.join_chat_room("A", {"senderEmail": "a@x.com"})

    [error] = server.received("A", "error")
    assert error["message"] == "Missing fields in chat room request"
    assert gateway.registry.get("A").rooms == set()


async def test_incomplete_message_is_rejected(gateway, server, connect, store):
    await connect("A", "a@x.com")
    await gateway.relay.send_message("A", {"senderEmail": "a@x.com", "receiverEmail": "b@x.com"})

    [error] = server.received("A", "error")
    assert error["message"] == "Missing fields in message"
    assert store.documents(MESSAGES) == []


async def test_failed_message_write_is_not_broadcast(gateway, server, connect, store):
    await connect("A", "a@x.com")
    await connect("B", "b@x.com")
    await gateway.relay.join_chat_room("B", {"senderEmail": "b@x.com", "receiverEmail": "a@x.com"})
    store.fail_writes = True

    await gateway.relay.send_message(
        "A", {"senderEmail": "a@x.com", "receiverEmail": "b@x.com", "message": "hi"}
    )

    assert server.broadcasts("receiveMessage") == []
    assert server.received("B", "error") == []
    assert server.received("A", "error")[0]["message"] == "Failed to send message"


# =============================================================================
# DISCONNECT
# =============================================================================

async def test_disconnect_releases_rooms(gateway, server, connect, seeded_store):
    await connect("customer", CUSTOMER)
    await connect("agent", AGENT)
    await gateway.relay.join_order_room("customer", "order-1")

    await gateway.on_disconnect("customer", "client disconnect")
    await gateway.on_disconnect("customer")

    assert "customer" not in gateway.registry
    assert server.rooms["order-1"] == set()

    await gateway.relay.update_location("agent", _location())
    assert server.received("customer", "locationUpdate") == []
    assert len(seeded_store.documents(LOCATIONS)) == 1


async def test_shutdown_releases_everything(gateway, connect):
    await connect("A", "a@x.com")
    await connect("B", "b@x.com")

    assert await gateway.shutdown() == 2
    assert len(gateway.registry) == 0
