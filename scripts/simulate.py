"""
Delivery Simulation Script

Drives concurrent customer / delivery-agent pairs against a running server:
registers both users, logs them in through POST /jwt, connects them over
Socket.IO, streams agent locations into the order room and exchanges a
chat message.

Run from project root (server started with uvicorn foodswift.main:asgi_app):
    python scripts/simulate.py --deliveries 10 --updates 5

Author: Food Swift Team
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from datetime import datetime
from typing import Any

import httpx
import socketio

# Configuration
API_BASE_URL = "http://localhost:5000"
TOTAL_DELIVERIES = 10
UPDATES_PER_DELIVERY = 5

# Dhaka-ish starting points for agents
CITY_CENTER = (23.8103, 90.4125)


def random_position() -> tuple[float, float]:
    """Position jittered around the city center."""
    lat, lng = CITY_CENTER
    return (
        round(lat + random.uniform(-0.05, 0.05), 6),
        round(lng + random.uniform(-0.05, 0.05), 6),
    )


# =============================================================================
# HTTP HELPERS
# =============================================================================

async def register_user(client: httpx.AsyncClient, email: str, role: str) -> bool:
    """Create a user; an existing one (400) is fine."""
    response = await client.post(
        f"{API_BASE_URL}/users",
        json={"email": email, "role": role, "name": email.split("@")[0]},
    )
    return response.status_code in (201, 400)


async def login(client: httpx.AsyncClient, email: str, role: str) -> str:
    """Exchange claims for the auth cookie and return the token."""
    response = await client.post(
        f"{API_BASE_URL}/jwt",
        json={"email": email, "role": role},
    )
    response.raise_for_status()
    token = response.cookies.get("token")
    if not token:
        raise RuntimeError(f"No token cookie returned for {email}")
    return token


async def connect(token: str) -> socketio.AsyncClient:
    """Open an authenticated Socket.IO connection."""
    sio = socketio.AsyncClient()
    await sio.connect(API_BASE_URL, auth={"token": token}, transports=["websocket"])
    return sio


# =============================================================================
# DELIVERY FLOW
# =============================================================================

async def run_delivery(
    client: httpx.AsyncClient,
    delivery_num: int,
    updates: int,
) -> dict[str, Any]:
    """One customer tracking one agent, plus a chat round trip."""
    run_id = uuid.uuid4().hex[:6]
    customer_email = f"customer{delivery_num}_{run_id}@foodswift.test"
    agent_email = f"agent{delivery_num}_{run_id}@foodswift.test"
    order_id = f"order_{run_id}"
    start_time = time.time()

    locations: list[dict] = []
    messages: list[dict] = []
    errors: list[dict] = []

    try:
        await register_user(client, customer_email, "customer")
        await register_user(client, agent_email, "deliveryAgent")
        customer_token = await login(client, customer_email, "customer")
        agent_token = await login(client, agent_email, "deliveryAgent")

        customer = await connect(customer_token)
        agent = await connect(agent_token)

        customer.on("locationUpdate", lambda data: locations.append(data))
        agent.on("receiveMessage", lambda data: messages.append(data))
        agent.on("error", lambda data: errors.append(data))

        # call() waits for the server ack, so the joins are in place before emitting
        await customer.call("joinOrderRoom", order_id, timeout=10)
        await customer.call(
            "joinChatRoom",
            {"senderEmail": customer_email, "receiverEmail": agent_email},
            timeout=10,
        )
        await agent.call(
            "joinChatRoom",
            {"senderEmail": agent_email, "receiverEmail": customer_email},
            timeout=10,
        )

        for _ in range(updates):
            latitude, longitude = random_position()
            await agent.call(
                "updateLocation",
                {"orderId": order_id, "latitude": latitude, "longitude": longitude},
                timeout=10,
            )

        await customer.call(
            "sendMessage",
            {
                "senderEmail": customer_email,
                "receiverEmail": agent_email,
                "message": "Where are you?",
            },
            timeout=10,
        )

        # Let the last broadcasts land
        await asyncio.sleep(0.5)
        await customer.disconnect()
        await agent.disconnect()

        elapsed = round(time.time() - start_time, 3)
        return {
            "delivery_num": delivery_num,
            "success": len(locations) == updates and len(messages) == 1 and not errors,
            "locations": len(locations),
            "messages": len(messages),
            "errors": [e.get("message") for e in errors],
            "time": elapsed,
        }

    except Exception as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "delivery_num": delivery_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(
    num_deliveries: int = TOTAL_DELIVERIES,
    updates: int = UPDATES_PER_DELIVERY,
) -> dict[str, Any]:
    """Run all deliveries concurrently and print a summary."""
    print("=" * 70)
    print("🛵 DELIVERY SIMULATION")
    print("=" * 70)
    print(f"📋 Deliveries: {num_deliveries} x {updates} location updates")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient(timeout=30.0) as client:
        health = await client.get(f"{API_BASE_URL}/health")
        if health.status_code != 200:
            print(f"\n❌ Health check failed: {health.text[:100]}")
            return {"total": num_deliveries, "successful": 0, "results": []}
        print(f"\n✅ Server {health.json().get('status')}, starting...\n")

        tasks = [run_delivery(client, i + 1, updates) for i in range(num_deliveries)]
        results = await asyncio.gather(*tasks)

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Deliveries: {len(successful)}/{num_deliveries}")
    print(f"❌ Failed Deliveries: {len(failed)}/{num_deliveries}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Average Delivery Flow: {avg_time}s")

    if failed:
        print(f"\n⚠️  Failed Delivery Details (showing first 5):")
        for f in failed[:5]:
            detail = f.get("error") or f"{f.get('locations')} locations, errors={f.get('errors')}"
            print(f"   Delivery #{f['delivery_num']}: {detail}")

    print("=" * 70)

    return {
        "total": num_deliveries,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Delivery Simulation Script")
    parser.add_argument("--deliveries", type=int, default=TOTAL_DELIVERIES, help="Concurrent deliveries")
    parser.add_argument("--updates", type=int, default=UPDATES_PER_DELIVERY, help="Location updates per delivery")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    summary = asyncio.run(run_simulation(args.deliveries, args.updates))
    sys.exit(0 if summary["successful"] == summary["total"] else 1)
