"""
FastAPI Application Entry Point

Food Swift Server - HTTP API plus Socket.IO realtime layer.

Endpoints:
    - GET /: Liveness text
    - GET /health: Store and realtime health check
    - POST /jwt: Issue the auth cookie
    - DELETE /logout: Clear the auth cookie
    - POST /users: Register a user
    - GET /users/isBlocked/{email}: Block status of a user
    - PATCH /users/block-req-one/{email}: Block a user
    - POST /restaurants: Create a restaurant
    - POST /orders: Create an order (auth cookie required)

Realtime (Socket.IO, same port):
    - joinOrderRoom, updateLocation, joinChatRoom, sendMessage

Run:
    uvicorn foodswift.main:asgi_app --port 5000

Author: Food Swift Team
Version: 1.0.0
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import socketio
from fastapi import Body, Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from foodswift.core.config import Settings, get_settings, setup_logging
from foodswift.core.exceptions import (
    NotFoundError,
    ValidationError,
    register_exception_handlers,
)
from foodswift.models import ORDERS, RESTAURANTS, USERS, OrderStatus, utc_now
from foodswift.realtime import RealtimeGateway
from foodswift.schemas import (
    BlockStatusResponse,
    ErrorResponse,
    HealthResponse,
    InsertResponse,
    SuccessResponse,
    UpdateResponse,
    UserCreate,
)
from foodswift.services.store import BaseDocumentStore, get_document_store
from foodswift.services.tokens import TokenService, get_current_claims, get_token_service

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Realtime layer shares the process-wide store
gateway = RealtimeGateway(store=get_document_store()).attach()


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    store = get_document_store()
    logger.info(f"✅ Document Store: {store.provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing config: {missing}")

    if await store.ping():
        logger.info("✅ Connected to document store successfully!")
    else:
        logger.warning("⚠️ Document store is not reachable")

    logger.info("=" * 60)
    logger.info(f"✅ Server is running on port {settings.api_port}")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await gateway.shutdown()
    await store.close()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Food delivery backend with cookie-based JWT auth and a Socket.IO "
        "layer for live delivery tracking and chat."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Socket.IO in front; everything outside /socket.io/ falls through to FastAPI
asgi_app = socketio.ASGIApp(gateway.server, other_asgi_app=app)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", response_class=PlainTextResponse, tags=["Root"])
async def root() -> str:
    """Liveness text."""
    return "Food Swift Server is running"


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    store: BaseDocumentStore = Depends(get_document_store),
) -> HealthResponse:
    """Verify the document store is reachable and report live sessions."""
    store_status = "healthy" if await store.ping() else "unhealthy"

    return HealthResponse(
        status="operational" if store_status == "healthy" else "degraded",
        environment=settings.env_mode.value,
        store=store_status,
        store_provider=store.provider_name,
        realtime_sessions=len(gateway.registry),
        timestamp=datetime.now(),
    )


# =============================================================================
# AUTHENTICATION ENDPOINTS
# =============================================================================

@app.post("/jwt", response_model=SuccessResponse, tags=["Auth"])
async def issue_token(
    response: Response,
    claims: dict[str, Any] = Body(...),
    tokens: TokenService = Depends(get_token_service),
    config: Settings = Depends(get_settings),
) -> SuccessResponse:
    """Sign the posted claims and set them as the httpOnly auth cookie."""
    token = tokens.issue(claims)
    response.set_cookie(config.token_cookie_name, token, **config.cookie_options)
    logger.info(f"Issued token for {claims.get('email', 'unknown')}")
    return SuccessResponse()


@app.delete("/logout", response_model=SuccessResponse, tags=["Auth"])
async def logout(
    response: Response,
    config: Settings = Depends(get_settings),
) -> SuccessResponse:
    """Clear the auth cookie."""
    response.delete_cookie(config.token_cookie_name, **config.cookie_options)
    return SuccessResponse()


# =============================================================================
# USER ENDPOINTS
# =============================================================================

@app.post(
    "/users",
    status_code=201,
    response_model=InsertResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["Users"],
)
async def create_user(
    user: UserCreate,
    store: BaseDocumentStore = Depends(get_document_store),
) -> InsertResponse:
    """Register a user unless the email is already taken."""
    existing = await store.find_one(USERS, {"email": user.email})
    if existing:
        raise ValidationError("Email already exists")

    result = await store.insert_one(USERS, user.model_dump(by_alias=True, mode="json"))
    logger.info(f"User created: {user.email} ({user.role.value})")
    return InsertResponse(inserted_id=result.inserted_id, acknowledged=result.acknowledged)


@app.get(
    "/users/isBlocked/{email}",
    response_model=BlockStatusResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Users"],
)
async def get_block_status(
    email: str,
    store: BaseDocumentStore = Depends(get_document_store),
) -> BlockStatusResponse:
    """Return the isBlock flag of a user."""
    user = await store.find_one(USERS, {"email": email})
    if not user:
        raise NotFoundError("User not found")
    return BlockStatusResponse(is_block=user.get("isBlock"))


@app.patch(
    "/users/block-req-one/{email}",
    response_model=UpdateResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Users"],
)
async def block_user(
    email: str,
    store: BaseDocumentStore = Depends(get_document_store),
) -> UpdateResponse:
    """Set isBlock on a user."""
    result = await store.update_one(USERS, {"email": email}, {"isBlock": True})
    if result.matched_count == 0:
        raise NotFoundError("User not found")

    logger.info(f"User blocked: {email}")
    return UpdateResponse(
        acknowledged=result.acknowledged,
        matched_count=result.matched_count,
        modified_count=result.modified_count,
    )


# =============================================================================
# RESTAURANT & ORDER ENDPOINTS
# =============================================================================

@app.post("/restaurants", status_code=201, response_model=InsertResponse, tags=["Restaurants"])
async def create_restaurant(
    restaurant: dict[str, Any] = Body(...),
    store: BaseDocumentStore = Depends(get_document_store),
) -> InsertResponse:
    """Insert a restaurant, stamped with createdAt in epoch milliseconds."""
    restaurant["createdAt"] = int(time.time() * 1000)
    result = await store.insert_one(RESTAURANTS, restaurant)
    logger.info(f"Restaurant created: {result.inserted_id}")
    return InsertResponse(inserted_id=result.inserted_id, acknowledged=result.acknowledged)


@app.post(
    "/orders",
    status_code=201,
    response_model=InsertResponse,
    responses={401: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def create_order(
    order: dict[str, Any] = Body(...),
    claims: dict[str, Any] = Depends(get_current_claims),
    store: BaseDocumentStore = Depends(get_document_store),
) -> InsertResponse:
    """Insert a pending order for the authenticated user."""
    order["createdAt"] = utc_now()
    order["status"] = OrderStatus.PENDING.value
    result = await store.insert_one(ORDERS, order)
    logger.info(f"Order {result.inserted_id} created by {claims.get('email', 'unknown')}")
    return InsertResponse(inserted_id=result.inserted_id, acknowledged=result.acknowledged)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "foodswift.main:asgi_app",
        host=settings.api_host,
        port=settings.api_port,
    )
