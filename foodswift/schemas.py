"""
Pydantic Schemas for Request/Response Validation

Request bodies for the user API and the response shapes returned by
the HTTP routes. Response field names mirror the MongoDB driver results
the web front end already consumes (insertedId, matchedCount, ...).

Author: Food Swift Team
Version: 1.0.0
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from foodswift.models import UserRole


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class UserCreate(BaseModel):
    """Request schema for registering a user; extra profile fields are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    email: str = Field(..., min_length=1, examples=["agent@foodswift.app"])
    role: UserRole = Field(default=UserRole.CUSTOMER, examples=["deliveryAgent"])
    is_block: bool = Field(default=False, alias="isBlock")


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class InsertResponse(BaseModel):
    """Result of inserting a document."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    inserted_id: str = Field(..., serialization_alias="insertedId")


class UpdateResponse(BaseModel):
    """Result of updating a document."""

    acknowledged: bool = True
    matched_count: int = Field(..., serialization_alias="matchedCount")
    modified_count: int = Field(..., serialization_alias="modifiedCount")


class BlockStatusResponse(BaseModel):
    """Block flag of a single user."""

    is_block: Optional[bool] = Field(None, serialization_alias="isBlock")


class SuccessResponse(BaseModel):
    """Generic success acknowledgement (login/logout)."""
    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""
    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    environment: str
    store: str
    store_provider: str
    realtime_sessions: int
    timestamp: datetime
