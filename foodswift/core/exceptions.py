"""
Application Exceptions

Error taxonomy shared by the HTTP routes and the realtime relay:
    - AuthError: missing, invalid or expired credential (401 / handshake refused)
    - ValidationError: malformed request or event payload
    - AuthorizationError: authenticated identity lacks the required role
    - PersistenceError: document store operation failed
    - ConfigurationError: server-side misconfiguration

HTTP routes translate these through the handlers registered by
register_exception_handlers(); the realtime relay turns them into
`error` events sent to the offending socket only.

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FoodSwiftError(Exception):
    """Base exception for the application."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code if status_code is not None else self.status_code
        self.details = details
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Client-visible body, shared by HTTP responses and `error` events."""
        payload: dict[str, Any] = {"message": self.message}
        if self.details is not None:
            payload["error"] = self.details
        return payload


class AuthError(FoodSwiftError):
    """Raised when a credential is missing, malformed or expired."""

    status_code = 401


class ValidationError(FoodSwiftError):
    """Raised when an inbound payload fails validation."""

    status_code = 400


class AuthorizationError(FoodSwiftError):
    """Raised when the caller's role does not permit the operation."""

    status_code = 403


class NotFoundError(FoodSwiftError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class PersistenceError(FoodSwiftError):
    """Raised when the document store rejects or fails an operation."""

    status_code = 500


class ConfigurationError(FoodSwiftError):
    """Raised when configuration is invalid (server-side)."""

    status_code = 500


def register_exception_handlers(app: FastAPI) -> None:
    """Register the application's exception handlers on a FastAPI app."""

    @app.exception_handler(FoodSwiftError)
    async def _food_swift_error_handler(request: Request, exc: FoodSwiftError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "message": "Internal Server Error",
                    "error": str(exc.details or exc.message),
                },
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(Exception)
    async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"message": "Internal Server Error", "error": str(exc)},
        )
