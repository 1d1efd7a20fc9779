"""
Access Token Service

Issues and verifies the HS256 JWTs carried in the `token` cookie and in
the Socket.IO handshake `auth.token` field. Verification is fail-closed:
any problem with the credential raises AuthError and nothing downstream
runs. There is no refresh; clients re-authenticate through POST /jwt.

Usage:
    from foodswift.services.tokens import get_token_service

    tokens = get_token_service()
    token = tokens.issue({"email": "a@x.com"})
    email = tokens.authenticate(token)

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Mapping, Optional

import jwt
from fastapi import Depends, Request

from foodswift.core.config import Settings, get_settings
from foodswift.core.exceptions import AuthError, ConfigurationError

logger = logging.getLogger(__name__)


class TokenService:
    """Signs claim sets and validates presented tokens."""

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        expires_hours: int = 23,
    ):
        if not secret:
            raise ConfigurationError("ACCESS_TOKEN_SECRET is not configured")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = timedelta(hours=expires_hours)

    def issue(self, claims: Mapping[str, Any]) -> str:
        """
        Sign `claims` with an expiry `expires_in` from now.

        Args:
            claims: Arbitrary JSON-compatible claims from the client

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + self.expires_in
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> dict[str, Any]:
        """
        Decode and validate a token.

        Raises:
            AuthError: Missing token, bad signature, malformed or expired
        """
        if not token:
            raise AuthError("No token provided")
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")

    def authenticate(self, token: Optional[str]) -> str:
        """Verify a token and return the email it was issued for."""
        claims = self.verify(token)
        email = claims.get("email")
        if not isinstance(email, str) or not email:
            raise AuthError("Invalid token")
        return email


@lru_cache()
def get_token_service() -> TokenService:
    """Get the process-wide token service built from settings."""
    settings = get_settings()
    return TokenService(
        secret=settings.access_token_secret,
        algorithm=settings.token_algorithm,
        expires_hours=settings.token_expires_hours,
    )


def reset_token_service() -> None:
    """Clear the cached service instance."""
    get_token_service.cache_clear()


# =============================================================================
# FASTAPI DEPENDENCIES
# =============================================================================

async def get_current_claims(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Dependency guarding routes that need the auth cookie.

    Raises:
        AuthError: 401 "Unauthorized access" before the route body runs
    """
    try:
        return tokens.verify(request.cookies.get(settings.token_cookie_name))
    except AuthError as e:
        logger.warning(f"Rejected request to {request.url.path}: {e.message}")
        raise AuthError("Unauthorized access") from e
