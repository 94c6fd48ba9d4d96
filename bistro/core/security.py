"""
Bearer Token Service

Issues and verifies HMAC-signed JSON Web Tokens. The payload is whatever
identity claim the client supplied at sign-in (at least an email); the
service only adds the expiry. Tokens stay valid for their full lifetime,
there is no revocation list.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional

import jwt

from bistro.core.config import get_settings
from bistro.core.exceptions import AuthError

logger = logging.getLogger(__name__)

# Claims added by the service itself, stripped again on verification
REGISTERED_CLAIMS = ("exp", "iat")


class TokenService:
    """Signs identity claims into bearer tokens and decodes them back."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60):
        self._secret = secret
        self._algorithm = algorithm
        self.expires_delta = timedelta(minutes=expires_minutes)

    def issue(self, claim: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Sign ``claim`` into a token expiring ``expires_delta`` from now.

        The claim shape is not validated; downstream checks rely on ``email``.
        """
        now = datetime.now(timezone.utc)
        to_encode = dict(claim)
        to_encode.update({
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expires_delta),
        })
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Decode a token and return the claim it was issued for.

        Raises:
            AuthError: bad signature, malformed token, or expired
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise AuthError("Invalid token")

        return {k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS}


@lru_cache()
def get_token_service() -> TokenService:
    """Get the token service configured from settings."""
    settings = get_settings()
    return TokenService(
        secret=settings.access_token_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )
