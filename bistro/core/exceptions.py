"""
Error Taxonomy

Every failure that ends a request is one of these exceptions. The FastAPI
exception handlers in ``bistro.main`` turn them into an ``ErrorResponse``
with the status code carried by the class.
"""

from typing import Any, Optional


class BistroError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class Unauthorized(BistroError):
    """No credential was presented."""
    status_code = 401
    error = "unauthorized"


class Forbidden(BistroError):
    """Credential invalid, role insufficient, or identity mismatch."""
    status_code = 403
    error = "forbidden"


class ValidationError(BistroError):
    """Malformed identifier or input value."""
    status_code = 400
    error = "validation_error"


class UpstreamError(BistroError):
    """The document store or the payment processor failed."""
    status_code = 502
    error = "upstream_error"


class AuthError(BistroError):
    """A bearer token failed signature, format or expiry checks."""
    status_code = 403
    error = "invalid_token"


class PartialSettlementError(UpstreamError):
    """The payment was recorded but the settled cart items were not removed."""
    error = "partial_settlement"
