"""
Request Access Control

Routes declare an ordered guard pipeline as a FastAPI dependency:

    @app.get("/users")
    async def list_users(context: RequestContext = Depends(ADMIN_ONLY)): ...

Each guard returns an AccessDecision; the pipeline stops at the first
denial and raises the decision's error. ``authenticate`` must come before
``authorize`` in every pipeline.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends, Request

from bistro.core.config import get_settings
from bistro.core.exceptions import AuthError, BistroError, Forbidden, Unauthorized
from bistro.core.security import TokenService, get_token_service
from bistro.database import DocumentStore, get_store
from bistro.models import Role

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """Per-request state shared by the guards and handed to the route."""
    authorization: Optional[str]
    store: DocumentStore
    tokens: TokenService
    claim: Optional[dict[str, Any]] = None

    @property
    def email(self) -> Optional[str]:
        return (self.claim or {}).get("email")


@dataclass
class AccessDecision:
    allowed: bool
    reason: str = "ok"
    error: Optional[type[BistroError]] = None
    message: str = ""

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: type[BistroError], reason: str, message: str) -> "AccessDecision":
        return cls(allowed=False, reason=reason, error=error, message=message)

    @property
    def status_code(self) -> int:
        return self.error.status_code if self.error else 200


Guard = Callable[[RequestContext], Awaitable[AccessDecision]]


async def authenticate(context: RequestContext) -> AccessDecision:
    """
    Require ``Authorization: Bearer <token>`` and attach the decoded claim.

    No header is 401; anything else that fails is 403.
    """
    if not context.authorization:
        return AccessDecision.deny(Unauthorized, "missing_credentials", "Unauthorized Access")

    scheme, _, token = context.authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return AccessDecision.deny(Forbidden, "malformed_credentials", "Access Denied")

    try:
        context.claim = context.tokens.verify(token.strip())
    except AuthError as e:
        return AccessDecision.deny(Forbidden, "invalid_token", e.message)

    return AccessDecision.allow()


def authorize(role: Role) -> Guard:
    """Build a guard that re-reads the caller's stored role on every request."""

    async def role_guard(context: RequestContext) -> AccessDecision:
        if context.claim is None:
            raise RuntimeError("authorize() guard evaluated before authenticate()")

        user = await context.store.users.find_one({"email": context.email})
        if not user or user.get("role") != role.value:
            return AccessDecision.deny(Forbidden, f"role_{role.value}_required", "Forbidden Access")
        return AccessDecision.allow()

    role_guard.__name__ = f"authorize_{role.value}"
    return role_guard


class GuardPipeline:
    """Ordered guards usable directly as a FastAPI dependency."""

    def __init__(self, *guards: Guard):
        self.guards = guards

    async def evaluate(self, context: RequestContext) -> AccessDecision:
        for guard in self.guards:
            decision = await guard(context)
            if not decision.allowed:
                return decision
        return AccessDecision.allow()

    async def __call__(
        self,
        request: Request,
        store: DocumentStore = Depends(get_store),
        tokens: TokenService = Depends(get_token_service),
    ) -> RequestContext:
        context = RequestContext(
            authorization=request.headers.get("Authorization"),
            store=store,
            tokens=tokens,
        )
        decision = await self.evaluate(context)
        if not decision.allowed:
            logger.warning(
                f"Access denied on {request.method} {request.url.path}: "
                f"{decision.reason} (email={context.email})"
            )
            raise decision.error(decision.message)
        return context


AUTHENTICATED = GuardPipeline(authenticate)
ADMIN_ONLY = GuardPipeline(authenticate, authorize(Role.ADMIN))


async def promotion_access(
    request: Request,
    store: DocumentStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[RequestContext]:
    """Admin-only unless OPEN_ROLE_PROMOTION is set."""
    if get_settings().open_role_promotion:
        return None
    return await ADMIN_ONLY(request, store, tokens)


def ensure_owner(context: RequestContext, email: str) -> None:
    """Reject access to another user's resources, whatever the caller's role."""
    if context.email != email:
        logger.warning(f"Identity mismatch: {context.email} requested resources of {email}")
        raise Forbidden("Forbidden Access")
