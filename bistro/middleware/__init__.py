"""
Middleware module initialization.
Exports the access-control guard pipelines.
"""

from bistro.middleware.rbac import (
    ADMIN_ONLY,
    AUTHENTICATED,
    AccessDecision,
    GuardPipeline,
    RequestContext,
    authenticate,
    authorize,
    ensure_owner,
    promotion_access,
)

__all__ = [
    "ADMIN_ONLY",
    "AUTHENTICATED",
    "AccessDecision",
    "GuardPipeline",
    "RequestContext",
    "authenticate",
    "authorize",
    "ensure_owner",
    "promotion_access",
]
