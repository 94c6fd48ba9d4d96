"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from bistro.core.config import get_settings, Settings, EnvironmentMode, setup_logging
from bistro.core.exceptions import (
    BistroError,
    Unauthorized,
    Forbidden,
    ValidationError,
    UpstreamError,
    AuthError,
    PartialSettlementError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "setup_logging",
    "BistroError",
    "Unauthorized",
    "Forbidden",
    "ValidationError",
    "UpstreamError",
    "AuthError",
    "PartialSettlementError",
]
