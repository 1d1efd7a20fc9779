"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from foodswift.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from foodswift.core.exceptions import (
    FoodSwiftError,
    AuthError,
    ValidationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ConfigurationError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "FoodSwiftError",
    "AuthError",
    "ValidationError",
    "AuthorizationError",
    "NotFoundError",
    "PersistenceError",
    "ConfigurationError",
]
