"""
Core module initialization.
Exports configuration, logging and security utilities.
"""

from app.core.config import get_settings, Settings, EnvironmentMode
from app.core.security import PasswordHasher, TokenIssuer, TokenClaims

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "PasswordHasher",
    "TokenIssuer",
    "TokenClaims",
]
