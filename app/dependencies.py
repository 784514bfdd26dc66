"""
FastAPI Dependencies

Wires request-scoped objects together:
    - bearer token -> TokenClaims (401 when missing or invalid)
    - role gates for endpoints restricted to certain roles (403)
    - service instances bound to the request's database session

The token issuer and password hasher are built once from Settings and
cached, in the same way the settings themselves are.
"""

from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import AuthenticationError, ForbiddenError
from app.core.security import PasswordHasher, TokenClaims, TokenIssuer
from app.database import get_db
from app.models import UserRole
from app.services.auth_service import AuthService
from app.services.catalog_service import CatalogService
from app.services.order_service import OrderService

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    """
    Get the process-wide token issuer.

    Raises:
        ConfigurationError: If JWT_SECRET is not configured
    """
    return TokenIssuer.from_settings(get_settings())


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def reset_security_components() -> None:
    """Clear cached issuer and hasher (after settings change, e.g. in tests)."""
    get_token_issuer.cache_clear()
    get_password_hasher.cache_clear()


# =============================================================================
# IDENTITY
# =============================================================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Authentication required")
    return issuer.decode_token(credentials.credentials)


def require_roles(*roles: UserRole) -> Callable:
    """Build a dependency that admits only the given roles."""
    allowed = {role.value for role in roles}

    async def dependency(current_user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
        if current_user.role not in allowed:
            raise ForbiddenError("Permission denied")
        return current_user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_owner_or_admin = require_roles(UserRole.RESTAURANT_OWNER, UserRole.ADMIN)
require_customer_or_admin = require_roles(UserRole.CUSTOMER, UserRole.ADMIN)


# =============================================================================
# SERVICES
# =============================================================================

def get_auth_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    return AuthService(db, hasher)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)
