"""
                        Services Module

Contains all business logic services. Each service is bound to the
request's database session by the dependencies in app.dependencies.

Services:
    - auth_service: Registration and credential validation
    - authorization: Shared ownership rule (Admin or owning user)
    - catalog_service: Restaurants and menu items
    - order_service: Order placement and status tracking
"""

from app.services.auth_service import AuthService, RegistrationResult
from app.services.authorization import ensure_authorized, is_authorized
from app.services.catalog_service import CatalogService
from app.services.order_service import OrderService

__all__ = [
    "AuthService",
    "RegistrationResult",
    "CatalogService",
    "OrderService",
    "ensure_authorized",
    "is_authorized",
]
