"""
Application Exceptions

Every failure a request can end in maps to exactly one of these classes.
The FastAPI exception handlers in app.main render them as
``{"message": ...}`` with the class's HTTP status code.

Hierarchy:
    AppError
    ├── ValidationError (400)
    │   ├── InvalidRole, DuplicateEmail, InvalidOwner
    │   └── InvalidQuantity, EmptyOrder
    ├── AuthenticationError (401)
    ├── ForbiddenError (403)
    └── NotFoundError (404)
        └── CustomerNotFound, RestaurantNotFound, MenuItemNotFound, ...

ConfigurationError is not an AppError: it signals a process that cannot
run at all and is raised at startup.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConfigurationError(RuntimeError):
    """Raised when required process configuration is missing or invalid."""


# =============================================================================
# DOMAIN ERRORS
# =============================================================================

class DuplicateEmail(ValidationError):
    default_message = "Email already registered"


class InvalidRole(ValidationError):
    default_message = "Invalid role. Valid roles: Customer, RestaurantOwner, Admin"


class InvalidOwner(ValidationError):
    default_message = "Invalid owner ID or owner is not a restaurant owner"


class InvalidQuantity(ValidationError):
    def __init__(self, item_name: str):
        super().__init__(f"Quantity for item {item_name} must be greater than 0")


class EmptyOrder(ValidationError):
    default_message = "Order must contain at least one item"


class CustomerNotFound(NotFoundError):
    default_message = "Customer not found"


class RestaurantNotFound(NotFoundError):
    default_message = "Restaurant not found"


class MenuItemNotFound(NotFoundError):
    default_message = "Menu item not found"

    @classmethod
    def in_restaurant(cls, menu_item_id: int) -> "MenuItemNotFound":
        return cls(f"MenuItem with ID {menu_item_id} not found in this restaurant")


class OrderNotFound(NotFoundError):
    default_message = "Order not found"
