"""
Authorization Policy

One ownership rule shared by the catalog and order services:

    Admin may act on anything; any other role may act only on a resource
    whose owning user id equals its own id.

Owning user ids are:
    - Restaurant: owner_id
    - MenuItem: the parent restaurant's owner_id
    - Order (read): customer_id
    - Order (status update): owner_id of the order's restaurant
"""

import logging
from typing import Optional

from app.core.exceptions import ForbiddenError
from app.models import UserRole

logger = logging.getLogger(__name__)


def is_authorized(role: str, requester_id: int, owner_id: Optional[int]) -> bool:
    """Return True if the requester may act on a resource owned by owner_id."""
    if role == UserRole.ADMIN.value:
        return True
    return owner_id is not None and requester_id == owner_id


def ensure_authorized(
    role: str,
    requester_id: int,
    owner_id: Optional[int],
    action: str = "access this resource",
) -> None:
    """
    Enforce the ownership rule.

    Raises:
        ForbiddenError: When is_authorized() denies the request
    """
    if not is_authorized(role, requester_id, owner_id):
        logger.warning(
            f"Denied: user #{requester_id} ({role}) tried to {action} "
            f"owned by user #{owner_id}"
        )
        raise ForbiddenError(f"You are not allowed to {action}")
