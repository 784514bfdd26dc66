"""
Catalog Service

Restaurants and their menu items. Both are soft-deleted: restaurants via
is_active, menu items via is_available. Public listings only show active
restaurants and available items. Mutations go through the ownership rule
in app.services.authorization, with menu items inheriting the owner of
their parent restaurant.

Updates are partial: only fields present (and not null) in the request
overwrite stored values.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import InvalidOwner, MenuItemNotFound, RestaurantNotFound
from app.core.security import TokenClaims
from app.models import MenuItem, Restaurant, User, UserRole
from app.services.authorization import ensure_authorized

logger = logging.getLogger(__name__)

RESTAURANT_UPDATABLE_FIELDS = (
    "name",
    "description",
    "cuisine_type",
    "address",
    "phone_number",
    "is_active",
)
MENU_ITEM_UPDATABLE_FIELDS = ("name", "description", "price", "category", "is_available")


def apply_partial_update(entity: Any, changes: dict[str, Any], fields: tuple[str, ...]) -> list[str]:
    """Copy non-null values for the allowed fields onto entity; return what changed."""
    applied = []
    for field in fields:
        value = changes.get(field)
        if value is not None:
            setattr(entity, field, value)
            applied.append(field)
    return applied


class CatalogService:
    """Restaurant and menu item management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # RESTAURANTS
    # =========================================================================

    async def list_restaurants(self) -> list[Restaurant]:
        result = await self.db.execute(
            select(Restaurant)
            .where(Restaurant.is_active.is_(True))
            .options(selectinload(Restaurant.menu_items))
        )
        return list(result.scalars().all())

    async def get_restaurant(self, restaurant_id: int) -> Restaurant:
        """Active restaurant with its menu, or RestaurantNotFound."""
        result = await self.db.execute(
            select(Restaurant)
            .where(Restaurant.id == restaurant_id, Restaurant.is_active.is_(True))
            .options(selectinload(Restaurant.menu_items))
        )
        restaurant = result.scalar_one_or_none()
        if restaurant is None:
            raise RestaurantNotFound()
        return restaurant

    async def _find_restaurant(self, restaurant_id: int) -> Restaurant:
        # Regardless of is_active: owners may still edit or reactivate
        restaurant = await self.db.get(Restaurant, restaurant_id)
        if restaurant is None:
            raise RestaurantNotFound()
        return restaurant

    async def create_restaurant(self, data: dict[str, Any]) -> Restaurant:
        """
        Create an active restaurant.

        Raises:
            InvalidOwner: owner_id is unknown or not a RestaurantOwner
        """
        owner = await self.db.get(User, data["owner_id"])
        if owner is None or owner.role != UserRole.RESTAURANT_OWNER.value:
            raise InvalidOwner()

        restaurant = Restaurant(
            name=data["name"],
            owner_id=owner.id,
            description=data.get("description") or "",
            cuisine_type=data.get("cuisine_type") or "",
            address=data.get("address") or "",
            phone_number=data.get("phone_number") or "",
            is_active=True,
        )
        self.db.add(restaurant)
        await self.db.commit()
        await self.db.refresh(restaurant, attribute_names=["created_at", "menu_items"])

        logger.info(f"Restaurant #{restaurant.id} '{restaurant.name}' created for owner #{owner.id}")
        return restaurant

    async def update_restaurant(
        self,
        restaurant_id: int,
        changes: dict[str, Any],
        requester: TokenClaims,
    ) -> Restaurant:
        restaurant = await self._find_restaurant(restaurant_id)
        ensure_authorized(
            requester.role, requester.user_id, restaurant.owner_id, "update this restaurant"
        )

        applied = apply_partial_update(restaurant, changes, RESTAURANT_UPDATABLE_FIELDS)
        restaurant.updated_at = datetime.now(timezone.utc)
        await self.db.commit()

        logger.info(f"Restaurant #{restaurant.id} updated: {applied}")
        return restaurant

    async def deactivate_restaurant(self, restaurant_id: int) -> Restaurant:
        """Soft delete. The row stays for historical orders."""
        restaurant = await self._find_restaurant(restaurant_id)
        restaurant.is_active = False
        restaurant.updated_at = datetime.now(timezone.utc)
        await self.db.commit()

        logger.info(f"Restaurant #{restaurant.id} deactivated")
        return restaurant

    # =========================================================================
    # MENU ITEMS
    # =========================================================================

    async def list_menu_items(self, restaurant_id: int) -> list[MenuItem]:
        result = await self.db.execute(
            select(MenuItem)
            .where(MenuItem.restaurant_id == restaurant_id, MenuItem.is_available.is_(True))
            .order_by(MenuItem.id)
        )
        return list(result.scalars().all())

    async def _find_menu_item(
        self,
        restaurant_id: int,
        item_id: int,
        available_only: bool = False,
    ) -> MenuItem:
        # Scoped to the path-declared restaurant: an item of another
        # restaurant is reported as missing
        query = select(MenuItem).where(
            MenuItem.id == item_id,
            MenuItem.restaurant_id == restaurant_id,
        )
        if available_only:
            query = query.where(MenuItem.is_available.is_(True))
        result = await self.db.execute(query)
        item = result.scalar_one_or_none()
        if item is None:
            raise MenuItemNotFound()
        return item

    async def get_menu_item(self, restaurant_id: int, item_id: int) -> MenuItem:
        return await self._find_menu_item(restaurant_id, item_id, available_only=True)

    async def _ensure_menu_owner(
        self,
        restaurant_id: int,
        requester: TokenClaims,
        action: str,
    ) -> Optional[Restaurant]:
        restaurant = await self.db.get(Restaurant, restaurant_id)
        owner_id = restaurant.owner_id if restaurant is not None else None
        ensure_authorized(requester.role, requester.user_id, owner_id, action)
        return restaurant

    async def create_menu_item(
        self,
        restaurant_id: int,
        data: dict[str, Any],
        requester: TokenClaims,
    ) -> MenuItem:
        restaurant = await self._find_restaurant(restaurant_id)
        ensure_authorized(
            requester.role, requester.user_id, restaurant.owner_id, "add items to this menu"
        )

        item = MenuItem(
            restaurant_id=restaurant.id,
            name=data["name"],
            description=data.get("description") or "",
            price=data["price"],
            category=data.get("category") or "",
            is_available=True,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Menu item #{item.id} '{item.name}' added to restaurant #{restaurant.id}")
        return item

    async def update_menu_item(
        self,
        restaurant_id: int,
        item_id: int,
        changes: dict[str, Any],
        requester: TokenClaims,
    ) -> MenuItem:
        item = await self._find_menu_item(restaurant_id, item_id)
        await self._ensure_menu_owner(restaurant_id, requester, "update this menu item")

        applied = apply_partial_update(item, changes, MENU_ITEM_UPDATABLE_FIELDS)
        await self.db.commit()

        logger.info(f"Menu item #{item.id} updated: {applied}")
        return item

    async def deactivate_menu_item(
        self,
        restaurant_id: int,
        item_id: int,
        requester: TokenClaims,
    ) -> MenuItem:
        """Soft delete. Past order lines keep referencing the row."""
        item = await self._find_menu_item(restaurant_id, item_id)
        await self._ensure_menu_owner(restaurant_id, requester, "remove this menu item")

        item.is_available = False
        await self.db.commit()

        logger.info(f"Menu item #{item.id} deactivated")
        return item
