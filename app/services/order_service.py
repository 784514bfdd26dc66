"""
Order Service

Places orders against the catalog and tracks their status.

Create-order workflow:
    1. customer must exist                     -> CustomerNotFound
    2. restaurant must exist                   -> RestaurantNotFound
    3. every line's menu item must belong to
       that restaurant, quantity must be > 0   -> MenuItemNotFound / InvalidQuantity
    4. total = sum(price * quantity), each line keeps the price it was
       ordered at (later menu edits do not touch it)
    5. at least one line                       -> EmptyOrder
       total within Numeric(10, 2)             -> ValidationError
    6. order and lines are committed together, status Pending, Unpaid

All validation runs before anything is added to the session, so a
rejected order leaves no rows behind.

Status is free text with no transition graph: Admin may set any value on
any order, a RestaurantOwner only on orders of restaurants it owns.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import (
    CustomerNotFound,
    EmptyOrder,
    ForbiddenError,
    InvalidQuantity,
    MenuItemNotFound,
    OrderNotFound,
    RestaurantNotFound,
    ValidationError,
)
from app.core.security import TokenClaims
from app.models import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Restaurant,
    User,
    UserRole,
)
from app.services.authorization import ensure_authorized

logger = logging.getLogger(__name__)

# Largest amount a Numeric(10, 2) column holds
MAX_ORDER_TOTAL = Decimal("99999999.99")


class OrderLine(Protocol):
    menu_item_id: int
    quantity: int


class OrderService:
    """Order placement, lookup and status tracking."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _order_query(self):
        return select(Order).options(
            selectinload(Order.items).selectinload(OrderItem.menu_item)
        )

    async def _load_order(self, order_id: int) -> Order:
        result = await self.db.execute(
            self._order_query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFound()
        return order

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create_order(
        self,
        customer_id: int,
        restaurant_id: int,
        delivery_address: str,
        lines: Iterable[OrderLine],
    ) -> Order:
        """
        Validate and persist an order with its lines.

        Returns:
            The committed order, re-read with its lines and menu items

        Raises:
            CustomerNotFound, RestaurantNotFound, MenuItemNotFound:
                Unknown customer, restaurant, or item outside the restaurant
            InvalidQuantity: A line with quantity <= 0
            EmptyOrder: No lines
            ValidationError: Total too large to store
        """
        if await self.db.get(User, customer_id) is None:
            raise CustomerNotFound()

        if await self.db.get(Restaurant, restaurant_id) is None:
            raise RestaurantNotFound()

        order_items = []
        total = Decimal("0.00")
        for line in lines:
            result = await self.db.execute(
                select(MenuItem).where(
                    MenuItem.id == line.menu_item_id,
                    MenuItem.restaurant_id == restaurant_id,
                )
            )
            menu_item = result.scalar_one_or_none()
            if menu_item is None:
                raise MenuItemNotFound.in_restaurant(line.menu_item_id)

            if line.quantity <= 0:
                raise InvalidQuantity(menu_item.name)

            unit_price = Decimal(menu_item.price)
            total += unit_price * line.quantity
            order_items.append(
                OrderItem(
                    menu_item_id=menu_item.id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                )
            )

        if not order_items:
            raise EmptyOrder()

        if total > MAX_ORDER_TOTAL:
            raise ValidationError(f"Order total exceeds the maximum of {MAX_ORDER_TOTAL}")

        order = Order(
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            delivery_address=delivery_address or "",
            total_amount=total,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.UNPAID.value,
            items=order_items,
        )

        try:
            self.db.add(order)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"Error creating order for customer #{customer_id}")
            raise

        logger.info(
            f"Order #{order.id} created: customer #{customer_id}, "
            f"restaurant #{restaurant_id}, {len(order_items)} lines, total {total}"
        )
        return await self._load_order(order.id)

    # =========================================================================
    # READ
    # =========================================================================

    async def get_order(self, order_id: int, requester: TokenClaims) -> Order:
        """Admin or the ordering customer only."""
        order = await self._load_order(order_id)
        ensure_authorized(requester.role, requester.user_id, order.customer_id, "view this order")
        return order

    async def get_customer_orders(self, customer_id: int, requester: TokenClaims) -> list[Order]:
        ensure_authorized(
            requester.role, requester.user_id, customer_id, "view this customer's orders"
        )
        result = await self.db.execute(
            self._order_query()
            .where(Order.customer_id == customer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    async def list_orders(self) -> list[Order]:
        result = await self.db.execute(
            self._order_query().order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    # =========================================================================
    # STATUS
    # =========================================================================

    async def update_status(self, order_id: int, status: str, requester: TokenClaims) -> Order:
        """
        Set an order's status to any value.

        Raises:
            OrderNotFound: Unknown order
            ForbiddenError: Requester is neither Admin nor the owner of the
                order's restaurant
        """
        order = await self.db.get(Order, order_id)
        if order is None:
            raise OrderNotFound()

        if requester.role == UserRole.RESTAURANT_OWNER.value:
            result = await self.db.execute(
                select(Restaurant.owner_id).where(
                    Restaurant.id == order.restaurant_id,
                    Restaurant.owner_id == requester.user_id,
                )
            )
            ensure_authorized(
                requester.role, requester.user_id, result.scalar_one_or_none(), "update this order"
            )
        elif requester.role != UserRole.ADMIN.value:
            raise ForbiddenError("You are not allowed to update this order")

        previous = order.status
        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        await self.db.commit()

        logger.info(f"Order #{order.id} status: {previous} -> {status}")
        return order
