"""
SQLAlchemy Database Models

Five tables back the food delivery platform:
- users: customers, restaurant owners and admins
- restaurants: owned by a RestaurantOwner, soft-deleted via is_active
- menu_items: belong to a restaurant, soft-deleted via is_available
- orders: placed by a customer at one restaurant
- order_items: order lines with the unit price captured at order time

Version: 1.0.0
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    DateTime,
    Text,
    Boolean,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class UserRole(str, enum.Enum):
    """The fixed set of account roles."""
    CUSTOMER = "Customer"
    RESTAURANT_OWNER = "RestaurantOwner"
    ADMIN = "Admin"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]


class OrderStatus(str, enum.Enum):
    """
    Common order status values.

    Status is stored as free text: any authorized actor may set any value,
    these are only the ones the platform uses by convention.
    """
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PREPARING = "Preparing"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, enum.Enum):
    """Payment status values."""
    UNPAID = "Unpaid"
    PAID = "Paid"
    REFUNDED = "Refunded"


class User(Base):
    """Registered account. Never physically deleted."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    email = Column(String(150), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    restaurants = relationship("Restaurant", back_populates="owner")

    def __repr__(self):
        return f"<User #{self.id} - {self.email} - {self.role}>"


class Restaurant(Base):
    """A restaurant owned by exactly one RestaurantOwner."""
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    description = Column(String(500), nullable=False, default="")
    cuisine_type = Column(String(100), nullable=False, default="")
    address = Column(String(255), nullable=False, default="")
    phone_number = Column(String(30), nullable=False, default="")
    rating = Column(Numeric(3, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    owner = relationship("User", back_populates="restaurants")
    menu_items = relationship(
        "MenuItem",
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="MenuItem.id",
    )

    def __repr__(self):
        return f"<Restaurant #{self.id} - {self.name} - active={self.is_active}>"


class MenuItem(Base):
    """A dish on a restaurant's menu."""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(200), nullable=False)
    description = Column(String(500), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False, default="")
    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    restaurant = relationship("Restaurant", back_populates="menu_items")

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class Order(Base):
    """
    A customer's order at one restaurant.

    total_amount is computed once at creation from the line snapshots and
    is not recomputed afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(50), nullable=False, default=OrderStatus.PENDING.value)
    payment_status = Column(String(50), nullable=False, default=PaymentStatus.UNPAID.value)
    delivery_address = Column(String(500), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    customer = relationship("User")
    restaurant = relationship("Restaurant")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - customer={self.customer_id} - {self.status}>"


class OrderItem(Base):
    """One order line. unit_price is the menu price at order time."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    menu_item_id = Column(
        Integer,
        ForeignKey("menu_items.id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")

    def __repr__(self):
        return f"<OrderItem order={self.order_id} item={self.menu_item_id} x{self.quantity}>"
