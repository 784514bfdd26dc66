"""
Pydantic Schemas for Request/Response Validation

Request bodies for auth, catalog and order endpoints, and the response
shapes built from persisted entities. Money is Decimal internally and a
JSON number on the wire.

Version: 1.0.0
"""

from decimal import Decimal
from typing import Annotated, Optional, List
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator

from app.models import UserRole


Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

# Largest value the INTEGER id and quantity columns hold
MAX_INT = 2**31 - 1


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(BaseModel):
    """Request schema for registering a new account."""
    username: str = Field(..., min_length=1, max_length=100, examples=["jane"])
    email: EmailStr = Field(..., max_length=150, examples=["jane@example.com"])
    password: str = Field(..., min_length=6, max_length=72)
    role: str = Field(default=UserRole.CUSTOMER.value, examples=["Customer"])

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        # bcrypt only accepts 72 bytes of input
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: int
    username: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Response after a successful register or login."""
    message: str
    user: UserSummary
    token: str


# =============================================================================
# CATALOG
# =============================================================================

class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, examples=["Margherita"])
    description: str = Field(default="", max_length=500)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[12.5])
    category: str = Field(default="", max_length=100, examples=["Pizza"])


class MenuItemUpdate(BaseModel):
    """Partial update: omitted or null fields keep their stored values."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, max_length=100)
    is_available: Optional[bool] = None


class MenuItemResponse(BaseModel):
    id: int
    name: str
    description: str
    price: Money
    category: str

    model_config = ConfigDict(from_attributes=True)


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, examples=["Luigi's"])
    owner_id: int = Field(..., le=MAX_INT, examples=[2])
    description: str = Field(default="", max_length=500)
    cuisine_type: str = Field(default="", max_length=100, examples=["Italian"])
    address: str = Field(default="", max_length=255)
    phone_number: str = Field(default="", max_length=30)


class RestaurantUpdate(BaseModel):
    """Partial update: omitted or null fields keep their stored values."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    cuisine_type: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=30)
    is_active: Optional[bool] = None


class RestaurantResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    description: str
    cuisine_type: str
    address: str
    phone_number: str
    rating: Money
    menu_items: List[MenuItemResponse] = Field(default_factory=list)


# =============================================================================
# ORDERS
# =============================================================================

class OrderLineCreate(BaseModel):
    """Single line in an order request. Quantity > 0 is checked by the service."""
    menu_item_id: int = Field(..., le=MAX_INT, examples=[1])
    quantity: int = Field(..., le=MAX_INT, examples=[2])


class OrderCreate(BaseModel):
    customer_id: int = Field(..., le=MAX_INT, examples=[3])
    restaurant_id: int = Field(..., le=MAX_INT, examples=[1])
    delivery_address: str = Field(default="", max_length=500, examples=["350 Fifth Avenue"])
    items: List[OrderLineCreate] = Field(default_factory=list)


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=50, examples=["Preparing"])


class OrderItemResponse(BaseModel):
    menu_item_id: int
    menu_item_name: Optional[str] = None
    quantity: int
    unit_price: Money


class OrderResponse(BaseModel):
    id: int
    customer_id: int
    restaurant_id: int
    total_amount: Money
    status: str
    payment_status: str
    delivery_address: str
    order_date: Optional[datetime]
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse]


class OrderStatusResponse(BaseModel):
    message: str
    order_id: int
    new_status: str


# =============================================================================
# GENERIC
# =============================================================================

class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    environment: str
    database: str
    timestamp: datetime
