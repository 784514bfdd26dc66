"""
FastAPI Application Entry Point

Food Delivery API - users, restaurants, menus and orders.

Endpoints:
    - POST /api/auth/register, POST /api/auth/login: Accounts and tokens
    - /api/restaurants: Restaurant catalog (soft delete)
    - /api/restaurants/{restaurant_id}/menuitems: Menu items (soft delete)
    - /api/orders: Order placement, lookup and status tracking
    - GET /health: System health check

Version: 1.0.0
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Path, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

# Internal imports
from app.core.config import get_settings, setup_logging
from app.core.exceptions import AppError
from app.core.security import TokenClaims, TokenIssuer
from app.database import get_db, init_db, dispose_db
from app.dependencies import (
    get_auth_service,
    get_catalog_service,
    get_current_user,
    get_order_service,
    get_token_issuer,
    require_admin,
    require_customer_or_admin,
    require_owner_or_admin,
)
from app.models import Order, Restaurant, User
from app.schemas import (
    MAX_INT,
    AuthResponse,
    HealthResponse,
    LoginRequest,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MessageResponse,
    OrderCreate,
    OrderItemResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
    RegisterRequest,
    RestaurantCreate,
    RestaurantResponse,
    RestaurantUpdate,
    UserSummary,
)
from app.services.auth_service import AuthService
from app.services.catalog_service import CatalogService
from app.services.order_service import OrderService

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Path ids beyond the INTEGER column range are rejected as bad requests
RecordId = Annotated[int, Path(le=MAX_INT)]


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # Fail fast: a process that cannot sign tokens must not start
    missing = settings.validate_production_config()
    if missing:
        logger.error(f"Missing required configuration: {missing}")
    issuer = get_token_issuer()
    logger.info(f"Token issuer ready (iss={issuer.issuer}, aud={issuer.audience})")

    await init_db()
    logger.info("Database initialized")

    logger.info("=" * 60)
    logger.info("Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await dispose_db()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="API for a food delivery platform: accounts, restaurants, menus and orders.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def user_summary(user: User) -> UserSummary:
    return UserSummary.model_validate(user)


def restaurant_to_response(restaurant: Restaurant) -> RestaurantResponse:
    """Shape a restaurant with its available menu items."""
    return RestaurantResponse(
        id=restaurant.id,
        owner_id=restaurant.owner_id,
        name=restaurant.name,
        description=restaurant.description,
        cuisine_type=restaurant.cuisine_type,
        address=restaurant.address,
        phone_number=restaurant.phone_number,
        rating=restaurant.rating,
        menu_items=[
            MenuItemResponse.model_validate(item)
            for item in restaurant.menu_items
            if item.is_available
        ],
    )


def order_to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer_id=order.customer_id,
        restaurant_id=order.restaurant_id,
        total_amount=order.total_amount,
        status=order.status,
        payment_status=order.payment_status,
        delivery_address=order.delivery_address,
        order_date=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemResponse(
                menu_item_id=item.menu_item_id,
                menu_item_name=item.menu_item.name if item.menu_item else None,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items
        ],
    )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, Any]:
    """API root with navigation links."""
    return {
        "message": f"{settings.app_name} is running!",
        "status": "active",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": {
            "auth": "/api/auth",
            "restaurants": "/api/restaurants",
            "orders": "/api/orders",
            "documentation": "/docs",
            "health": "/health",
        },
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Verify the database is reachable."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        service=settings.app_name,
        environment=settings.env_mode.value,
        database=db_status,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================

@app.post(
    "/api/auth/register",
    response_model=AuthResponse,
    responses={400: {"model": MessageResponse}},
    tags=["Auth"],
)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Any:
    """Create an account and return a session token."""
    result = await auth_service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    if not result.success:
        return JSONResponse(status_code=400, content={"message": result.message})

    return AuthResponse(
        message=result.message,
        user=user_summary(result.user),
        token=issuer.issue_token(result.user),
    )


@app.post(
    "/api/auth/login",
    response_model=AuthResponse,
    responses={401: {"model": MessageResponse}},
    tags=["Auth"],
)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Any:
    """Exchange email and password for a session token."""
    user = await auth_service.validate_credentials(payload.email, payload.password)
    if user is None:
        logger.info(f"Failed login for {payload.email}")
        return JSONResponse(status_code=401, content={"message": "Invalid email or password"})

    logger.info(f"User #{user.id} logged in")
    return AuthResponse(
        message="Login successful",
        user=user_summary(user),
        token=issuer.issue_token(user),
    )


# =============================================================================
# RESTAURANT ENDPOINTS
# =============================================================================

@app.get("/api/restaurants", response_model=list[RestaurantResponse], tags=["Restaurants"])
async def list_restaurants(
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[RestaurantResponse]:
    """Active restaurants with their available menu items."""
    restaurants = await catalog.list_restaurants()
    return [restaurant_to_response(r) for r in restaurants]


@app.get("/api/restaurants/{restaurant_id}", response_model=RestaurantResponse, tags=["Restaurants"])
async def get_restaurant(
    restaurant_id: RecordId,
    catalog: CatalogService = Depends(get_catalog_service),
) -> RestaurantResponse:
    restaurant = await catalog.get_restaurant(restaurant_id)
    return restaurant_to_response(restaurant)


@app.post(
    "/api/restaurants",
    response_model=RestaurantResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Restaurants"],
)
async def create_restaurant(
    payload: RestaurantCreate,
    current_user: TokenClaims = Depends(require_owner_or_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> RestaurantResponse:
    restaurant = await catalog.create_restaurant(payload.model_dump())
    return restaurant_to_response(restaurant)


@app.put("/api/restaurants/{restaurant_id}", response_model=MessageResponse, tags=["Restaurants"])
async def update_restaurant(
    restaurant_id: RecordId,
    payload: RestaurantUpdate,
    current_user: TokenClaims = Depends(require_owner_or_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    await catalog.update_restaurant(
        restaurant_id, payload.model_dump(exclude_unset=True), current_user
    )
    return MessageResponse(message="Restaurant updated successfully")


@app.delete("/api/restaurants/{restaurant_id}", response_model=MessageResponse, tags=["Restaurants"])
async def delete_restaurant(
    restaurant_id: RecordId,
    current_user: TokenClaims = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    """Soft delete: the restaurant is deactivated, not removed."""
    await catalog.deactivate_restaurant(restaurant_id)
    return MessageResponse(message="Restaurant deactivated successfully")


# =============================================================================
# MENU ITEM ENDPOINTS
# =============================================================================

@app.get(
    "/api/restaurants/{restaurant_id}/menuitems",
    response_model=list[MenuItemResponse],
    tags=["Menu Items"],
)
async def list_menu_items(
    restaurant_id: RecordId,
    current_user: TokenClaims = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[MenuItemResponse]:
    items = await catalog.list_menu_items(restaurant_id)
    return [MenuItemResponse.model_validate(item) for item in items]


@app.get(
    "/api/restaurants/{restaurant_id}/menuitems/{item_id}",
    response_model=MenuItemResponse,
    tags=["Menu Items"],
)
async def get_menu_item(
    restaurant_id: RecordId,
    item_id: RecordId,
    current_user: TokenClaims = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MenuItemResponse:
    item = await catalog.get_menu_item(restaurant_id, item_id)
    return MenuItemResponse.model_validate(item)


@app.post(
    "/api/restaurants/{restaurant_id}/menuitems",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Menu Items"],
)
async def create_menu_item(
    restaurant_id: RecordId,
    payload: MenuItemCreate,
    current_user: TokenClaims = Depends(require_owner_or_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MenuItemResponse:
    item = await catalog.create_menu_item(restaurant_id, payload.model_dump(), current_user)
    return MenuItemResponse.model_validate(item)


@app.put(
    "/api/restaurants/{restaurant_id}/menuitems/{item_id}",
    response_model=MessageResponse,
    tags=["Menu Items"],
)
async def update_menu_item(
    restaurant_id: RecordId,
    item_id: RecordId,
    payload: MenuItemUpdate,
    current_user: TokenClaims = Depends(require_owner_or_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    await catalog.update_menu_item(
        restaurant_id, item_id, payload.model_dump(exclude_unset=True), current_user
    )
    return MessageResponse(message="Menu item updated successfully")


@app.delete(
    "/api/restaurants/{restaurant_id}/menuitems/{item_id}",
    response_model=MessageResponse,
    tags=["Menu Items"],
)
async def delete_menu_item(
    restaurant_id: RecordId,
    item_id: RecordId,
    current_user: TokenClaims = Depends(require_owner_or_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    """Soft delete: the item is marked unavailable."""
    await catalog.deactivate_menu_item(restaurant_id, item_id, current_user)
    return MessageResponse(message="Menu item deactivated successfully")


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
    tags=["Orders"],
    summary="Place Order",
)
async def create_order(
    payload: OrderCreate,
    current_user: TokenClaims = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    logger.info(
        f"User #{current_user.user_id} placing order for customer #{payload.customer_id} "
        f"at restaurant #{payload.restaurant_id}"
    )
    order = await orders.create_order(
        customer_id=payload.customer_id,
        restaurant_id=payload.restaurant_id,
        delivery_address=payload.delivery_address,
        lines=payload.items,
    )
    return order_to_response(order)


@app.get(
    "/api/orders/customer/{customer_id}",
    response_model=list[OrderResponse],
    tags=["Orders"],
)
async def get_customer_orders(
    customer_id: RecordId,
    current_user: TokenClaims = Depends(require_customer_or_admin),
    orders: OrderService = Depends(get_order_service),
) -> list[OrderResponse]:
    customer_orders = await orders.get_customer_orders(customer_id, current_user)
    return [order_to_response(o) for o in customer_orders]


@app.get("/api/orders/{order_id}", response_model=OrderResponse, tags=["Orders"])
async def get_order(
    order_id: RecordId,
    current_user: TokenClaims = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await orders.get_order(order_id, current_user)
    return order_to_response(order)


@app.get("/api/orders", response_model=list[OrderResponse], tags=["Orders"])
async def list_orders(
    current_user: TokenClaims = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
) -> list[OrderResponse]:
    all_orders = await orders.list_orders()
    return [order_to_response(o) for o in all_orders]


@app.put("/api/orders/{order_id}/status", response_model=OrderStatusResponse, tags=["Orders"])
async def update_order_status(
    order_id: RecordId,
    payload: OrderStatusUpdate,
    current_user: TokenClaims = Depends(require_owner_or_admin),
    orders: OrderService = Depends(get_order_service),
) -> OrderStatusResponse:
    order = await orders.update_status(order_id, payload.status, current_user)
    return OrderStatusResponse(
        message="Order status updated successfully",
        order_id=order.id,
        new_status=order.status,
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Domain errors carry their own status code."""
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are reported as 400 with the first violation."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "message": (
                str(exc)
                if settings.debug and not settings.is_production
                else "An unexpected error occurred"
            ),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
