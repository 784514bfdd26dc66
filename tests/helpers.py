"""Helpers shared by the API tests."""

from decimal import Decimal
from typing import Any, Optional, Sequence

import httpx
from sqlalchemy import func, select

from app.models import MenuItem, Restaurant

PASSWORD = "secret-123"


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_user(
    client: httpx.AsyncClient,
    username: str,
    role: str = "Customer",
    email: Optional[str] = None,
) -> dict[str, Any]:
    """Register through the API and return {id, email, token}."""
    email = email or f"{username}@example.com"
    response = await client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": PASSWORD, "role": role},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    return {"id": data["user"]["id"], "email": email, "token": data["token"]}


async def add_restaurant(
    session_maker,
    owner_id: int,
    name: str = "Luigi's",
    menu: Sequence[tuple[str, str]] = (),
    is_active: bool = True,
) -> dict[str, Any]:
    """Insert a restaurant with (name, price) menu items directly."""
    async with session_maker() as session:
        restaurant = Restaurant(
            name=name,
            owner_id=owner_id,
            description="Family kitchen",
            cuisine_type="Italian",
            address="1 Main St",
            phone_number="555-0100",
            is_active=is_active,
        )
        restaurant.menu_items = [
            MenuItem(name=item_name, price=Decimal(price), category="Mains", description="")
            for item_name, price in menu
        ]
        session.add(restaurant)
        await session.commit()
        return {
            "id": restaurant.id,
            "menu": {item.name: item.id for item in restaurant.menu_items},
        }


async def count_rows(session_maker, model) -> int:
    async with session_maker() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def get_row(session_maker, model, row_id: int):
    async with session_maker() as session:
        return await session.get(model, row_id)
