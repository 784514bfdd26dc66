"""
Order Flow Simulation Script

Drives a running API through a full order lifecycle: registers an admin,
a restaurant owner and customers, builds a restaurant and its menu,
places orders concurrently and walks them through status updates.

Run from project root (with the server up): python scripts/simulate.py

Version: 1.0.0
"""

import argparse
import asyncio
import random
import time
import uuid
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8000"
TOTAL_CUSTOMERS = 5
PASSWORD = "simulate-123"

MENU = [
    {"name": "Margherita", "price": 12.50, "category": "Pizza"},
    {"name": "Pepperoni", "price": 14.00, "category": "Pizza"},
    {"name": "Caesar Salad", "price": 8.75, "category": "Salad"},
    {"name": "Garlic Bread", "price": 4.25, "category": "Sides"},
    {"name": "Tiramisu", "price": 6.50, "category": "Dessert"},
]
STATUS_FLOW = ["Confirmed", "Preparing", "OutForDelivery", "Delivered"]
STREETS = ["Main St", "Broadway", "5th Avenue", "Park Ave", "Madison Ave"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register(
    client: httpx.AsyncClient,
    username: str,
    role: str,
) -> dict[str, Any]:
    """Register a fresh account and return {id, token}."""
    email = f"{username}-{uuid.uuid4().hex[:8]}@example.com"
    response = await client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": PASSWORD, "role": role},
    )
    response.raise_for_status()
    data = response.json()
    return {"id": data["user"]["id"], "token": data["token"]}


async def place_order(
    client: httpx.AsyncClient,
    customer: dict[str, Any],
    restaurant_id: int,
    menu_ids: list[int],
) -> dict[str, Any]:
    """Place a random order for one customer."""
    lines = [
        {"menu_item_id": item_id, "quantity": random.randint(1, 3)}
        for item_id in random.sample(menu_ids, k=random.randint(1, len(menu_ids)))
    ]
    start_time = time.time()
    response = await client.post(
        "/api/orders",
        json={
            "customer_id": customer["id"],
            "restaurant_id": restaurant_id,
            "delivery_address": f"{random.randint(1, 999)} {random.choice(STREETS)}",
            "items": lines,
        },
        headers=auth_headers(customer["token"]),
    )
    elapsed = round(time.time() - start_time, 3)

    if response.status_code == 201:
        data = response.json()
        return {"success": True, "order_id": data["id"], "total": data["total_amount"], "time": elapsed}
    return {"success": False, "error": response.text[:100], "time": elapsed}


async def run_simulation(base_url: str, customers: int) -> None:
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        print("=" * 60)
        print(f"Simulating against {base_url}")
        print("=" * 60)

        admin = await register(client, "admin", "Admin")
        owner = await register(client, "owner", "RestaurantOwner")
        print(f"Admin #{admin['id']}, owner #{owner['id']} registered")

        response = await client.post(
            "/api/restaurants",
            json={
                "name": "Simulation Pizzeria",
                "owner_id": owner["id"],
                "description": "Created by simulate.py",
                "cuisine_type": "Italian",
                "address": "1 Simulation Way",
                "phone_number": "555-0100",
            },
            headers=auth_headers(owner["token"]),
        )
        response.raise_for_status()
        restaurant_id = response.json()["id"]
        print(f"Restaurant #{restaurant_id} created")

        menu_ids = []
        for item in MENU:
            response = await client.post(
                f"/api/restaurants/{restaurant_id}/menuitems",
                json=item,
                headers=auth_headers(owner["token"]),
            )
            response.raise_for_status()
            menu_ids.append(response.json()["id"])
        print(f"{len(menu_ids)} menu items created")

        customer_accounts = await asyncio.gather(
            *(register(client, f"customer{i}", "Customer") for i in range(customers))
        )
        results = await asyncio.gather(
            *(place_order(client, c, restaurant_id, menu_ids) for c in customer_accounts)
        )

        placed = [r for r in results if r["success"]]
        for result in results:
            if result["success"]:
                print(f"  Order #{result['order_id']}: ${result['total']:.2f} in {result['time']}s")
            else:
                print(f"  Failed: {result['error']}")

        for result in placed:
            for status in STATUS_FLOW:
                response = await client.put(
                    f"/api/orders/{result['order_id']}/status",
                    json={"status": status},
                    headers=auth_headers(owner["token"]),
                )
                response.raise_for_status()

        response = await client.get("/api/orders", headers=auth_headers(admin["token"]))
        response.raise_for_status()

        print("\n" + "=" * 60)
        print(f"Orders placed: {len(placed)}/{len(results)}")
        print(f"Revenue: ${sum(r['total'] for r in placed):.2f}")
        print(f"Orders visible to admin: {len(response.json())}")
        print("=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run an end-to-end order simulation")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--customers", type=int, default=TOTAL_CUSTOMERS, help="Number of customers")
    args = parser.parse_args()

    asyncio.run(run_simulation(args.base_url, args.customers))


if __name__ == "__main__":
    main()
