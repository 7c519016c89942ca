"""Integration tests for /api/orders and /api/inventory."""

from decimal import Decimal

import pytest
from services.shop_service.dao import InventoryDAO
from tests.conftest import bearer, register
from tests.factories import stocked_product

# ---------------------------------------------------------------------------
# Placement and listing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_place_order(client, db, alice, auth_headers):
    product_id = await stocked_product(db, stock=4, price=Decimal("2.50"))

    response = await client.post(
        "/api/orders",
        json={
            "items": [{"productId": product_id, "quantity": 3}],
            "shippingAddress": "1 Main St",
            "paymentMethod": "CARD",
        },
        headers=auth_headers,
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["userId"] == alice.user_id
    assert data["orderStatus"] == "PENDING"
    assert data["totalAmount"] == 7.5
    assert data["totalItemCount"] == 3
    assert data["items"][0]["unitPrice"] == 2.5
    assert data["paymentMethod"] == "CARD"
    assert (await InventoryDAO(db).find_by_product(product_id)).reserved_quantity == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_place_order_without_items(client, auth_headers):
    response = await client.post("/api/orders", json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Order must contain at least one item"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_place_order_beyond_stock(client, db, auth_headers):
    product_id = await stocked_product(db, stock=1)
    response = await client.post(
        "/api/orders",
        json={"items": [{"productId": product_id, "quantity": 2}]},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": f"Insufficient stock for product {product_id}"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customers_see_own_orders_admins_see_all(
    client, app, db, auth_headers, admin_headers
):
    bob = await register(db, username="bob", email="bob@example.com")
    product_id = await stocked_product(db, stock=10)
    line = {"items": [{"productId": product_id, "quantity": 1}]}

    await client.post("/api/orders", json=line, headers=auth_headers)
    await client.post("/api/orders", json=line, headers=bearer(app, bob.username))

    mine = await client.get("/api/orders", headers=auth_headers)
    assert len(mine.json()) == 1
    everything = await client.get("/api/orders/", headers=admin_headers)
    assert len(everything.json()) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_order_of_another_customer(client, app, db, auth_headers):
    bob = await register(db, username="bob", email="bob@example.com")
    product_id = await stocked_product(db, stock=10)
    created = await client.post(
        "/api/orders",
        json={"items": [{"productId": product_id, "quantity": 1}]},
        headers=bearer(app, bob.username),
    )
    order_id = created.json()["orderId"]

    response = await client.get(f"/api/orders/{order_id}", headers=auth_headers)
    assert response.status_code == 403

    response = await client.get("/api/orders/x1", headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid order ID"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_token_for_deleted_account(client, app):
    response = await client.get("/api/orders", headers=bearer(app, "ghost"))
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_advance_and_cancel(client, db, auth_headers, admin_headers):
    product_id = await stocked_product(db, stock=5)
    created = await client.post(
        "/api/orders",
        json={"items": [{"productId": product_id, "quantity": 2}]},
        headers=auth_headers,
    )
    order_id = created.json()["orderId"]

    denied = await client.post(f"/api/orders/{order_id}/advance", headers=auth_headers)
    assert denied.status_code == 403

    advanced = await client.post(
        f"/api/orders/{order_id}/advance", headers=admin_headers
    )
    assert advanced.status_code == 200, advanced.text
    assert advanced.json()["orderStatus"] == "CONFIRMED"

    cancelled = await client.post(
        f"/api/orders/{order_id}/cancel", headers=auth_headers
    )
    assert cancelled.status_code == 200, cancelled.text
    assert cancelled.json()["orderStatus"] == "CANCELLED"
    assert (await InventoryDAO(db).find_by_product(product_id)).reserved_quantity == 0

    again = await client.post(f"/api/orders/{order_id}/advance", headers=admin_headers)
    assert again.status_code == 400
    assert again.json() == {"error": "Order is CANCELLED and cannot advance"}


# ---------------------------------------------------------------------------
# GET /api/inventory/low-stock
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_low_stock_report(client, db, auth_headers, admin_headers):
    low = await stocked_product(db, stock=3)
    await stocked_product(db, stock=100)

    denied = await client.get("/api/inventory/low-stock", headers=auth_headers)
    assert denied.status_code == 403

    response = await client.get("/api/inventory/low-stock", headers=admin_headers)
    assert response.status_code == 200
    assert [row["productId"] for row in response.json()] == [low]
