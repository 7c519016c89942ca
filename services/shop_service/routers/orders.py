"""Order endpoints: place, list, view, advance and cancel."""

from fastapi import APIRouter, Depends, status
from libs.db.gateway import Database
from libs.db.session import get_database
from services.shop_service.domain import Order, User
from services.shop_service.routers._helpers import (
    get_current_account,
    parse_id,
    require_admin,
)
from services.shop_service.schemas import OrderCreate
from services.shop_service.services import order_service

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_order(
    body: OrderCreate,
    account: User = Depends(get_current_account),
    db: Database = Depends(get_database),
):
    """Place an order for the calling user, reserving stock for every line."""
    return await order_service.place_order(
        db,
        user_id=account.user_id,
        lines=[(line.product_id, line.quantity) for line in body.items],
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        payment_method=body.payment_method,
        notes=body.notes,
    )


@router.get("", response_model=list[Order])
@router.get("/", response_model=list[Order], include_in_schema=False)
async def list_orders(
    account: User = Depends(get_current_account),
    db: Database = Depends(get_database),
):
    """The caller's orders, or every order for admins."""
    if account.is_admin:
        return await order_service.all_orders(db)
    return await order_service.orders_for_user(db, account.user_id)


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    account: User = Depends(get_current_account),
    db: Database = Depends(get_database),
):
    return await order_service.get_order(db, parse_id(order_id, "order"), user=account)


@router.post("/{order_id}/advance", response_model=Order)
async def advance_order(
    order_id: str,
    admin: User = Depends(require_admin),
    db: Database = Depends(get_database),
):
    """Move an order to its next status (admin only)."""
    return await order_service.advance_order(db, parse_id(order_id, "order"))


@router.post("/{order_id}/cancel", response_model=Order)
async def cancel_order(
    order_id: str,
    account: User = Depends(get_current_account),
    db: Database = Depends(get_database),
):
    """Cancel an order and release its reserved stock."""
    return await order_service.cancel_order(
        db, parse_id(order_id, "order"), user=account
    )
