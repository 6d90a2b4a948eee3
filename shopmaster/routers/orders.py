"""
Order history, checkout and admin order management
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from shopmaster.auth import admin_user, current_user
from shopmaster.checkout import place_order
from shopmaster.models import User
from shopmaster.schemas import (
    OrderCreate,
    OrderDetailOut,
    OrderItemCreate,
    OrderItemOut,
    OrderOut,
    OrderStatus,
    OrderStatusUpdate,
)
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api", tags=["orders"])


def order_detail(order, items) -> OrderDetailOut:
    out = OrderDetailOut.model_validate(order)
    out.items = [OrderItemOut.model_validate(i) for i in items]
    return out


@router.get("/orders", response_model=List[OrderOut])
def list_orders(status: Optional[OrderStatus] = None,
                user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    if user.is_admin:
        return storage.get_orders(status)
    return storage.get_user_orders(user.id, status)


@router.get("/orders/{order_id}", response_model=OrderDetailOut)
def get_order(order_id: int, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    order = storage.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")
    return order_detail(order, storage.get_order_items(order_id))


@router.post("/orders", response_model=OrderDetailOut, status_code=201)
def create_order(body: OrderCreate, request: Request,
                 user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    order, items = place_order(
        storage,
        user,
        request.app.state.settings,
        shipping_address_id=body.shipping_address_id,
        shipping_address=body.shipping_address,
        coupon_code=body.coupon_code,
    )
    return order_detail(order, items)


@router.put("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: int, body: OrderStatusUpdate,
                        _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    order = storage.update_order_status(order_id, body.status)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/order-items", response_model=OrderItemOut, status_code=201)
def create_order_item(body: OrderItemCreate, user: User = Depends(current_user),
                      storage: Storage = Depends(get_storage)):
    order = storage.get_order(body.order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")
    product = storage.get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return storage.create_order_item({**body.model_dump(), "product_name": product.name})
