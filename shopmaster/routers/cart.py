"""
Shopping cart endpoints
"""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from shopmaster.auth import current_user
from shopmaster.checkout import cart_lines, price_cart
from shopmaster.models import User
from shopmaster.schemas import CartItemCreate, CartItemOut, CartItemUpdate, PriceSummaryOut, ProductOut
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api/cart", tags=["cart"])


def cart_item_out(item, product) -> CartItemOut:
    out = CartItemOut.model_validate(item)
    out.product = ProductOut.model_validate(product) if product is not None else None
    return out


@router.get("", response_model=List[CartItemOut])
def get_cart(user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    return [cart_item_out(item, product) for item, product in cart_lines(storage, user.id)]


@router.get("/summary", response_model=PriceSummaryOut)
def cart_summary(request: Request, coupon_code: Optional[str] = None,
                 user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    _, summary = price_cart(storage, user.id, request.app.state.settings, coupon_code)
    return PriceSummaryOut(**asdict(summary))


@router.post("", response_model=CartItemOut, status_code=201)
def add_to_cart(body: CartItemCreate, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    product = storage.get_product(body.product_id)
    if product is None or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")
    item = storage.add_to_cart({"user_id": user.id, "product_id": body.product_id, "quantity": body.quantity})
    return cart_item_out(item, product)


@router.put("/{item_id}", response_model=CartItemOut)
def update_cart_item(item_id: int, body: CartItemUpdate,
                     user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    item = storage.update_cart_item(item_id, user.id, body.quantity)
    if item is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return cart_item_out(item, storage.get_product(item.product_id))


# registered before /{item_id} so "clear" is not parsed as an id
@router.delete("/clear", status_code=204)
def clear_cart(user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    storage.clear_cart(user.id)
    return Response(status_code=204)


@router.delete("/{item_id}", status_code=204)
def remove_from_cart(item_id: int, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    if not storage.remove_from_cart(item_id, user.id):
        raise HTTPException(status_code=404, detail="Cart item not found")
    return Response(status_code=204)
