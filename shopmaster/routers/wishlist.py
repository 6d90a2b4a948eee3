from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from shopmaster.auth import current_user
from shopmaster.models import User
from shopmaster.schemas import ProductOut, WishlistItemCreate, WishlistItemOut
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


def wishlist_item_out(item, product) -> WishlistItemOut:
    out = WishlistItemOut.model_validate(item)
    out.product = ProductOut.model_validate(product) if product is not None else None
    return out


@router.get("", response_model=List[WishlistItemOut])
def get_wishlist(user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    return [wishlist_item_out(item, storage.get_product(item.product_id))
            for item in storage.get_wishlist_items(user.id)]


@router.post("", response_model=WishlistItemOut, status_code=201)
def add_to_wishlist(body: WishlistItemCreate, user: User = Depends(current_user),
                    storage: Storage = Depends(get_storage)):
    product = storage.get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if any(item.product_id == body.product_id for item in storage.get_wishlist_items(user.id)):
        raise HTTPException(status_code=400, detail="Item already in wishlist")
    item = storage.add_to_wishlist({"user_id": user.id, "product_id": body.product_id})
    return wishlist_item_out(item, product)


@router.delete("/{item_id}", status_code=204)
def remove_from_wishlist(item_id: int, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    if not storage.remove_from_wishlist(item_id, user.id):
        raise HTTPException(status_code=404, detail="Wishlist item not found")
    return Response(status_code=204)
