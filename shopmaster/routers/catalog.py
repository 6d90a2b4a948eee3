"""
Category, product and review endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from shopmaster.auth import admin_user, current_user
from shopmaster.models import User
from shopmaster.schemas import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    ReviewCreate,
    ReviewOut,
    sale_price_error,
)
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api", tags=["catalog"])


# --------------------- Categories ---------------------

@router.get("/categories", response_model=List[CategoryOut])
def list_categories(storage: Storage = Depends(get_storage)):
    return storage.get_categories()


@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(body: CategoryCreate, _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    if storage.get_category_by_name(body.name):
        raise HTTPException(status_code=400, detail="Category already exists")
    return storage.create_category(body.model_dump())


@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, body: CategoryUpdate,
                    _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    updates = body.model_dump(exclude_unset=True)
    if updates.get("name"):
        existing = storage.get_category_by_name(updates["name"])
        if existing is not None and existing.id != category_id:
            raise HTTPException(status_code=400, detail="Category already exists")
    category = storage.update_category(category_id, updates)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    if not storage.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return Response(status_code=204)


# --------------------- Products ---------------------

def _check_category(storage: Storage, category_id: Optional[int]):
    if category_id is not None and storage.get_category(category_id) is None:
        raise HTTPException(status_code=404, detail="Category not found")


@router.get("/products", response_model=List[ProductOut])
def list_products(category_id: Optional[int] = None, search: Optional[str] = None,
                  storage: Storage = Depends(get_storage)):
    return storage.get_products(category_id=category_id, search=search)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, storage: Storage = Depends(get_storage)):
    product = storage.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(body: ProductCreate, _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    if storage.get_product_by_sku(body.sku):
        raise HTTPException(status_code=400, detail="SKU already exists")
    _check_category(storage, body.category_id)
    return storage.create_product(body.model_dump())


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, body: ProductUpdate,
                   _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    updates = body.model_dump(exclude_unset=True)
    product = storage.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    error = sale_price_error(updates.get("price", product.price),
                             updates.get("sale_price", product.sale_price))
    if error:
        raise HTTPException(status_code=400, detail=error)
    if updates.get("sku"):
        existing = storage.get_product_by_sku(updates["sku"])
        if existing is not None and existing.id != product_id:
            raise HTTPException(status_code=400, detail="SKU already exists")
    _check_category(storage, updates.get("category_id"))
    return storage.update_product(product_id, updates)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    if not storage.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)


# --------------------- Reviews ---------------------

@router.get("/products/{product_id}/reviews", response_model=List[ReviewOut])
def list_reviews(product_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_product_reviews(product_id)


@router.post("/products/{product_id}/reviews", response_model=ReviewOut, status_code=201)
def create_review(product_id: int, body: ReviewCreate,
                  user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    if storage.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return storage.create_review({**body.model_dump(), "product_id": product_id, "user_id": user.id})


@router.delete("/reviews/{review_id}", status_code=204)
def delete_review(review_id: int, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    review = storage.get_review(review_id)
    # admins may remove any review, everyone else only their own
    owner_id = review.user_id if review is not None and user.is_admin else user.id
    if not storage.delete_review(review_id, owner_id):
        raise HTTPException(status_code=404, detail="Review not found")
    return Response(status_code=204)
