from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from shopmaster.auth import admin_user, current_user
from shopmaster.models import User
from shopmaster.pricing import is_expired
from shopmaster.schemas import CouponCreate, CouponOut, CouponUpdate, discount_error
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api/coupons", tags=["coupons"])


@router.get("", response_model=List[CouponOut])
def list_coupons(_: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    return storage.get_coupons()


@router.get("/{code}/validate", response_model=CouponOut)
def validate_coupon(code: str, _: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    coupon = storage.get_coupon_by_code(code)
    if coupon is None:
        raise HTTPException(status_code=404, detail="Coupon not found")
    if is_expired(coupon):
        raise HTTPException(status_code=400, detail="Coupon expired")
    return coupon


@router.post("", response_model=CouponOut, status_code=201)
def create_coupon(body: CouponCreate, _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    if storage.get_coupon_by_code(body.code, active_only=False):
        raise HTTPException(status_code=400, detail="Coupon code already exists")
    return storage.create_coupon(body.model_dump())


@router.put("/{coupon_id}", response_model=CouponOut)
def update_coupon(coupon_id: int, body: CouponUpdate,
                  _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    updates = body.model_dump(exclude_unset=True)
    coupon = storage.get_coupon(coupon_id)
    if coupon is None:
        raise HTTPException(status_code=404, detail="Coupon not found")
    error = discount_error(updates.get("discount_type", coupon.discount_type),
                           updates.get("discount_value", coupon.discount_value))
    if error:
        raise HTTPException(status_code=400, detail=error)
    if updates.get("code"):
        existing = storage.get_coupon_by_code(updates["code"], active_only=False)
        if existing is not None and existing.id != coupon_id:
            raise HTTPException(status_code=400, detail="Coupon code already exists")
    return storage.update_coupon(coupon_id, updates)


@router.delete("/{coupon_id}", status_code=204)
def delete_coupon(coupon_id: int, _: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    if not storage.delete_coupon(coupon_id):
        raise HTTPException(status_code=404, detail="Coupon not found")
    return Response(status_code=204)
