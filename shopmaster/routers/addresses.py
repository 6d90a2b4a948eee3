from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from shopmaster.auth import current_user
from shopmaster.models import User
from shopmaster.schemas import AddressCreate, AddressOut, AddressUpdate
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


@router.get("", response_model=List[AddressOut])
def list_addresses(user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    return storage.get_user_addresses(user.id)


@router.post("", response_model=AddressOut, status_code=201)
def create_address(body: AddressCreate, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    return storage.create_address({**body.model_dump(), "user_id": user.id})


@router.put("/{address_id}", response_model=AddressOut)
def update_address(address_id: int, body: AddressUpdate,
                   user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    address = storage.update_address(address_id, user.id, body.model_dump(exclude_unset=True))
    if address is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return address


@router.delete("/{address_id}", status_code=204)
def delete_address(address_id: int, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    if not storage.delete_address(address_id, user.id):
        raise HTTPException(status_code=404, detail="Address not found")
    return Response(status_code=204)
