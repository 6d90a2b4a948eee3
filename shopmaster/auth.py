"""
Session-cookie authentication

The signed session cookie carries the logged-in user's id. Route
dependencies resolve it to a User and enforce login or admin access.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from shopmaster.models import User
from shopmaster.schemas import LoginRequest, UserCreate, UserOut, UserUpdate
from shopmaster.storage import Storage, get_storage
from shopmaster.utils.security import hash_password, verify_password

SESSION_USER_KEY = "user_id"

router = APIRouter(prefix="/api", tags=["auth"])


def login_session(request: Request, user: User):
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def optional_user(request: Request, storage: Storage = Depends(get_storage)) -> Optional[User]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = storage.get_user(user_id)
    if user is None:
        # account is gone, drop the stale session
        request.session.clear()
    return user


def current_user(user: Optional[User] = Depends(optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def admin_user(user: Optional[User] = Depends(optional_user)) -> User:
    if user is None or not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


@router.post("/register", response_model=UserOut, status_code=201)
def register(body: UserCreate, request: Request, storage: Storage = Depends(get_storage)):
    if storage.get_user_by_username(body.username):
        raise HTTPException(status_code=400, detail="Username already exists")
    if storage.get_user_by_email(body.email):
        raise HTTPException(status_code=400, detail="Email already exists")

    data = body.model_dump()
    data["password"] = hash_password(body.password)
    data["is_admin"] = False
    user = storage.create_user(data)
    login_session(request, user)
    return user


@router.post("/login", response_model=UserOut)
def login(body: LoginRequest, request: Request, storage: Storage = Depends(get_storage)):
    user = storage.get_user_by_username(body.username)
    if user is None or not verify_password(body.password, user.password):
        logger.info(f"Failed login for {body.username!r}")
        raise HTTPException(status_code=401, detail="Invalid username or password")
    login_session(request, user)
    return user


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"status": "ok"}


@router.get("/user", response_model=UserOut)
def get_me(user: User = Depends(current_user)):
    return user


@router.patch("/user", response_model=UserOut)
def update_me(body: UserUpdate, user: User = Depends(current_user), storage: Storage = Depends(get_storage)):
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in updates:
        owner = storage.get_user_by_email(updates["email"])
        if owner is not None and owner.id != user.id:
            raise HTTPException(status_code=400, detail="Email already exists")
    return storage.update_user(user.id, updates)
