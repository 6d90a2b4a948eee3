"""
SQLAlchemy storage backend
"""
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopmaster.errors import ConflictError
from shopmaster.models import (
    Address,
    CartItem,
    Category,
    Coupon,
    Order,
    OrderItem,
    Product,
    Review,
    User,
    WishlistItem,
)
from shopmaster.storage.base import Storage


class SqlStorage(Storage):
    """Storage backed by a SQLAlchemy session (Postgres in production, SQLite in tests)"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, *instances):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error: {e.orig}")
            raise ConflictError("Record conflicts with existing data") from e
        for instance in instances:
            self.db.refresh(instance)

    def _add(self, instance):
        self.db.add(instance)
        self._commit(instance)
        return instance

    def _update(self, instance, updates: Dict[str, Any]):
        if instance is None:
            return None
        for key, value in updates.items():
            setattr(instance, key, value)
        self._commit(instance)
        return instance

    def _delete(self, instance) -> bool:
        if instance is None:
            return False
        self.db.delete(instance)
        self._commit()
        return True

    # --------------------- Users ---------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def create_user(self, data: Dict[str, Any]) -> User:
        user = self._add(User(**data))
        logger.info(f"Created user {user.id} ({user.username})")
        return user

    def update_user(self, user_id: int, updates: Dict[str, Any]) -> Optional[User]:
        return self._update(self.get_user(user_id), updates)

    def count_users(self) -> int:
        return self.db.query(User).count()

    # --------------------- Categories ---------------------

    def get_categories(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.id).all()

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    def create_category(self, data: Dict[str, Any]) -> Category:
        return self._add(Category(**data))

    def update_category(self, category_id: int, updates: Dict[str, Any]) -> Optional[Category]:
        return self._update(self.get_category(category_id), updates)

    def delete_category(self, category_id: int) -> bool:
        return self._delete(self.get_category(category_id))

    # --------------------- Products ---------------------

    def get_products(self, category_id: Optional[int] = None, search: Optional[str] = None,
                     include_inactive: bool = False) -> List[Product]:
        query = self.db.query(Product)
        if not include_inactive:
            query = query.filter(Product.is_active.is_(True))
        if category_id:
            query = query.filter(Product.category_id == category_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        return query.order_by(Product.id).all()

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.sku == sku).first()

    def create_product(self, data: Dict[str, Any]) -> Product:
        product = self._add(Product(**data))
        logger.info(f"Created product {product.id} ({product.sku})")
        return product

    def update_product(self, product_id: int, updates: Dict[str, Any]) -> Optional[Product]:
        return self._update(self.get_product(product_id), updates)

    def delete_product(self, product_id: int) -> bool:
        deleted = self._delete(self.get_product(product_id))
        if deleted:
            logger.info(f"Deleted product {product_id}")
        return deleted

    def count_products(self) -> int:
        return self.db.query(Product).count()

    # --------------------- Reviews ---------------------

    def get_product_reviews(self, product_id: int) -> List[Review]:
        return (
            self.db.query(Review)
            .filter(Review.product_id == product_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def get_review(self, review_id: int) -> Optional[Review]:
        return self.db.get(Review, review_id)

    def create_review(self, data: Dict[str, Any]) -> Review:
        return self._add(Review(**data))

    def delete_review(self, review_id: int, user_id: int) -> bool:
        review = self.get_review(review_id)
        if review is None or review.user_id != user_id:
            return False
        return self._delete(review)

    # --------------------- Orders ---------------------

    def _orders_query(self, status: Optional[str]):
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc())

    def get_orders(self, status: Optional[str] = None) -> List[Order]:
        return self._orders_query(status).all()

    def get_user_orders(self, user_id: int, status: Optional[str] = None) -> List[Order]:
        return self._orders_query(status).filter(Order.user_id == user_id).all()

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def create_order(self, data: Dict[str, Any]) -> Order:
        order = self._add(Order(**data))
        logger.info(f"Created order {order.id} for user {order.user_id}, total {order.total}")
        return order

    def update_order_status(self, order_id: int, status: str) -> Optional[Order]:
        return self._update(self.get_order(order_id), {"status": status})

    def get_order_items(self, order_id: int) -> List[OrderItem]:
        return self.db.query(OrderItem).filter(OrderItem.order_id == order_id).order_by(OrderItem.id).all()

    def create_order_item(self, data: Dict[str, Any]) -> OrderItem:
        return self._add(OrderItem(**data))

    # --------------------- Cart ---------------------

    def get_cart_items(self, user_id: int) -> List[CartItem]:
        return self.db.query(CartItem).filter(CartItem.user_id == user_id).order_by(CartItem.id).all()

    def get_cart_item(self, item_id: int) -> Optional[CartItem]:
        return self.db.get(CartItem, item_id)

    def add_to_cart(self, data: Dict[str, Any]) -> CartItem:
        existing = (
            self.db.query(CartItem)
            .filter(CartItem.user_id == data["user_id"], CartItem.product_id == data["product_id"])
            .first()
        )
        if existing is not None:
            return self._update(existing, {"quantity": existing.quantity + data.get("quantity", 1)})
        return self._add(CartItem(**data))

    def update_cart_item(self, item_id: int, user_id: int, quantity: int) -> Optional[CartItem]:
        item = self.get_cart_item(item_id)
        if item is None or item.user_id != user_id:
            return None
        return self._update(item, {"quantity": quantity})

    def remove_from_cart(self, item_id: int, user_id: int) -> bool:
        item = self.get_cart_item(item_id)
        if item is None or item.user_id != user_id:
            return False
        return self._delete(item)

    def clear_cart(self, user_id: int) -> None:
        self.db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session=False)
        self._commit()

    # --------------------- Wishlist ---------------------

    def get_wishlist_items(self, user_id: int) -> List[WishlistItem]:
        return self.db.query(WishlistItem).filter(WishlistItem.user_id == user_id).order_by(WishlistItem.id).all()

    def add_to_wishlist(self, data: Dict[str, Any]) -> WishlistItem:
        return self._add(WishlistItem(**data))

    def remove_from_wishlist(self, item_id: int, user_id: int) -> bool:
        item = self.db.get(WishlistItem, item_id)
        if item is None or item.user_id != user_id:
            return False
        return self._delete(item)

    # --------------------- Coupons ---------------------

    def get_coupons(self) -> List[Coupon]:
        return self.db.query(Coupon).order_by(Coupon.id).all()

    def get_coupon(self, coupon_id: int) -> Optional[Coupon]:
        return self.db.get(Coupon, coupon_id)

    def get_coupon_by_code(self, code: str, active_only: bool = True) -> Optional[Coupon]:
        query = self.db.query(Coupon).filter(func.upper(Coupon.code) == code.strip().upper())
        if active_only:
            query = query.filter(Coupon.is_active.is_(True))
        return query.first()

    def create_coupon(self, data: Dict[str, Any]) -> Coupon:
        return self._add(Coupon(**data))

    def update_coupon(self, coupon_id: int, updates: Dict[str, Any]) -> Optional[Coupon]:
        return self._update(self.get_coupon(coupon_id), updates)

    def delete_coupon(self, coupon_id: int) -> bool:
        return self._delete(self.get_coupon(coupon_id))

    # --------------------- Addresses ---------------------

    def _clear_default(self, user_id: int, keep_id: Optional[int] = None):
        query = self.db.query(Address).filter(Address.user_id == user_id, Address.is_default.is_(True))
        if keep_id is not None:
            query = query.filter(Address.id != keep_id)
        query.update({Address.is_default: False}, synchronize_session="fetch")

    def get_user_addresses(self, user_id: int) -> List[Address]:
        return self.db.query(Address).filter(Address.user_id == user_id).order_by(Address.id).all()

    def get_address(self, address_id: int) -> Optional[Address]:
        return self.db.get(Address, address_id)

    def create_address(self, data: Dict[str, Any]) -> Address:
        if data.get("is_default"):
            self._clear_default(data["user_id"])
        return self._add(Address(**data))

    def update_address(self, address_id: int, user_id: int, updates: Dict[str, Any]) -> Optional[Address]:
        address = self.get_address(address_id)
        if address is None or address.user_id != user_id:
            return None
        if updates.get("is_default"):
            self._clear_default(user_id, keep_id=address_id)
        return self._update(address, updates)

    def delete_address(self, address_id: int, user_id: int) -> bool:
        address = self.get_address(address_id)
        if address is None or address.user_id != user_id:
            return False
        return self._delete(address)
