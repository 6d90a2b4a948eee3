"""
In-memory storage backend

Keeps model instances in dicts keyed by id. Records are never attached to a
SQLAlchemy session, so defaults that the database would fill in are set here.
"""
import threading
from datetime import datetime, timezone
from itertools import count
from typing import Any, Dict, List, Optional

from loguru import logger

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
from shopmaster.errors import ConflictError
from shopmaster.storage.base import Storage

DEFAULTS = {
    User: {"is_admin": False},
    Category: {"description": None},
    Product: {"description": "", "sale_price": None, "category_id": None, "stock": 0,
              "image_url": None, "is_active": True},
    Review: {"comment": None},
    Order: {"status": "pending", "discount": 0, "tax": 0, "shipping": 0, "coupon_code": None},
    OrderItem: {"product_name": ""},
    CartItem: {"quantity": 1},
    WishlistItem: {},
    Coupon: {"description": None, "min_order_amount": None, "max_discount_amount": None,
             "is_active": True, "expires_at": None},
    Address: {"type": "shipping", "country": "United States", "is_default": False},
}


# column groups that must be unique within a table, mirroring the SQL constraints
UNIQUE = {
    User: [("username",), ("email",)],
    Category: [("name",)],
    Product: [("sku",)],
    Coupon: [("code",)],
    CartItem: [("user_id", "product_id")],
    WishlistItem: [("user_id", "product_id")],
}


class _Table:
    def __init__(self, model, lock):
        self.model = model
        self.rows: Dict[int, Any] = {}
        self._ids = count(1)
        self._lock = lock

    def _check_unique(self, values: Dict[str, Any], row_id: Optional[int] = None):
        for columns in UNIQUE.get(self.model, ()):
            key = tuple(values.get(c) for c in columns)
            for row in self.rows.values():
                if row.id != row_id and tuple(getattr(row, c) for c in columns) == key:
                    logger.warning(f"Duplicate {self.model.__tablename__}.{'+'.join(columns)}: {key}")
                    raise ConflictError("Record conflicts with existing data")

    def insert(self, data: Dict[str, Any]):
        with self._lock:
            values = {**DEFAULTS[self.model], **data}
            self._check_unique(values)
            row = self.model(id=next(self._ids), **values)
            if hasattr(self.model, "created_at"):
                row.created_at = datetime.now(timezone.utc)
            self.rows[row.id] = row
            return row

    def update(self, row, updates: Dict[str, Any]):
        if row is None:
            return None
        with self._lock:
            columns = {c for group in UNIQUE.get(self.model, ()) for c in group}
            merged = {c: getattr(row, c) for c in columns}
            merged.update((k, v) for k, v in updates.items() if k in columns)
            self._check_unique(merged, row.id)
            for key, value in updates.items():
                setattr(row, key, value)
            return row

    def values(self) -> List[Any]:
        with self._lock:
            return list(self.rows.values())

    def where(self, **criteria) -> List[Any]:
        return [row for row in self.values()
                if all(getattr(row, k) == v for k, v in criteria.items())]


def _newest_first(rows):
    return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)


class MemoryStorage(Storage):
    """Process-local storage, used for demos and tests"""

    def __init__(self):
        self._lock = threading.RLock()
        self.users = _Table(User, self._lock)
        self.categories = _Table(Category, self._lock)
        self.products = _Table(Product, self._lock)
        self.reviews = _Table(Review, self._lock)
        self.orders = _Table(Order, self._lock)
        self.order_items = _Table(OrderItem, self._lock)
        self.cart_items = _Table(CartItem, self._lock)
        self.wishlist_items = _Table(WishlistItem, self._lock)
        self.coupons = _Table(Coupon, self._lock)
        self.addresses = _Table(Address, self._lock)

    # --------------------- Users ---------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.rows.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next(iter(self.users.where(username=username)), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email.lower() == email.lower()), None)

    def create_user(self, data: Dict[str, Any]) -> User:
        with self._lock:
            user = self.users.insert(data)
        logger.info(f"Created user {user.id} ({user.username})")
        return user

    def update_user(self, user_id: int, updates: Dict[str, Any]) -> Optional[User]:
        with self._lock:
            return self.users.update(self.get_user(user_id), updates)

    def count_users(self) -> int:
        return len(self.users.rows)

    # --------------------- Categories ---------------------

    def get_categories(self) -> List[Category]:
        return self.categories.values()

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.categories.rows.get(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        return next(iter(self.categories.where(name=name)), None)

    def create_category(self, data: Dict[str, Any]) -> Category:
        with self._lock:
            return self.categories.insert(data)

    def update_category(self, category_id: int, updates: Dict[str, Any]) -> Optional[Category]:
        with self._lock:
            return self.categories.update(self.get_category(category_id), updates)

    def delete_category(self, category_id: int) -> bool:
        with self._lock:
            if self.categories.rows.pop(category_id, None) is None:
                return False
            for product in self.products.where(category_id=category_id):
                product.category_id = None
            return True

    # --------------------- Products ---------------------

    def get_products(self, category_id: Optional[int] = None, search: Optional[str] = None,
                     include_inactive: bool = False) -> List[Product]:
        products = self.products.values()
        if not include_inactive:
            products = [p for p in products if p.is_active]
        if category_id:
            products = [p for p in products if p.category_id == category_id]
        if search:
            needle = search.lower()
            products = [p for p in products
                        if needle in p.name.lower() or needle in (p.description or "").lower()]
        return products

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.products.rows.get(product_id)

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        return next(iter(self.products.where(sku=sku)), None)

    def create_product(self, data: Dict[str, Any]) -> Product:
        with self._lock:
            product = self.products.insert(data)
        logger.info(f"Created product {product.id} ({product.sku})")
        return product

    def update_product(self, product_id: int, updates: Dict[str, Any]) -> Optional[Product]:
        with self._lock:
            return self.products.update(self.get_product(product_id), updates)

    def delete_product(self, product_id: int) -> bool:
        with self._lock:
            if self.products.rows.pop(product_id, None) is None:
                return False
            for table in (self.reviews, self.cart_items, self.wishlist_items):
                for row in table.where(product_id=product_id):
                    del table.rows[row.id]
            for item in self.order_items.where(product_id=product_id):
                item.product_id = None
        logger.info(f"Deleted product {product_id}")
        return True

    # --------------------- Reviews ---------------------

    def get_product_reviews(self, product_id: int) -> List[Review]:
        return _newest_first(self.reviews.where(product_id=product_id))

    def get_review(self, review_id: int) -> Optional[Review]:
        return self.reviews.rows.get(review_id)

    def create_review(self, data: Dict[str, Any]) -> Review:
        with self._lock:
            return self.reviews.insert(data)

    def delete_review(self, review_id: int, user_id: int) -> bool:
        with self._lock:
            review = self.get_review(review_id)
            if review is None or review.user_id != user_id:
                return False
            del self.reviews.rows[review_id]
            return True

    # --------------------- Orders ---------------------

    def get_orders(self, status: Optional[str] = None) -> List[Order]:
        orders = self.orders.values()
        if status:
            orders = [o for o in orders if o.status == status]
        return _newest_first(orders)

    def get_user_orders(self, user_id: int, status: Optional[str] = None) -> List[Order]:
        return [o for o in self.get_orders(status) if o.user_id == user_id]

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.orders.rows.get(order_id)

    def create_order(self, data: Dict[str, Any]) -> Order:
        with self._lock:
            order = self.orders.insert(data)
        logger.info(f"Created order {order.id} for user {order.user_id}, total {order.total}")
        return order

    def update_order_status(self, order_id: int, status: str) -> Optional[Order]:
        with self._lock:
            return self.orders.update(self.get_order(order_id), {"status": status})

    def get_order_items(self, order_id: int) -> List[OrderItem]:
        return self.order_items.where(order_id=order_id)

    def create_order_item(self, data: Dict[str, Any]) -> OrderItem:
        with self._lock:
            return self.order_items.insert(data)

    # --------------------- Cart ---------------------

    def get_cart_items(self, user_id: int) -> List[CartItem]:
        return self.cart_items.where(user_id=user_id)

    def get_cart_item(self, item_id: int) -> Optional[CartItem]:
        return self.cart_items.rows.get(item_id)

    def add_to_cart(self, data: Dict[str, Any]) -> CartItem:
        with self._lock:
            existing = next(iter(self.cart_items.where(user_id=data["user_id"],
                                                       product_id=data["product_id"])), None)
            if existing is not None:
                existing.quantity += data.get("quantity", 1)
                return existing
            return self.cart_items.insert(data)

    def update_cart_item(self, item_id: int, user_id: int, quantity: int) -> Optional[CartItem]:
        with self._lock:
            item = self.get_cart_item(item_id)
            if item is None or item.user_id != user_id:
                return None
            item.quantity = quantity
            return item

    def remove_from_cart(self, item_id: int, user_id: int) -> bool:
        with self._lock:
            item = self.get_cart_item(item_id)
            if item is None or item.user_id != user_id:
                return False
            del self.cart_items.rows[item_id]
            return True

    def clear_cart(self, user_id: int) -> None:
        with self._lock:
            for item in self.cart_items.where(user_id=user_id):
                del self.cart_items.rows[item.id]

    # --------------------- Wishlist ---------------------

    def get_wishlist_items(self, user_id: int) -> List[WishlistItem]:
        return self.wishlist_items.where(user_id=user_id)

    def add_to_wishlist(self, data: Dict[str, Any]) -> WishlistItem:
        with self._lock:
            return self.wishlist_items.insert(data)

    def remove_from_wishlist(self, item_id: int, user_id: int) -> bool:
        with self._lock:
            item = self.wishlist_items.rows.get(item_id)
            if item is None or item.user_id != user_id:
                return False
            del self.wishlist_items.rows[item_id]
            return True

    # --------------------- Coupons ---------------------

    def get_coupons(self) -> List[Coupon]:
        return self.coupons.values()

    def get_coupon(self, coupon_id: int) -> Optional[Coupon]:
        return self.coupons.rows.get(coupon_id)

    def get_coupon_by_code(self, code: str, active_only: bool = True) -> Optional[Coupon]:
        code = code.strip().upper()
        return next((c for c in self.coupons.values()
                     if c.code.upper() == code and (c.is_active or not active_only)), None)

    def create_coupon(self, data: Dict[str, Any]) -> Coupon:
        with self._lock:
            return self.coupons.insert(data)

    def update_coupon(self, coupon_id: int, updates: Dict[str, Any]) -> Optional[Coupon]:
        with self._lock:
            return self.coupons.update(self.get_coupon(coupon_id), updates)

    def delete_coupon(self, coupon_id: int) -> bool:
        with self._lock:
            return self.coupons.rows.pop(coupon_id, None) is not None

    # --------------------- Addresses ---------------------

    def _clear_default(self, user_id: int):
        for address in self.addresses.where(user_id=user_id, is_default=True):
            address.is_default = False

    def get_user_addresses(self, user_id: int) -> List[Address]:
        return self.addresses.where(user_id=user_id)

    def get_address(self, address_id: int) -> Optional[Address]:
        return self.addresses.rows.get(address_id)

    def create_address(self, data: Dict[str, Any]) -> Address:
        with self._lock:
            if data.get("is_default"):
                self._clear_default(data["user_id"])
            return self.addresses.insert(data)

    def update_address(self, address_id: int, user_id: int, updates: Dict[str, Any]) -> Optional[Address]:
        with self._lock:
            address = self.get_address(address_id)
            if address is None or address.user_id != user_id:
                return None
            if updates.get("is_default"):
                self._clear_default(user_id)
            return self.addresses.update(address, updates)

    def delete_address(self, address_id: int, user_id: int) -> bool:
        with self._lock:
            address = self.get_address(address_id)
            if address is None or address.user_id != user_id:
                return False
            del self.addresses.rows[address_id]
            return True
