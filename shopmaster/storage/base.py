from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

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


class Storage(ABC):
    """
    CRUD contract shared by every storage backend

    Lookups return None when the record does not exist, deletes return
    whether something was removed. Methods that take a ``user_id`` next to
    a record id only act on records owned by that user.
    """

    # --------------------- Users ---------------------

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def create_user(self, data: Dict[str, Any]) -> User:
        pass

    @abstractmethod
    def update_user(self, user_id: int, updates: Dict[str, Any]) -> Optional[User]:
        pass

    @abstractmethod
    def count_users(self) -> int:
        pass

    # --------------------- Categories ---------------------

    @abstractmethod
    def get_categories(self) -> List[Category]:
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        pass

    @abstractmethod
    def create_category(self, data: Dict[str, Any]) -> Category:
        pass

    @abstractmethod
    def update_category(self, category_id: int, updates: Dict[str, Any]) -> Optional[Category]:
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """Delete a category; its products are kept without a category"""
        pass

    # --------------------- Products ---------------------

    @abstractmethod
    def get_products(self, category_id: Optional[int] = None, search: Optional[str] = None,
                     include_inactive: bool = False) -> List[Product]:
        """
        List products

        Args:
            category_id: only products of this category
            search: case-insensitive substring of name or description
            include_inactive: also return products with is_active=False
        """
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        pass

    @abstractmethod
    def create_product(self, data: Dict[str, Any]) -> Product:
        pass

    @abstractmethod
    def update_product(self, product_id: int, updates: Dict[str, Any]) -> Optional[Product]:
        pass

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        """Delete a product with its reviews, cart lines and wishlist entries"""
        pass

    # --------------------- Reviews ---------------------

    @abstractmethod
    def get_product_reviews(self, product_id: int) -> List[Review]:
        pass

    @abstractmethod
    def get_review(self, review_id: int) -> Optional[Review]:
        pass

    @abstractmethod
    def create_review(self, data: Dict[str, Any]) -> Review:
        pass

    @abstractmethod
    def delete_review(self, review_id: int, user_id: int) -> bool:
        pass

    # --------------------- Orders ---------------------

    @abstractmethod
    def get_orders(self, status: Optional[str] = None) -> List[Order]:
        """All orders, newest first"""
        pass

    @abstractmethod
    def get_user_orders(self, user_id: int, status: Optional[str] = None) -> List[Order]:
        pass

    @abstractmethod
    def get_order(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    def create_order(self, data: Dict[str, Any]) -> Order:
        pass

    @abstractmethod
    def update_order_status(self, order_id: int, status: str) -> Optional[Order]:
        pass

    @abstractmethod
    def get_order_items(self, order_id: int) -> List[OrderItem]:
        pass

    @abstractmethod
    def create_order_item(self, data: Dict[str, Any]) -> OrderItem:
        pass

    # --------------------- Cart ---------------------

    @abstractmethod
    def get_cart_items(self, user_id: int) -> List[CartItem]:
        pass

    @abstractmethod
    def get_cart_item(self, item_id: int) -> Optional[CartItem]:
        pass

    @abstractmethod
    def add_to_cart(self, data: Dict[str, Any]) -> CartItem:
        """Add a line, or grow the quantity of the user's line for the same product"""
        pass

    @abstractmethod
    def update_cart_item(self, item_id: int, user_id: int, quantity: int) -> Optional[CartItem]:
        pass

    @abstractmethod
    def remove_from_cart(self, item_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    def clear_cart(self, user_id: int) -> None:
        pass

    # --------------------- Wishlist ---------------------

    @abstractmethod
    def get_wishlist_items(self, user_id: int) -> List[WishlistItem]:
        pass

    @abstractmethod
    def add_to_wishlist(self, data: Dict[str, Any]) -> WishlistItem:
        pass

    @abstractmethod
    def remove_from_wishlist(self, item_id: int, user_id: int) -> bool:
        pass

    # --------------------- Coupons ---------------------

    @abstractmethod
    def get_coupons(self) -> List[Coupon]:
        pass

    @abstractmethod
    def get_coupon(self, coupon_id: int) -> Optional[Coupon]:
        pass

    @abstractmethod
    def get_coupon_by_code(self, code: str, active_only: bool = True) -> Optional[Coupon]:
        """Case-insensitive code lookup"""
        pass

    @abstractmethod
    def create_coupon(self, data: Dict[str, Any]) -> Coupon:
        pass

    @abstractmethod
    def update_coupon(self, coupon_id: int, updates: Dict[str, Any]) -> Optional[Coupon]:
        pass

    @abstractmethod
    def delete_coupon(self, coupon_id: int) -> bool:
        pass

    # --------------------- Addresses ---------------------

    @abstractmethod
    def get_user_addresses(self, user_id: int) -> List[Address]:
        pass

    @abstractmethod
    def get_address(self, address_id: int) -> Optional[Address]:
        pass

    @abstractmethod
    def create_address(self, data: Dict[str, Any]) -> Address:
        """Create an address; a new default address clears the user's previous default"""
        pass

    @abstractmethod
    def update_address(self, address_id: int, user_id: int, updates: Dict[str, Any]) -> Optional[Address]:
        pass

    @abstractmethod
    def delete_address(self, address_id: int, user_id: int) -> bool:
        pass

    # --------------------- Stats ---------------------

    def count_products(self) -> int:
        return len(self.get_products(include_inactive=True))
