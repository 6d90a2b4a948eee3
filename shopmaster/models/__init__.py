"""
SQLAlchemy models for the storefront
"""

# Import all models to make them available when importing from models
from .user import User
from .product import Product, Category
from .review import Review
from .order import Order, OrderItem
from .cart import CartItem, WishlistItem
from .coupon import Coupon
from .address import Address

__all__ = [
    "User",
    "Product",
    "Category",
    "Review",
    "Order",
    "OrderItem",
    "CartItem",
    "WishlistItem",
    "Coupon",
    "Address",
]
