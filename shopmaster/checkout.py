"""
Cart pricing and order placement
"""
from typing import List, Optional, Tuple

from loguru import logger

from shopmaster import pricing
from shopmaster.config import Settings
from shopmaster.errors import NotFoundError, ValidationError
from shopmaster.models import CartItem, Order, OrderItem, Product, User
from shopmaster.storage.base import Storage

CartLine = Tuple[CartItem, Product]


def cart_lines(storage: Storage, user_id: int) -> List[CartLine]:
    """The user's cart lines paired with their products; lines whose product is gone are skipped"""
    lines = []
    for item in storage.get_cart_items(user_id):
        product = storage.get_product(item.product_id)
        if product is not None:
            lines.append((item, product))
    return lines


def resolve_coupon(storage: Storage, code: Optional[str]):
    if not code:
        return None
    coupon = storage.get_coupon_by_code(code)
    if coupon is None:
        raise NotFoundError("Coupon not found")
    return coupon


def summarize_lines(lines: List[CartLine], coupon, settings: Settings) -> pricing.PriceSummary:
    return pricing.summarize(
        [(product, item.quantity) for item, product in lines],
        coupon=coupon,
        tax_rate=settings.tax_rate,
        free_shipping_threshold=settings.free_shipping_threshold,
        shipping_fee=settings.shipping_fee,
    )


def price_cart(storage: Storage, user_id: int, settings: Settings,
               coupon_code: Optional[str] = None) -> Tuple[List[CartLine], pricing.PriceSummary]:
    lines = cart_lines(storage, user_id)
    return lines, summarize_lines(lines, resolve_coupon(storage, coupon_code), settings)


def resolve_shipping_address(storage: Storage, user: User,
                             address_id: Optional[int] = None,
                             address_text: Optional[str] = None) -> str:
    """Pick the shipping address: explicit id, free text, then the user's default"""
    if address_id is not None:
        address = storage.get_address(address_id)
        if address is None or address.user_id != user.id:
            raise NotFoundError("Address not found")
        return address.one_line()
    if address_text:
        return address_text.strip()

    addresses = [a for a in storage.get_user_addresses(user.id) if a.type == "shipping"]
    default = next((a for a in addresses if a.is_default), None) or next(iter(addresses), None)
    if default is None:
        raise ValidationError("Shipping address required")
    return default.one_line()


def place_order(storage: Storage, user: User, settings: Settings,
                shipping_address_id: Optional[int] = None,
                shipping_address: Optional[str] = None,
                coupon_code: Optional[str] = None) -> Tuple[Order, List[OrderItem]]:
    """
    Turn the user's cart into an order

    Prices are taken from the catalog at checkout time. Stock is checked and
    decremented per line, then the cart is cleared. The steps are separate
    storage calls and are not atomic.
    """
    lines = cart_lines(storage, user.id)
    if not lines:
        raise ValidationError("Cart is empty")
    summary = summarize_lines(lines, resolve_coupon(storage, coupon_code), settings)

    for item, product in lines:
        if not product.is_active:
            raise ValidationError(f"{product.name} is no longer available")
        if item.quantity > product.stock:
            raise ValidationError(f"Insufficient stock for {product.name}")

    address = resolve_shipping_address(storage, user, shipping_address_id, shipping_address)

    order = storage.create_order({
        "user_id": user.id,
        "status": "pending",
        "subtotal": summary.subtotal,
        "discount": summary.discount,
        "tax": summary.tax,
        "shipping": summary.shipping,
        "total": summary.total,
        "shipping_address": address,
        "coupon_code": summary.coupon_code,
    })

    items = []
    for item, product in lines:
        items.append(storage.create_order_item({
            "order_id": order.id,
            "product_id": product.id,
            "product_name": product.name,
            "quantity": item.quantity,
            "price": pricing.unit_price(product),
        }))
        storage.update_product(product.id, {"stock": product.stock - item.quantity})

    storage.clear_cart(user.id)
    logger.info(f"Order {order.id} placed by user {user.id}: {summary.item_count} items, total {summary.total}")
    return order, items
