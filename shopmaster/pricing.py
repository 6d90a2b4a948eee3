"""
Cart, coupon and order arithmetic

All amounts are Decimal and rounded half-up to cents.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence, Tuple

from shopmaster.errors import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

DEFAULT_TAX_RATE = Decimal("0.08")
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal("50")
DEFAULT_SHIPPING_FEE = Decimal("9.99")


def money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def unit_price(product) -> Decimal:
    """Sale price when the product has one, list price otherwise"""
    if product.sale_price is not None:
        return money(product.sale_price)
    return money(product.price)


def cart_subtotal(lines: Iterable[Tuple[object, int]]) -> Decimal:
    return money(sum((unit_price(product) * quantity for product, quantity in lines), ZERO))


def _aware(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_expired(coupon, now: Optional[datetime] = None) -> bool:
    if coupon.expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _aware(now) > _aware(coupon.expires_at)


def coupon_discount(coupon, subtotal: Decimal, now: Optional[datetime] = None) -> Decimal:
    """Discount granted by ``coupon`` on ``subtotal``

    Raises ValidationError when the coupon cannot be applied.
    """
    if not coupon.is_active:
        raise ValidationError(f"Coupon {coupon.code} is not active")
    if is_expired(coupon, now):
        raise ValidationError("Coupon expired")
    if coupon.min_order_amount is not None and subtotal < money(coupon.min_order_amount):
        raise ValidationError(
            f"Coupon {coupon.code} requires a minimum order of {money(coupon.min_order_amount)}"
        )

    value = money(coupon.discount_value)
    if coupon.discount_type == "percentage":
        discount = subtotal * value / Decimal(100)
        if coupon.max_discount_amount is not None:
            discount = min(discount, money(coupon.max_discount_amount))
    elif coupon.discount_type == "fixed":
        discount = value
    else:
        raise ValidationError(f"Unknown discount type {coupon.discount_type!r}")

    return money(min(discount, subtotal))


def shipping_cost(subtotal: Decimal,
                  threshold: Decimal = DEFAULT_FREE_SHIPPING_THRESHOLD,
                  fee: Decimal = DEFAULT_SHIPPING_FEE) -> Decimal:
    if subtotal <= 0 or subtotal > threshold:
        return ZERO
    return money(fee)


def tax(amount: Decimal, rate: Decimal = DEFAULT_TAX_RATE) -> Decimal:
    return money(amount * rate)


@dataclass(frozen=True)
class PriceSummary:
    item_count: int
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    coupon_code: Optional[str] = None


def summarize(lines: Sequence[Tuple[object, int]],
              coupon=None,
              tax_rate: Decimal = DEFAULT_TAX_RATE,
              free_shipping_threshold: Decimal = DEFAULT_FREE_SHIPPING_THRESHOLD,
              shipping_fee: Decimal = DEFAULT_SHIPPING_FEE,
              now: Optional[datetime] = None) -> PriceSummary:
    """Price a cart: subtotal - discount + tax + shipping

    Tax applies to the discounted subtotal; free shipping is decided on the
    subtotal before the discount.
    """
    subtotal = cart_subtotal(lines)
    discount = coupon_discount(coupon, subtotal, now) if coupon is not None else ZERO
    taxed = tax(subtotal - discount, tax_rate)
    shipping = shipping_cost(subtotal, free_shipping_threshold, shipping_fee)
    return PriceSummary(
        item_count=sum(quantity for _, quantity in lines),
        subtotal=subtotal,
        discount=discount,
        tax=taxed,
        shipping=shipping,
        total=money(subtotal - discount + taxed + shipping),
        coupon_code=coupon.code if coupon is not None else None,
    )


def revenue(orders: Iterable) -> Decimal:
    """Sum of order totals, cancelled orders excluded"""
    return money(sum((money(o.total) for o in orders if o.status != "cancelled"), ZERO))
