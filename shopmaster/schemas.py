"""
Request and response schemas

Pydantic models used for validation at the API boundary. Response models
read attributes straight off the storage records, so the SQL and in-memory
backends serialise the same way.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import ClassVar, List, Literal, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing_extensions import Annotated

from shopmaster.utils.security import MAX_PASSWORD_BYTES

CENTS = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


Money = Annotated[Decimal, Field(ge=0, max_digits=12), AfterValidator(to_cents)]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PatchModel(BaseModel):
    """Partial update; a field may only be set to null when it is listed in NULLABLE"""
    NULLABLE: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None and name not in self.NULLABLE:
                raise ValueError(f"{name} cannot be null")
        return self


def discount_error(discount_type: str, discount_value: Decimal) -> Optional[str]:
    if discount_value <= 0:
        return "discount_value must be positive"
    if discount_type == "percentage" and discount_value > 100:
        return "percentage discount cannot exceed 100"
    return None


def sale_price_error(price: Decimal, sale_price: Optional[Decimal]) -> Optional[str]:
    if sale_price is not None and sale_price > price:
        return "Sale price cannot exceed price"
    return None


# --------------------- Users ---------------------

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        # bcrypt only accepts the first 72 bytes
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class UserUpdate(PatchModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)


class UserOut(OrmModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    is_admin: bool
    created_at: Optional[datetime] = None


# --------------------- Catalog ---------------------

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryUpdate(PatchModel):
    NULLABLE = ("description",)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryOut(OrmModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    price: Money
    sale_price: Optional[Money] = None
    sku: str = Field(..., min_length=1, max_length=100)
    category_id: Optional[int] = None
    stock: int = Field(0, ge=0)
    image_url: Optional[str] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_sale_price(self):
        error = sale_price_error(self.price, self.sale_price)
        if error:
            raise ValueError(error)
        return self


class ProductUpdate(PatchModel):
    NULLABLE = ("sale_price", "category_id", "image_url")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Money] = None
    sale_price: Optional[Money] = None
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    category_id: Optional[int] = None
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class ProductOut(OrmModel):
    id: int
    name: str
    description: str
    price: Decimal
    sale_price: Optional[Decimal] = None
    sku: str
    category_id: Optional[int] = None
    stock: int
    image_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewOut(OrmModel):
    id: int
    product_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


# --------------------- Cart & Wishlist ---------------------

class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class CartItemOut(OrmModel):
    id: int
    user_id: int
    product_id: int
    quantity: int
    created_at: Optional[datetime] = None
    product: Optional[ProductOut] = None


class WishlistItemCreate(BaseModel):
    product_id: int


class WishlistItemOut(OrmModel):
    id: int
    user_id: int
    product_id: int
    created_at: Optional[datetime] = None
    product: Optional[ProductOut] = None


class PriceSummaryOut(BaseModel):
    item_count: int
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    coupon_code: Optional[str] = None


# --------------------- Orders ---------------------

class OrderCreate(BaseModel):
    """Checkout request; without an address the user's default address is used"""
    model_config = ConfigDict(str_strip_whitespace=True)

    shipping_address_id: Optional[int] = None
    shipping_address: Optional[str] = Field(None, min_length=1)
    coupon_code: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemCreate(BaseModel):
    order_id: int
    product_id: int
    quantity: int = Field(..., ge=1)
    price: Money


class OrderItemOut(OrmModel):
    id: int
    order_id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price: Decimal


class OrderOut(OrmModel):
    id: int
    user_id: int
    status: str
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    shipping_address: str
    coupon_code: Optional[str] = None
    created_at: Optional[datetime] = None


class OrderDetailOut(OrderOut):
    items: List[OrderItemOut] = []


# --------------------- Coupons ---------------------

class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    discount_type: Literal["percentage", "fixed"]
    discount_value: Money
    min_order_amount: Optional[Money] = None
    max_discount_amount: Optional[Money] = None
    is_active: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def check_discount_value(self):
        error = discount_error(self.discount_type, self.discount_value)
        if error:
            raise ValueError(error)
        return self


class CouponUpdate(PatchModel):
    NULLABLE = ("description", "min_order_amount", "max_discount_amount", "expires_at")

    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    discount_type: Optional[Literal["percentage", "fixed"]] = None
    discount_value: Optional[Money] = None
    min_order_amount: Optional[Money] = None
    max_discount_amount: Optional[Money] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v


class CouponOut(OrmModel):
    id: int
    code: str
    description: Optional[str] = None
    discount_type: str
    discount_value: Decimal
    min_order_amount: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# --------------------- Addresses ---------------------

class AddressCreate(BaseModel):
    type: Literal["shipping", "billing"] = "shipping"
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = "United States"
    is_default: bool = False


class AddressUpdate(PatchModel):
    type: Optional[Literal["shipping", "billing"]] = None
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=1)
    zip_code: Optional[str] = Field(None, min_length=1, max_length=20)
    country: Optional[str] = None
    is_default: Optional[bool] = None


class AddressOut(OrmModel):
    id: int
    user_id: int
    type: str
    first_name: str
    last_name: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    is_default: bool
    created_at: Optional[datetime] = None


# --------------------- Admin ---------------------

class StatsOut(BaseModel):
    products: int
    orders: int
    pending_orders: int
    users: int
    revenue: Decimal
