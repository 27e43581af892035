"""
Database Schemas

Pydantic models for the MongoDB collections and the static catalog.
These schemas are used for data validation in the application.

Each persisted model maps to a collection (lowercase of the class name):
- User -> "user" collection
- Cart -> "cart" collection
- Order -> "order" collection
- Coupon -> "coupon" collection
- Session -> "session" collection
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
PaymentMethod = Literal["razorpay", "cod"]
CouponType = Literal["percentage", "fixed"]
CouponStatus = Literal["active", "expired", "disabled"]
UserStatus = Literal["active", "blocked"]
CheckoutStep = Literal["address", "payment"]

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


class Product(BaseModel):
    """
    Catalog product (static, not persisted)
    """
    id: str
    name: str = Field(..., description="Product name")
    category: str = Field(..., description="Category slug")
    brand: str
    frame_type: Optional[str] = None
    lens_type: Optional[str] = None
    price: float = Field(..., ge=0, description="List price")
    discount: float = Field(0, ge=0, le=100, description="Discount percent")
    images: List[str] = []
    description: Optional[str] = None
    features: List[str] = []
    in_stock: bool = Field(True, description="Whether product is in stock")
    rating: float = Field(0, ge=0, le=5, description="Average rating")
    reviews: int = Field(0, ge=0, description="Review count")


class Category(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None


class Address(BaseModel):
    id: str
    type: Literal["home", "work", "other"] = "home"
    name: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "India"
    is_default: bool = False


class User(BaseModel):
    """
    Users collection schema
    Collection name: "user"
    """
    name: str = Field(..., min_length=2, description="Full name")
    email: EmailStr = Field(..., description="Email address, unique")
    password: str = Field(..., description="Plaintext password (demo only)")
    phone: str = ""
    addresses: List[Address] = []
    status: UserStatus = "active"


class Session(BaseModel):
    session_id: str
    user_id: Optional[str] = None
    role: Literal["user", "admin"] = "user"


class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1, le=10)


class Cart(BaseModel):
    session_id: str
    items: List[CartItem] = []
    coupon_code: Optional[str] = None
    checkout_step: CheckoutStep = "address"
    address_id: Optional[str] = None


class OrderItem(BaseModel):
    product_id: str
    name: str
    brand: str
    image: Optional[str] = None
    price: float
    discount: float
    unit_price: float
    quantity: int
    line_total: float


class ShippingAddress(BaseModel):
    name: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class Order(BaseModel):
    """
    Orders collection schema
    Collection name: "order"
    """
    order_number: str
    user_id: str
    customer_name: str
    customer_email: EmailStr
    items: List[OrderItem]
    subtotal: float
    coupon_code: Optional[str] = None
    discount: float = 0.0
    shipping: float = 0.0
    total: float
    status: OrderStatus = "processing"
    payment_method: PaymentMethod
    payment_status: PaymentStatus = "pending"
    payment_id: Optional[str] = None
    shipping_address: ShippingAddress
    estimated_delivery: Optional[str] = None


class Coupon(BaseModel):
    """
    Coupons collection schema
    Collection name: "coupon"
    """
    code: str = Field(..., min_length=3, description="Stored uppercase")
    discount: float = Field(..., gt=0)
    type: CouponType = "percentage"
    min_order: float = Field(0, ge=0)
    expiry_date: Optional[date] = None
    status: CouponStatus = "active"
    usage_count: int = Field(0, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_percentage(self):
        if self.type == "percentage" and self.discount > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self
