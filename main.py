import os
import logging
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional

import admin
import auth
import cart as cart_store
import catalog
import checkout
import coupons
import database
import orders
from config import CORS_ORIGINS, LOG_LEVEL, PORT
from schemas import Coupon, OrderStatus, PaymentMethod

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="EyeCare Hub API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RuntimeError)
def database_unavailable(request: Request, exc: RuntimeError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/")
def read_root():
    return {"message": "EyeCare Hub backend is running"}


@app.post("/seed")
def seed():
    try:
        inserted = coupons.seed_coupons()
        demo_user = auth.seed_demo_user()
        return {"seeded": True, "coupons": inserted, "demo_user": demo_user}
    except Exception as e:
        logger.exception("Seeding failed")
        raise HTTPException(status_code=500, detail=str(e))


# Catalog

@app.get("/categories")
def list_categories():
    return catalog.list_categories()


@app.get("/products")
def list_products(
    category: Optional[str] = None,
    q: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort: Optional[str] = Query(None, description="featured|price-low|price-high|rating"),
):
    products = catalog.list_products(category, q, min_price, max_price, sort)
    return [catalog.product_view(p) for p in products]


@app.get("/products/{product_id}")
def get_product(product_id: str):
    return catalog.product_view(catalog.get_product(product_id))


# Auth

def clean_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if len(v.strip()) < 2:
        raise ValueError("Name must be at least 2 characters")
    return v.strip()


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str
    session_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return auth.check_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    session_id: Optional[str] = None


class SessionRequest(BaseModel):
    session_id: str


@app.post("/auth/register", status_code=201)
def register(payload: RegisterRequest):
    session_id, user = auth.register(payload.name, payload.email, payload.password, payload.session_id)
    return {"ok": True, "message": "Registration successful!", "session_id": session_id, "user": user}


@app.post("/auth/login")
def login(payload: LoginRequest):
    session_id, user = auth.login(payload.email, payload.password, payload.session_id)
    return {"ok": True, "message": "Login successful!", "session_id": session_id, "user": user}


@app.post("/auth/logout")
def logout(payload: SessionRequest):
    auth.logout(payload.session_id)
    return {"ok": True}


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


@app.post("/auth/forgot-password")
def forgot_password(payload: ForgotPasswordRequest):
    return {"ok": True, "message": auth.forgot_password(payload.email)}


@app.get("/me")
def me(session_id: str = Query(...)):
    return auth.public_user(auth.require_user(session_id))


class ProfileUpdate(BaseModel):
    session_id: str
    name: Optional[str] = Field(None, min_length=2)
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return clean_name(v)


@app.patch("/me")
def update_profile(payload: ProfileUpdate):
    user = auth.require_user(payload.session_id)
    return auth.update_profile(user, payload.name, payload.phone)


class ChangePasswordRequest(BaseModel):
    session_id: str
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return auth.check_password_strength(v)


@app.post("/me/password")
def change_password(payload: ChangePasswordRequest):
    user = auth.require_user(payload.session_id)
    auth.change_password(user, payload.current_password, payload.new_password)
    return {"ok": True, "message": "Password changed successfully!"}


# Addresses

class AddressIn(BaseModel):
    type: Literal["home", "work", "other"] = "home"
    name: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "India"
    is_default: bool = False


class AddressUpdate(BaseModel):
    type: Optional[Literal["home", "work", "other"]] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    is_default: Optional[bool] = None


@app.get("/me/addresses")
def list_addresses(session_id: str = Query(...)):
    return auth.require_user(session_id).get("addresses", [])


@app.post("/me/addresses", status_code=201)
def add_address(payload: AddressIn, session_id: str = Query(...)):
    user = auth.require_user(session_id)
    return auth.add_address(user, payload.model_dump())


@app.patch("/me/addresses/{address_id}")
def update_address(address_id: str, payload: AddressUpdate, session_id: str = Query(...)):
    user = auth.require_user(session_id)
    return auth.update_address(user, address_id, payload.model_dump(exclude_none=True))


@app.delete("/me/addresses/{address_id}")
def delete_address(address_id: str, session_id: str = Query(...)):
    user = auth.require_user(session_id)
    return auth.delete_address(user, address_id)


@app.post("/me/addresses/{address_id}/default")
def set_default_address(address_id: str, session_id: str = Query(...)):
    user = auth.require_user(session_id)
    return auth.set_default_address(user, address_id)


# Cart

class AddToCartRequest(BaseModel):
    session_id: str
    product_id: str
    quantity: int = 1


class UpdateQuantityRequest(BaseModel):
    session_id: str
    quantity: int


class CouponRequest(BaseModel):
    session_id: str
    code: str


@app.get("/cart")
def get_cart(session_id: str = Query(...)):
    return cart_store.get_cart(session_id)


@app.post("/cart/add")
def add_to_cart(payload: AddToCartRequest):
    return cart_store.add_item(payload.session_id, payload.product_id, payload.quantity)


@app.patch("/cart/items/{product_id}")
def update_cart_item(product_id: str, payload: UpdateQuantityRequest):
    return cart_store.update_quantity(payload.session_id, product_id, payload.quantity)


@app.delete("/cart/items/{product_id}")
def remove_cart_item(product_id: str, session_id: str = Query(...)):
    return cart_store.remove_item(session_id, product_id)


@app.delete("/cart")
def clear_cart(session_id: str = Query(...)):
    cart_store.clear_cart(session_id)
    return {"ok": True}


@app.post("/cart/coupon")
def apply_coupon(payload: CouponRequest):
    cart = cart_store.apply_coupon(payload.session_id, payload.code)
    return {"ok": True, "message": f"Coupon applied! You save ${cart['discount']:.2f}", "cart": cart}


@app.delete("/cart/coupon")
def remove_coupon(session_id: str = Query(...)):
    return cart_store.remove_coupon(session_id)


# Checkout

class SelectAddressRequest(BaseModel):
    session_id: str
    address_id: str


class PaymentRequest(BaseModel):
    session_id: str
    payment_method: PaymentMethod = "razorpay"


@app.post("/checkout/address")
def checkout_address(payload: SelectAddressRequest):
    return checkout.select_address(payload.session_id, payload.address_id)


@app.post("/checkout/back")
def checkout_back(payload: SessionRequest):
    return checkout.back_to_address(payload.session_id)


@app.post("/checkout/pay", status_code=201)
def checkout_pay(payload: PaymentRequest):
    try:
        order = checkout.pay(payload.session_id, payload.payment_method)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Checkout failed for session %s", payload.session_id)
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, "message": "Order placed successfully!", "order": order}


# Orders history

@app.get("/orders")
def get_orders(session_id: str = Query(...)):
    user = auth.require_user(session_id)
    return orders.list_orders(str(user["_id"]))


@app.get("/orders/{order_id}")
def get_order(order_id: str, session_id: str = Query(...)):
    user = auth.require_user(session_id)
    return orders.get_order(str(user["_id"]), order_id)


# Admin

class AdminLoginRequest(BaseModel):
    username: str
    password: str


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class UserStatusUpdate(BaseModel):
    status: Literal["active", "blocked"]


@app.post("/admin/login")
def admin_login(payload: AdminLoginRequest):
    return {"ok": True, "session_id": admin.admin_login(payload.username, payload.password)}


@app.post("/admin/logout")
def admin_logout(payload: SessionRequest):
    admin.admin_logout(payload.session_id)
    return {"ok": True}


@app.get("/admin/stats")
def admin_stats(session_id: str = Query(...)):
    admin.require_admin(session_id)
    return admin.dashboard_stats()


@app.get("/admin/orders")
def admin_orders(session_id: str = Query(...), status: Optional[str] = None, q: Optional[str] = None):
    admin.require_admin(session_id)
    return admin.list_all_orders(status, q)


@app.patch("/admin/orders/{order_id}")
def admin_update_order(order_id: str, payload: OrderStatusUpdate, session_id: str = Query(...)):
    admin.require_admin(session_id)
    return admin.update_order_status(order_id, payload.status)


@app.get("/admin/users")
def admin_users(session_id: str = Query(...), q: Optional[str] = None):
    admin.require_admin(session_id)
    return admin.list_users(q)


@app.patch("/admin/users/{user_id}")
def admin_update_user(user_id: str, payload: UserStatusUpdate, session_id: str = Query(...)):
    admin.require_admin(session_id)
    return admin.set_user_status(user_id, payload.status)


@app.get("/admin/coupons")
def admin_coupons(session_id: str = Query(...), status: Optional[str] = None):
    admin.require_admin(session_id)
    return coupons.list_coupons(status)


@app.post("/admin/coupons", status_code=201)
def admin_create_coupon(payload: Coupon, session_id: str = Query(...)):
    admin.require_admin(session_id)
    return coupons.create_coupon(payload)


@app.put("/admin/coupons/{coupon_id}")
def admin_update_coupon(coupon_id: str, payload: Coupon, session_id: str = Query(...)):
    admin.require_admin(session_id)
    return coupons.update_coupon(coupon_id, payload)


@app.delete("/admin/coupons/{coupon_id}")
def admin_delete_coupon(coupon_id: str, session_id: str = Query(...)):
    admin.require_admin(session_id)
    coupons.delete_coupon(coupon_id)
    return {"ok": True}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    if db is not None:
        response["database"] = "✅ Available"
        response["database_name"] = db.name
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
