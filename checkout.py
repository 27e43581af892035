"""
Two-step checkout: pick a shipping address, then pay.

The current step lives on the cart document ("address" or "payment").
Paying waits a fixed delay to stand in for the payment gateway, then
writes the order and empties the cart.
"""

import logging
import time

from fastapi import HTTPException

import auth
import cart as cart_store
import coupons
import orders
from config import PAYMENT_DELAY_SECONDS

logger = logging.getLogger(__name__)


def _non_empty_cart(session_id: str) -> dict:
    cart = cart_store.load_cart(session_id)
    if not cart_store.cart_lines(cart):
        raise HTTPException(status_code=400, detail="Cart is empty")
    return cart


def select_address(session_id: str, address_id: str) -> dict:
    user = auth.require_user(session_id)
    cart = _non_empty_cart(session_id)
    auth.find_address(user, address_id)
    cart["checkout_step"] = "payment"
    cart["address_id"] = address_id
    cart_store.save_cart(cart)
    return cart_store.get_cart(session_id)


def back_to_address(session_id: str) -> dict:
    cart = cart_store.load_cart(session_id)
    cart["checkout_step"] = "address"
    cart_store.save_cart(cart)
    return cart_store.get_cart(session_id)


def _ready_to_pay(session_id: str, user: dict) -> dict:
    """Cart must hold items and be at the payment step; returns the shipping address."""
    cart = _non_empty_cart(session_id)
    if cart.get("checkout_step") != "payment" or not cart.get("address_id"):
        raise HTTPException(status_code=400, detail="Please select a shipping address")
    return auth.find_address(user, cart["address_id"])


def _simulate_gateway() -> None:
    if PAYMENT_DELAY_SECONDS > 0:
        time.sleep(PAYMENT_DELAY_SECONDS)


def pay(session_id: str, payment_method: str) -> dict:
    user = auth.require_user(session_id)
    _ready_to_pay(session_id, user)

    _simulate_gateway()

    # The cart may have been paid for or changed while the gateway was busy.
    address = _ready_to_pay(session_id, user)
    view = cart_store.get_cart(session_id)
    if not cart_store.claim_cart(session_id):
        raise HTTPException(status_code=400, detail="Cart is empty")

    coupon_code = view["coupon_code"] if not view["coupon_error"] else None
    items = [{k: line[k] for k in ("product_id", "name", "brand", "image", "price",
                                   "discount", "unit_price", "quantity", "line_total")}
             for line in view["items"]]
    order = orders.create_order(user, items, view, address, payment_method, coupon_code)
    if coupon_code:
        coupons.record_usage(coupon_code)
    return order
