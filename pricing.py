"""
Cart and order arithmetic.

Every function here is pure: lines are (product, quantity) pairs and
coupons are plain dicts as stored in the coupon collection.
"""

from typing import Iterable, Optional, Tuple

from catalog import final_price
from config import FREE_SHIPPING_THRESHOLD, SHIPPING_FEE
from schemas import Product

Line = Tuple[Product, int]


def line_total(product: Product, quantity: int) -> float:
    return round(final_price(product) * quantity, 2)


def cart_subtotal(lines: Iterable[Line]) -> float:
    """Sum of the rounded line totals, price x quantity x (1 - discount/100)."""
    return round(sum(line_total(p, qty) for p, qty in lines), 2)


def shipping_fee(subtotal: float) -> float:
    """Flat fee below the threshold, free at or above it."""
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return 0.0
    return SHIPPING_FEE


def coupon_discount(coupon: Optional[dict], subtotal: float) -> float:
    if not coupon:
        return 0.0
    if coupon["type"] == "percentage":
        amount = subtotal * float(coupon["discount"]) / 100
    else:
        amount = float(coupon["discount"])
    return round(min(amount, subtotal), 2)


def order_totals(lines: Iterable[Line], coupon: Optional[dict] = None) -> dict:
    lines = list(lines)
    subtotal = cart_subtotal(lines)
    if not lines:
        return {"subtotal": 0.0, "discount": 0.0, "shipping": 0.0, "total": 0.0, "item_count": 0}
    discount = coupon_discount(coupon, subtotal)
    shipping = shipping_fee(subtotal)
    return {
        "subtotal": subtotal,
        "discount": discount,
        "shipping": shipping,
        "total": round(subtotal - discount + shipping, 2),
        "item_count": sum(qty for _, qty in lines),
    }


def free_shipping_remaining(subtotal: float) -> float:
    """How much more to spend before shipping becomes free."""
    return round(max(FREE_SHIPPING_THRESHOLD - subtotal, 0.0), 2)
