"""
Cart store

One cart document per session in the "cart" collection.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException

import coupons
from catalog import find_product, get_product, product_view
from config import MAX_QUANTITY
from database import collection, now
from pricing import free_shipping_remaining, line_total, order_totals
from schemas import Cart, CartItem, Product

logger = logging.getLogger(__name__)


def load_cart(session_id: str) -> dict:
    """Stored cart document, or a fresh empty one (not yet saved)."""
    doc = collection("cart").find_one({"session_id": session_id})
    if doc is None:
        return Cart(session_id=session_id).model_dump()
    doc.pop("_id", None)
    return doc


def save_cart(cart: dict) -> dict:
    cart["updated_at"] = now()
    collection("cart").update_one({"session_id": cart["session_id"]}, {"$set": cart}, upsert=True)
    return cart


def clamp(quantity: int) -> int:
    return max(1, min(MAX_QUANTITY, int(quantity)))


def cart_lines(cart: dict) -> List[Tuple[Product, int]]:
    lines = []
    for item in cart.get("items", []):
        product = find_product(item["product_id"])
        if product is None:
            continue
        lines.append((product, int(item.get("quantity", 1))))
    return lines


def add_item(session_id: str, product_id: str, quantity: int = 1) -> dict:
    product = get_product(product_id)
    if not product.in_stock:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")
    if quantity < 1:
        raise HTTPException(status_code=400, detail="Quantity must be positive")
    cart = load_cart(session_id)
    for item in cart["items"]:
        if item["product_id"] == product_id:
            item["quantity"] = clamp(item["quantity"] + quantity)
            break
    else:
        cart["items"].append(CartItem(product_id=product_id, quantity=clamp(quantity)).model_dump())
    save_cart(cart)
    logger.debug("Cart %s: added %s x%s", session_id, product_id, quantity)
    return get_cart(session_id)


def update_quantity(session_id: str, product_id: str, quantity: int) -> dict:
    cart = load_cart(session_id)
    if not any(i["product_id"] == product_id for i in cart["items"]):
        raise HTTPException(status_code=404, detail="Item not in cart")
    if quantity < 1:
        return remove_item(session_id, product_id)
    for item in cart["items"]:
        if item["product_id"] == product_id:
            item["quantity"] = clamp(quantity)
    save_cart(cart)
    return get_cart(session_id)


def remove_item(session_id: str, product_id: str) -> dict:
    cart = load_cart(session_id)
    cart["items"] = [i for i in cart["items"] if i["product_id"] != product_id]
    save_cart(cart)
    return get_cart(session_id)


def clear_cart(session_id: str) -> None:
    collection("cart").delete_one({"session_id": session_id})


def claim_cart(session_id: str) -> bool:
    """Delete the cart for checkout. Only one caller can win a given cart."""
    return collection("cart").delete_one({"session_id": session_id}).deleted_count == 1


def apply_coupon(session_id: str, code: str) -> dict:
    cart = load_cart(session_id)
    if not cart["items"]:
        raise HTTPException(status_code=400, detail="Cart is empty")
    subtotal = order_totals(cart_lines(cart))["subtotal"]
    coupon = coupons.validate_coupon(code, subtotal)
    cart["coupon_code"] = coupon["code"]
    save_cart(cart)
    return get_cart(session_id)


def remove_coupon(session_id: str) -> dict:
    cart = load_cart(session_id)
    cart["coupon_code"] = None
    save_cart(cart)
    return get_cart(session_id)


def active_coupon(cart: dict, subtotal: float) -> Tuple[Optional[dict], Optional[str]]:
    """The cart's coupon if it still applies, else (None, reason)."""
    code = cart.get("coupon_code")
    if not code:
        return None, None
    coupon = coupons.find_coupon(code)
    problem = coupons.coupon_problem(coupon, subtotal)
    if problem:
        return None, problem
    return coupon, None


def get_cart(session_id: str) -> dict:
    cart = load_cart(session_id)
    lines = cart_lines(cart)
    subtotal = order_totals(lines)["subtotal"]
    coupon, coupon_error = active_coupon(cart, subtotal)
    totals = order_totals(lines, coupon)
    items = []
    for product, qty in lines:
        view = product_view(product)
        items.append({
            "product_id": product.id,
            "name": product.name,
            "brand": product.brand,
            "image": product.images[0] if product.images else None,
            "price": product.price,
            "discount": product.discount,
            "unit_price": view["final_price"],
            "quantity": qty,
            "line_total": line_total(product, qty),
        })
    return {
        "session_id": session_id,
        "items": items,
        "coupon_code": cart.get("coupon_code"),
        "coupon_error": coupon_error,
        "checkout_step": cart.get("checkout_step", "address"),
        "address_id": cart.get("address_id"),
        "free_shipping_remaining": free_shipping_remaining(totals["subtotal"]) if items else 0.0,
        **totals,
    }
