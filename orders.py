"""
Order store

Orders are written once at checkout and read back per user.
"""

import logging
import time
import uuid
from datetime import timedelta
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException

from config import DELIVERY_DAYS
from database import collection, create_document, now, to_str_id
from schemas import Order, OrderItem, ShippingAddress

logger = logging.getLogger(__name__)


def new_order_number() -> str:
    return f"ORD-{uuid.uuid4().hex[:8].upper()}"


def new_payment_id() -> str:
    return f"PAY{int(time.time() * 1000)}"


def create_order(user: dict, items: List[dict], totals: dict, address: dict,
                 payment_method: str, coupon_code: Optional[str] = None) -> dict:
    paid_online = payment_method == "razorpay"
    order = Order(
        order_number=new_order_number(),
        user_id=str(user["_id"]),
        customer_name=user["name"],
        customer_email=user["email"],
        items=[OrderItem(**i) for i in items],
        subtotal=totals["subtotal"],
        coupon_code=coupon_code,
        discount=totals["discount"],
        shipping=totals["shipping"],
        total=totals["total"],
        status="processing" if paid_online else "pending",
        payment_method=payment_method,
        payment_status="paid" if paid_online else "pending",
        payment_id=new_payment_id() if paid_online else None,
        shipping_address=ShippingAddress(**{k: address[k] for k in ShippingAddress.model_fields}),
        estimated_delivery=(now() + timedelta(days=DELIVERY_DAYS)).date().isoformat(),
    )
    order_id = create_document("order", order)
    logger.info("Order %s placed by %s, total %.2f", order.order_number, user["email"], order.total)
    return find_order(order_id)


def find_order(order_id: str) -> Optional[dict]:
    if not ObjectId.is_valid(order_id):
        return None
    return to_str_id(collection("order").find_one({"_id": ObjectId(order_id)}))


def list_orders(user_id: str) -> List[dict]:
    cursor = collection("order").find({"user_id": user_id}).sort([("created_at", -1), ("_id", -1)])
    return [to_str_id(o) for o in cursor]


def get_order(user_id: str, order_id: str) -> dict:
    order = find_order(order_id)
    if not order or order["user_id"] != user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
