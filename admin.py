"""
Admin dashboard

Login, store-wide order management, users and stats.
"""

import logging
import re
import uuid
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException

from auth import get_session, public_user
from catalog import PRODUCTS
from config import ADMIN_PASSWORD, ADMIN_USERNAME
from database import collection, now, to_str_id
from orders import find_order
from schemas import ORDER_STATUSES, Session

logger = logging.getLogger(__name__)


def admin_login(username: str, password: str) -> str:
    if username != ADMIN_USERNAME or password != ADMIN_PASSWORD:
        logger.warning("Failed admin login for %s", username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    session = Session(session_id=uuid.uuid4().hex, role="admin")
    collection("session").insert_one({**session.model_dump(), "created_at": now()})
    return session.session_id


def require_admin(session_id: Optional[str]) -> dict:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=401, detail="Please login to continue")
    if session.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return session


def admin_logout(session_id: str) -> None:
    collection("session").delete_one({"session_id": session_id, "role": "admin"})


# Orders

# Delivered and cancelled orders are final.
ORDER_TRANSITIONS = {
    "pending": ("processing", "cancelled"),
    "processing": ("shipped", "cancelled"),
    "shipped": ("delivered", "cancelled"),
    "delivered": (),
    "cancelled": (),
}


def list_all_orders(status: Optional[str] = None, q: Optional[str] = None) -> List[dict]:
    filt = {}
    if status and status != "all":
        filt["status"] = status
    if q:
        pattern = {"$regex": re.escape(q), "$options": "i"}
        filt["$or"] = [
            {"order_number": pattern},
            {"customer_name": pattern},
            {"customer_email": pattern},
            {"items.name": pattern},
        ]
    cursor = collection("order").find(filt).sort([("created_at", -1), ("_id", -1)])
    return [to_str_id(o) for o in cursor]


def update_order_status(order_id: str, status: str) -> dict:
    if status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status '{status}'")
    order = find_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if status not in ORDER_TRANSITIONS[order["status"]]:
        raise HTTPException(
            status_code=400, detail=f"Cannot change order status from {order['status']} to {status}",
        )
    changes = {"status": status, "updated_at": now()}
    if status == "cancelled" and order.get("payment_status") == "paid":
        changes["payment_status"] = "refunded"
    if status == "delivered" and order.get("payment_method") == "cod":
        changes["payment_status"] = "paid"
    collection("order").update_one({"_id": ObjectId(order_id)}, {"$set": changes})
    logger.info("Order %s status %s -> %s", order["order_number"], order["status"], status)
    return find_order(order_id)


# Users

def list_users(q: Optional[str] = None) -> List[dict]:
    filt = {}
    if q:
        pattern = {"$regex": re.escape(q), "$options": "i"}
        filt["$or"] = [{"name": pattern}, {"email": pattern}, {"status": pattern}]
    return [public_user(u) for u in collection("user").find(filt).sort([("created_at", 1), ("_id", 1)])]


def set_user_status(user_id: str, status: str) -> dict:
    if status not in ("active", "blocked"):
        raise HTTPException(status_code=400, detail=f"Invalid status '{status}'")
    if not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    result = collection("user").update_one(
        {"_id": ObjectId(user_id)}, {"$set": {"status": status, "updated_at": now()}}
    )
    if not result.matched_count:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %s is now %s", user_id, status)
    return public_user(collection("user").find_one({"_id": ObjectId(user_id)}))


# Dashboard

def dashboard_stats() -> dict:
    all_orders = list(collection("order").find({}).sort([("created_at", -1), ("_id", -1)]))
    by_status = {s: 0 for s in ORDER_STATUSES}
    monthly = {}
    revenue = 0.0
    for o in all_orders:
        by_status[o["status"]] = by_status.get(o["status"], 0) + 1
        if o["status"] == "cancelled":
            continue
        revenue += float(o["total"])
        month = o["created_at"].strftime("%Y-%m")
        bucket = monthly.setdefault(month, {"month": month, "revenue": 0.0, "orders": 0})
        bucket["revenue"] = round(bucket["revenue"] + float(o["total"]), 2)
        bucket["orders"] += 1
    return {
        "revenue": round(revenue, 2),
        "orders": len(all_orders),
        "users": collection("user").count_documents({}),
        "products": len(PRODUCTS),
        "orders_by_status": by_status,
        "monthly_revenue": [monthly[m] for m in sorted(monthly)],
        "recent_orders": [to_str_id(o) for o in all_orders[:5]],
    }
