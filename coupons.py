"""
Coupon store

Discount codes applied to carts and managed by admins.
"""

import logging
from datetime import date
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException

from database import collection, create_document, now, to_str_id
from schemas import Coupon

logger = logging.getLogger(__name__)

DEFAULT_COUPONS = [
    Coupon(code="WELCOME20", discount=20, type="percentage", min_order=50),
    Coupon(code="FLAT10", discount=10, type="fixed", min_order=30),
    Coupon(code="SUMMER25", discount=25, type="percentage", min_order=100),
    Coupon(code="EYECARE15", discount=15, type="percentage", min_order=75),
]


def _dump(coupon: Coupon) -> dict:
    data = coupon.model_dump(mode="json")
    data["code"] = data["code"].upper()
    return data


def find_coupon(code: Optional[str]) -> Optional[dict]:
    if not code:
        return None
    return collection("coupon").find_one({"code": code.strip().upper()})


def coupon_problem(coupon: Optional[dict], subtotal: float) -> Optional[str]:
    """Return why a coupon cannot be used on this subtotal, or None."""
    if not coupon:
        return "Invalid coupon code"
    if coupon.get("status") != "active":
        return "Coupon is not active"
    expiry = coupon.get("expiry_date")
    if expiry and expiry < date.today().isoformat():
        return "Coupon has expired"
    limit = coupon.get("usage_limit")
    if limit is not None and int(coupon.get("usage_count", 0)) >= int(limit):
        return "Coupon usage limit reached"
    if subtotal < float(coupon.get("min_order", 0)):
        return f"Minimum order of ${coupon['min_order']:.2f} required for this coupon"
    return None


def validate_coupon(code: str, subtotal: float) -> dict:
    coupon = find_coupon(code)
    problem = coupon_problem(coupon, subtotal)
    if problem:
        raise HTTPException(status_code=404 if coupon is None else 400, detail=problem)
    return coupon


def record_usage(code: str) -> None:
    collection("coupon").update_one(
        {"code": code.upper()},
        {"$inc": {"usage_count": 1}, "$set": {"updated_at": now()}},
    )


def seed_coupons() -> int:
    inserted = 0
    for coupon in DEFAULT_COUPONS:
        if not find_coupon(coupon.code):
            create_document("coupon", _dump(coupon))
            inserted += 1
    return inserted


# Admin management

def _object_id(coupon_id: str) -> ObjectId:
    if not ObjectId.is_valid(coupon_id):
        raise HTTPException(status_code=404, detail="Coupon not found")
    return ObjectId(coupon_id)


def list_coupons(status: Optional[str] = None) -> List[dict]:
    filt = {"status": status} if status else {}
    return [to_str_id(c) for c in collection("coupon").find(filt).sort("code", 1)]


def get_coupon(coupon_id: str) -> dict:
    doc = collection("coupon").find_one({"_id": _object_id(coupon_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return to_str_id(doc)


def create_coupon(coupon: Coupon) -> dict:
    if find_coupon(coupon.code):
        raise HTTPException(status_code=409, detail="Coupon code already exists")
    coupon_id = create_document("coupon", _dump(coupon))
    logger.info("Coupon %s created", coupon.code.upper())
    return get_coupon(coupon_id)


def update_coupon(coupon_id: str, coupon: Coupon) -> dict:
    current = get_coupon(coupon_id)
    data = _dump(coupon)
    if data["code"] != current["code"] and find_coupon(data["code"]):
        raise HTTPException(status_code=409, detail="Coupon code already exists")
    data["updated_at"] = now()
    collection("coupon").update_one({"_id": ObjectId(coupon_id)}, {"$set": data})
    return get_coupon(coupon_id)


def delete_coupon(coupon_id: str) -> None:
    result = collection("coupon").delete_one({"_id": _object_id(coupon_id)})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Coupon not found")
    logger.info("Coupon %s deleted", coupon_id)
