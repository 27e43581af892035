"""
Auth store

Registered users, login sessions and saved addresses.

Credentials are stored and compared in plaintext; this is a demo shop.
A session id doubles as the cart key, so a cart built before logging in
is kept once the session is attached to a user.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException

from database import collection, create_document, now, to_str_id
from schemas import Address, Session, User

logger = logging.getLogger(__name__)


def check_password_strength(password: str) -> str:
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not any(c.isupper() for c in password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one number")
    return password


def public_user(doc: dict) -> dict:
    user = to_str_id(doc)
    user.pop("password", None)
    return user


def _find_by_email(email: str) -> Optional[dict]:
    return collection("user").find_one({"email": email.strip().lower()})


def _find_by_id(user_id: str) -> Optional[dict]:
    if not user_id or not ObjectId.is_valid(user_id):
        return None
    return collection("user").find_one({"_id": ObjectId(user_id)})


def _open_session(user_id: str, session_id: Optional[str] = None, role: str = "user") -> str:
    session = Session(session_id=session_id or uuid.uuid4().hex, user_id=user_id, role=role)
    collection("session").update_one(
        {"session_id": session.session_id},
        {"$set": {**session.model_dump(), "updated_at": now()}},
        upsert=True,
    )
    return session.session_id


def register(name: str, email: str, password: str,
             session_id: Optional[str] = None) -> Tuple[str, dict]:
    email = email.strip().lower()
    if _find_by_email(email):
        raise HTTPException(status_code=409, detail="Email already registered")
    user_id = create_document("user", User(name=name.strip(), email=email, password=password))
    logger.info("Registered user %s", email)
    return _open_session(user_id, session_id), public_user(_find_by_id(user_id))


def login(email: str, password: str, session_id: Optional[str] = None) -> Tuple[str, dict]:
    doc = _find_by_email(email)
    if not doc or doc.get("password") != password:
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if doc.get("status") == "blocked":
        logger.warning("Blocked user %s tried to log in", email)
        raise HTTPException(status_code=403, detail="Account is blocked")
    return _open_session(str(doc["_id"]), session_id), public_user(doc)


def logout(session_id: str) -> None:
    collection("session").update_one(
        {"session_id": session_id},
        {"$set": {"user_id": None, "updated_at": now()}},
    )


def get_session(session_id: Optional[str]) -> Optional[dict]:
    if not session_id:
        return None
    return collection("session").find_one({"session_id": session_id})


def current_user(session_id: Optional[str]) -> Optional[dict]:
    session = get_session(session_id)
    if not session or session.get("role") != "user":
        return None
    return _find_by_id(session.get("user_id"))


def require_user(session_id: Optional[str]) -> dict:
    """Raw user document for the session; 401 when nobody is logged in."""
    doc = current_user(session_id)
    if doc is None:
        raise HTTPException(status_code=401, detail="Please login to continue")
    if doc.get("status") == "blocked":
        raise HTTPException(status_code=403, detail="Account is blocked")
    return doc


def update_profile(user: dict, name: Optional[str] = None, phone: Optional[str] = None) -> dict:
    changes = {}
    if name is not None:
        changes["name"] = name.strip()
    if phone is not None:
        changes["phone"] = phone.strip()
    changes["updated_at"] = now()
    collection("user").update_one({"_id": user["_id"]}, {"$set": changes})
    return public_user(_find_by_id(str(user["_id"])))


def change_password(user: dict, current_password: str, new_password: str) -> None:
    if user.get("password") != current_password:
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    collection("user").update_one(
        {"_id": user["_id"]},
        {"$set": {"password": new_password, "updated_at": now()}},
    )
    logger.info("Password changed for %s", user["email"])


def forgot_password(email: str) -> str:
    """Simulated reset: only reports whether the account exists."""
    if not _find_by_email(email):
        raise HTTPException(status_code=404, detail="Email not found")
    return "Password reset link sent to your email!"


def seed_demo_user() -> bool:
    if _find_by_email("user@test.com"):
        return False
    create_document("user", User(name="Test User", email="user@test.com", password="Test@123"))
    return True


# Addresses

def _save_addresses(user: dict, addresses: List[dict]) -> List[dict]:
    collection("user").update_one(
        {"_id": user["_id"]},
        {"$set": {"addresses": addresses, "updated_at": now()}},
    )
    user["addresses"] = addresses
    return addresses


def find_address(user: dict, address_id: str) -> dict:
    for addr in user.get("addresses", []):
        if addr["id"] == address_id:
            return addr
    raise HTTPException(status_code=404, detail="Address not found")


def add_address(user: dict, data: dict) -> dict:
    addresses = [dict(a) for a in user.get("addresses", [])]
    address = Address(id=uuid.uuid4().hex[:12], **data).model_dump()
    if not addresses:
        address["is_default"] = True
    if address["is_default"]:
        for a in addresses:
            a["is_default"] = False
    addresses.append(address)
    _save_addresses(user, addresses)
    return address


def update_address(user: dict, address_id: str, data: dict) -> dict:
    current = find_address(user, address_id)
    updated = Address(**{**current, **data, "id": address_id}).model_dump()
    addresses = []
    for a in user.get("addresses", []):
        if a["id"] == address_id:
            addresses.append(updated)
        elif updated["is_default"]:
            addresses.append({**a, "is_default": False})
        else:
            addresses.append(dict(a))
    if not any(a["is_default"] for a in addresses):
        addresses[0]["is_default"] = True
    _save_addresses(user, addresses)
    return find_address(user, address_id)


def delete_address(user: dict, address_id: str) -> List[dict]:
    find_address(user, address_id)
    addresses = [dict(a) for a in user.get("addresses", []) if a["id"] != address_id]
    if addresses and not any(a["is_default"] for a in addresses):
        addresses[0]["is_default"] = True
    return _save_addresses(user, addresses)


def set_default_address(user: dict, address_id: str) -> List[dict]:
    find_address(user, address_id)
    addresses = [{**a, "is_default": a["id"] == address_id} for a in user.get("addresses", [])]
    return _save_addresses(user, addresses)
