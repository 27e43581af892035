"""
Database helpers

MongoDB access shared by every store. Each former browser storage key maps
to one collection (cart, user, session, order, coupon).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

from config import DATABASE_URL, DATABASE_NAME

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
db: Optional[Database] = None

if DATABASE_URL and DATABASE_NAME:
    _client = MongoClient(DATABASE_URL)
    db = _client[DATABASE_NAME]
    logger.info("Connected to MongoDB database %s", DATABASE_NAME)


def now() -> datetime:
    return datetime.now(timezone.utc)


def collection(name: str):
    """Return a collection from the configured database."""
    if db is None:
        raise RuntimeError("Database not available. Set DATABASE_URL and DATABASE_NAME.")
    return db[name]


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document with created_at/updated_at timestamps and return its id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    doc["created_at"] = now()
    doc["updated_at"] = now()
    result = collection(collection_name).insert_one(doc)
    return str(result.inserted_id)


def to_str_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    d = dict(doc)
    if d.get("_id"):
        d["id"] = str(d.pop("_id"))
    return d
