"""
MongoDB access

`db` is None when DATABASE_URL is not configured; callers that need the
store go through `get_db()` which raises instead of failing on None.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

import config
from errors import ValidationError

logger = logging.getLogger(__name__)

client: Optional[MongoClient] = MongoClient(config.DATABASE_URL) if config.DATABASE_URL else None
db = client[config.DATABASE_NAME] if client is not None else None


def get_db():
    if db is None:
        raise RuntimeError("Database is not configured (set DATABASE_URL)")
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with created_at/updated_at and return its id."""
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc.setdefault("updated_at", stamp)
    result = get_db()[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None,
                  sort: Optional[List] = None, projection: Optional[Dict[str, Any]] = None) -> List[dict]:
    cursor = get_db()[collection_name].find(filter_dict or {}, projection)
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def serialize_doc(doc: Optional[Dict[str, Any]]):
    if not doc:
        return doc
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    # Convert datetime
    for k, v in list(doc.items()):
        if isinstance(v, datetime):
            doc[k] = v.isoformat()
        elif isinstance(v, ObjectId):
            doc[k] = str(v)
    return doc


def oid(id_str: str) -> ObjectId:
    if not id_str or not ObjectId.is_valid(id_str):
        raise ValidationError("Invalid id")
    return ObjectId(id_str)


def ensure_indexes() -> List[str]:
    database = get_db()
    results = []

    database["product"].create_index([("name", ASCENDING)])
    results.append("Products indexes created")

    database["user"].create_index([("email", ASCENDING)], unique=True)
    results.append("Users indexes created")

    database["order"].create_index([("order_id", ASCENDING)], unique=True)
    database["order"].create_index([("user_id", ASCENDING)])
    database["order"].create_index([("status", ASCENDING)])
    database["order"].create_index([("created_at", DESCENDING)])
    results.append("Orders indexes created")

    database["review"].create_index([("product_id", ASCENDING), ("user_id", ASCENDING)], unique=True)
    database["qr_code"].create_index([("qr_code", ASCENDING)], unique=True)
    database["cart"].create_index([("key", ASCENDING)], unique=True)
    results.append("Review, QR and cart indexes created")

    logger.info("Indexes ensured on %s", database.name)
    return results
