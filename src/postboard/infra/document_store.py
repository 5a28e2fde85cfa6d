# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from postboard.core.errors import UniqueConstraintError
from postboard.core.models import COMMENTS, POSTS, SESSION_MAX_AGE_SECONDS, SESSIONS, USERS

logger = logging.getLogger(__name__)

MONGO_URL = os.getenv("POSTBOARD_MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.getenv("POSTBOARD_DB_NAME", "postboard")

_CLIENT: Optional[MongoClient] = None
_INDEXED = False


def use_client(client) -> None:
    """Replace the process-wide client (tests inject an in-memory one)."""
    global _CLIENT, _INDEXED
    _CLIENT = client
    _INDEXED = False


def get_db() -> Database:
    global _CLIENT, _INDEXED
    if _CLIENT is None:
        _CLIENT = MongoClient(MONGO_URL, tz_aware=True)
    db = _CLIENT[DB_NAME]
    if not _INDEXED:
        ensure_indexes(db)
        _INDEXED = True
    return db


def ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("username", ASCENDING)], unique=True)
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[POSTS].create_index([("createdAt", DESCENDING)])
    db[COMMENTS].create_index([("postId", ASCENDING)])
    db[SESSIONS].create_index([("createdAt", ASCENDING)], expireAfterSeconds=SESSION_MAX_AGE_SECONDS)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a URL or form. Returns None when malformed."""
    if isinstance(value, ObjectId):
        return value
    s = str(value or "").strip()
    if not ObjectId.is_valid(s):
        return None
    return ObjectId(s)


def create_document(model) -> Dict[str, Any]:
    """Validate a model and insert it into its collection.

    Raises DocumentValidationError before touching the store, and
    UniqueConstraintError when a unique index rejects the insert.
    """
    model.validate()
    doc = model.to_document()
    try:
        result = get_db()[model.collection].insert_one(doc)
    except DuplicateKeyError as e:
        raise UniqueConstraintError(f"Duplicate key in '{model.collection}'.") from e
    doc["_id"] = result.inserted_id
    return doc


def find_by_id(collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return get_db()[collection].find_one({"_id": oid})


def find_one(collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return get_db()[collection].find_one(query)


def find_many(
    collection: str,
    query: Dict[str, Any],
    *,
    sort: Optional[Sequence[Tuple[str, int]]] = None,
    limit: int = 0,
) -> List[Dict[str, Any]]:
    cursor = get_db()[collection].find(query)
    if sort:
        cursor = cursor.sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def push_and_return(collection: str, doc_id: Any, field: str, value: Any) -> Optional[Dict[str, Any]]:
    """Atomically append `value` to the array `field` and return the updated document."""
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return get_db()[collection].find_one_and_update(
        {"_id": oid},
        {"$push": {field: value}},
        return_document=ReturnDocument.AFTER,
    )


def delete_by_id(collection: str, doc_id: Any) -> bool:
    oid = to_object_id(doc_id)
    if oid is None:
        return False
    return get_db()[collection].delete_one({"_id": oid}).deleted_count == 1


def _fetch_by_ids(collection: str, ids: Iterable[Any]) -> Dict[ObjectId, Dict[str, Any]]:
    oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
    if not oids:
        return {}
    return {d["_id"]: d for d in get_db()[collection].find({"_id": {"$in": oids}})}


def populate(doc: Optional[Dict[str, Any]], field: str, collection: str) -> Optional[Dict[str, Any]]:
    """Replace a reference (or list of references) in `doc[field]` with the referenced documents.

    - A single id becomes the document, or None if it no longer exists.
    - A list keeps its stored order; dangling ids are dropped.
    Works in place and returns `doc` for chaining.
    """
    if not doc or field not in doc:
        return doc
    ref = doc[field]
    if isinstance(ref, list):
        found = _fetch_by_ids(collection, ref)
        doc[field] = [found[oid] for oid in (to_object_id(r) for r in ref) if oid in found]
        dropped = len(ref) - len(doc[field])
        if dropped:
            logger.warning("populate %s.%s: %d dangling reference(s)", collection, field, dropped)
    else:
        found = _fetch_by_ids(collection, [ref])
        doc[field] = found.get(to_object_id(ref))
    return doc


def populate_many(docs: List[Dict[str, Any]], field: str, collection: str) -> List[Dict[str, Any]]:
    """`populate` for a list of documents sharing one reference field, with one query."""
    found = _fetch_by_ids(collection, [d.get(field) for d in docs if d.get(field) is not None])
    for d in docs:
        if field in d:
            d[field] = found.get(to_object_id(d[field]))
    return docs
