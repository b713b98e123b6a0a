"""MongoDB-backed stores.

The purchase path relies on one server-side primitive: `find_one_and_update`
with a filter of `{_id, quantity >= amount}` and an aggregation-pipeline
update. MongoDB applies a single-document update atomically, so the
stock check, the decrement and the `inStock` recomputation happen as one
indivisible step. Two concurrent purchases can never both see the same
"before" quantity.

Driver errors never leave this module: anything raised by pymongo becomes
`StoreUnavailable` (or `UserExists` for a duplicate email).
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument, errors

from .config import MONGO_DB, MONGO_TIMEOUT_MS, MONGO_URI, SWEETS_COLLECTION, USERS_COLLECTION
from .core import SweetIn, utcnow
from .errors import StoreUnavailable, UserExists
from .models import Category, Role, Sweet, UserInDB

logger = logging.getLogger(__name__)


def get_client(uri: str = MONGO_URI) -> MongoClient:
    # tz_aware so timestamps come back as aware datetimes, like the in-memory store's.
    return MongoClient(uri, serverSelectionTimeoutMS=MONGO_TIMEOUT_MS, tz_aware=True)


def get_collections(client: MongoClient) -> tuple[Any, Any]:
    """Return (sweets, users) collections and make sure their indexes exist.

    Indexes:
    - users.email is unique; registration relies on it to reject duplicates
      even when two sign-ups race.
    - sweets by category and by creation time back the list endpoint.
    """
    db = client[MONGO_DB]
    sweets = db[SWEETS_COLLECTION]
    users = db[USERS_COLLECTION]
    with _store_errors("create indexes"):
        users.create_index([("email", ASCENDING)], unique=True)
        sweets.create_index([("category", ASCENDING), ("createdAt", DESCENDING)])
        sweets.create_index([("createdAt", DESCENDING)])
    return sweets, users


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except errors.PyMongoError as e:
        logger.error("Mongo %s failed: %s", operation, e)
        raise StoreUnavailable() from e


def _object_id(item_id: str) -> Optional[ObjectId]:
    # A malformed id can't match anything; report it the same way as a missing one.
    if not isinstance(item_id, str) or not ObjectId.is_valid(item_id):
        return None
    return ObjectId(item_id)


def _to_sweet(doc: Optional[dict[str, Any]]) -> Optional[Sweet]:
    if doc is None:
        return None
    data = {k: v for k, v in doc.items() if k != "_id"}
    return Sweet(id=str(doc["_id"]), **data)


def _to_user(doc: Optional[dict[str, Any]]) -> Optional[UserInDB]:
    if doc is None:
        return None
    data = {k: v for k, v in doc.items() if k != "_id"}
    return UserInDB(id=str(doc["_id"]), **data)


class MongoInventoryStore:
    def __init__(self, collection):
        self.collection = collection

    def conditional_decrement(self, item_id: str, amount: int) -> Optional[Sweet]:
        oid = _object_id(item_id)
        if oid is None:
            return None
        # Pipeline stages run in order against the same document, so the
        # second $set sees the already-decremented quantity.
        pipeline = [
            {"$set": {"quantity": {"$subtract": ["$quantity", amount]}}},
            {"$set": {"inStock": {"$gt": ["$quantity", 0]}, "updatedAt": "$$NOW"}},
        ]
        with _store_errors("conditional decrement"):
            doc = self.collection.find_one_and_update(
                {"_id": oid, "quantity": {"$gte": amount}},
                pipeline,
                return_document=ReturnDocument.AFTER,
            )
        return _to_sweet(doc)

    def get(self, item_id: str) -> Optional[Sweet]:
        oid = _object_id(item_id)
        if oid is None:
            return None
        with _store_errors("get"):
            doc = self.collection.find_one({"_id": oid})
        return _to_sweet(doc)

    def list(self, category: Optional[Category] = None, in_stock: Optional[bool] = None) -> list[Sweet]:
        query: dict[str, Any] = {}
        if category:
            query["category"] = category.value
        if in_stock is not None:
            query["inStock"] = in_stock
        with _store_errors("list"):
            docs = list(self.collection.find(query).sort("createdAt", DESCENDING))
        return [_to_sweet(d) for d in docs]

    def search(self, name: str) -> list[Sweet]:
        query = {"name": {"$regex": re.escape(name), "$options": "i"}}
        with _store_errors("search"):
            docs = list(self.collection.find(query).sort("createdAt", DESCENDING))
        return [_to_sweet(d) for d in docs]

    def create(self, data: SweetIn) -> Sweet:
        now = utcnow()
        doc = {
            "name": data.name,
            "category": data.category.value,
            "price": data.price,
            "quantity": data.quantity,
            "inStock": data.quantity > 0,
            "description": data.description,
            "createdAt": now,
            "updatedAt": now,
        }
        with _store_errors("create"):
            result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _to_sweet(doc)

    def update(self, item_id: str, changes: dict[str, Any]) -> Optional[Sweet]:
        oid = _object_id(item_id)
        if oid is None:
            return None
        fields = {k: (v.value if isinstance(v, Category) else v) for k, v in changes.items()}
        if "quantity" in fields:
            fields["inStock"] = fields["quantity"] > 0
        fields["updatedAt"] = utcnow()
        with _store_errors("update"):
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        return _to_sweet(doc)

    def delete(self, item_id: str) -> bool:
        oid = _object_id(item_id)
        if oid is None:
            return False
        with _store_errors("delete"):
            result = self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1

    def clear(self) -> None:
        with _store_errors("clear"):
            self.collection.delete_many({})


class MongoUserStore:
    def __init__(self, collection):
        self.collection = collection

    def create(self, name: str, email: str, hashed_password: str, role: Role = Role.USER) -> UserInDB:
        doc = {
            "name": name,
            "email": email,
            "hashed_password": hashed_password,
            "role": role.value,
            "createdAt": utcnow(),
        }
        try:
            result = self.collection.insert_one(doc)
        except errors.DuplicateKeyError as e:
            raise UserExists() from e
        except errors.PyMongoError as e:
            logger.error("Mongo create user failed: %s", e)
            raise StoreUnavailable() from e
        doc["_id"] = result.inserted_id
        return _to_user(doc)

    def get(self, user_id: str) -> Optional[UserInDB]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        with _store_errors("get user"):
            doc = self.collection.find_one({"_id": oid})
        return _to_user(doc)

    def get_by_email(self, email: str) -> Optional[UserInDB]:
        with _store_errors("get user by email"):
            doc = self.collection.find_one({"email": email})
        return _to_user(doc)

    def set_role(self, email: str, role: Role) -> Optional[UserInDB]:
        with _store_errors("set role"):
            doc = self.collection.find_one_and_update(
                {"email": email},
                {"$set": {"role": role.value}},
                return_document=ReturnDocument.AFTER,
            )
        return _to_user(doc)

    def clear(self) -> None:
        with _store_errors("clear users"):
            self.collection.delete_many({})
