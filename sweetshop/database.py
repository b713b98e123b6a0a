import threading
import uuid
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .config import STORE_BACKEND
from .core import SweetIn, _make_sweet_dict, utcnow
from .errors import UserExists
from .models import Category, Sweet, UserInDB, Role

# Storage contracts and the in-process implementations used by tests, demos
# and STORE_BACKEND=memory. The MongoDB versions live in mongo.py.


class InventoryStore(Protocol):
    def conditional_decrement(self, item_id: str, amount: int) -> Optional[Sweet]:
        """Atomically take `amount` off the item's quantity if at least that
        much is left, recomputing inStock in the same step.

        Returns the item after the update, or None when no item with this id
        has `quantity >= amount`.
        """
        ...

    def get(self, item_id: str) -> Optional[Sweet]: ...

    def list(self, category: Optional[Category] = None, in_stock: Optional[bool] = None) -> List[Sweet]: ...

    def search(self, name: str) -> List[Sweet]: ...

    def create(self, data: SweetIn) -> Sweet: ...

    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[Sweet]: ...

    def delete(self, item_id: str) -> bool: ...

    def clear(self) -> None: ...


class UserStore(Protocol):
    def create(self, name: str, email: str, hashed_password: str, role: Role = Role.USER) -> UserInDB: ...

    def get(self, user_id: str) -> Optional[UserInDB]: ...

    def get_by_email(self, email: str) -> Optional[UserInDB]: ...

    def set_role(self, email: str, role: Role) -> Optional[UserInDB]: ...

    def clear(self) -> None: ...


class InMemoryInventoryStore:
    """Dict-backed inventory.

    One lock guards every read and write, so a check-and-decrement can never
    interleave with another mutation of the same item. Stored models are
    never handed out; callers always get copies.
    """

    def __init__(self):
        self._items: Dict[str, Sweet] = {}
        self._lock = threading.Lock()

    def conditional_decrement(self, item_id: str, amount: int) -> Optional[Sweet]:
        with self._lock:
            item = self._items.get(item_id)
            if item is None or item.quantity < amount:
                return None
            quantity = item.quantity - amount
            updated = item.model_copy(update={
                "quantity": quantity,
                "inStock": quantity > 0,
                "updatedAt": utcnow(),
            })
            self._items[item_id] = updated
            return updated.model_copy()

    def get(self, item_id: str) -> Optional[Sweet]:
        with self._lock:
            item = self._items.get(item_id)
            return item.model_copy() if item else None

    def list(self, category: Optional[Category] = None, in_stock: Optional[bool] = None) -> List[Sweet]:
        with self._lock:
            items = list(self._items.values())
        out = []
        # newest first
        for s in reversed(items):
            if category and s.category != category:
                continue
            if in_stock is not None and s.inStock != in_stock:
                continue
            out.append(s.model_copy())
        return out

    def search(self, name: str) -> List[Sweet]:
        term = name.lower()
        return [s for s in self.list() if term in s.name.lower()]

    def create(self, data: SweetIn) -> Sweet:
        sid = uuid.uuid4().hex
        sweet = Sweet(**_make_sweet_dict(sid, data))
        with self._lock:
            self._items[sid] = sweet
        return sweet.model_copy()

    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[Sweet]:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return None
            changes = dict(changes, updatedAt=utcnow())
            if "quantity" in changes:
                changes["inStock"] = changes["quantity"] > 0
            updated = item.model_copy(update=changes)
            self._items[item_id] = updated
            return updated.model_copy()

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


class InMemoryUserStore:
    def __init__(self):
        self._users: Dict[str, UserInDB] = {}
        self._lock = threading.Lock()

    def create(self, name: str, email: str, hashed_password: str, role: Role = Role.USER) -> UserInDB:
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise UserExists()
            uid = uuid.uuid4().hex
            user = UserInDB(
                id=uid,
                name=name,
                email=email,
                role=role,
                hashed_password=hashed_password,
                createdAt=utcnow(),
            )
            self._users[uid] = user
            return user.model_copy()

    def get(self, user_id: str) -> Optional[UserInDB]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_by_email(self, email: str) -> Optional[UserInDB]:
        with self._lock:
            for u in self._users.values():
                if u.email == email:
                    return u.model_copy()
        return None

    def set_role(self, email: str, role: Role) -> Optional[UserInDB]:
        with self._lock:
            for uid, u in self._users.items():
                if u.email == email:
                    self._users[uid] = u.model_copy(update={"role": role})
                    return self._users[uid].model_copy()
        return None

    def clear(self) -> None:
        with self._lock:
            self._users.clear()


def build_stores(backend: str = STORE_BACKEND) -> Tuple[InventoryStore, UserStore, Optional[Any]]:
    """Return (inventory store, user store, client to close on shutdown)."""
    if backend == "mongo":
        from .mongo import MongoInventoryStore, MongoUserStore, get_client, get_collections

        client = get_client()
        sweets, users = get_collections(client)
        return MongoInventoryStore(sweets), MongoUserStore(users), client
    if backend != "memory":
        raise ValueError(f"unknown STORE_BACKEND {backend!r}")
    return InMemoryInventoryStore(), InMemoryUserStore(), None
