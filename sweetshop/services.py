import logging
from typing import List, Optional

from .core import SweetIn, SweetUpdate
from .database import InventoryStore
from .errors import InsufficientStock, InvalidAmount, NotFound
from .models import Category, Sweet

logger = logging.getLogger(__name__)

# This file contains the business logic behind the sweets endpoints.


class InventoryDecrementService:
    """Race-free stock decrement.

    Holds no state besides the injected store and takes no locks: all
    serialization happens inside `store.conditional_decrement`. Any number of
    callers, threads or processes can share one instance. Concurrent purchases
    of the same item are applied in whatever order the store sees them.
    """

    def __init__(self, store: InventoryStore):
        self.store = store

    def purchase(self, item_id: str, amount: Optional[int] = 1) -> Sweet:
        """Take `amount` units of `item_id` out of stock.

        Returns the updated item. Raises InvalidAmount before touching the
        store, NotFound, InsufficientStock (with the quantity seen by the
        follow-up read) or StoreUnavailable from the store itself. Nothing is
        retried and no failure leaves a partial change behind.
        """
        if amount is None:
            amount = 1
        # bool is an int subclass; True is not a quantity.
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise InvalidAmount(amount)

        sweet = self.store.conditional_decrement(item_id, amount)
        if sweet is not None:
            logger.info("purchase ok item=%s amount=%d left=%d", item_id, amount, sweet.quantity)
            return sweet

        # One read to tell "missing" from "not enough". The quantity it sees
        # may already be stale; it is only reported, never acted on.
        existing = self.store.get(item_id)
        if existing is None:
            logger.info("purchase rejected item=%s: not found", item_id)
            raise NotFound(item_id)
        logger.info(
            "purchase rejected item=%s: requested %d, available %d",
            item_id, amount, existing.quantity,
        )
        raise InsufficientStock(available=existing.quantity, requested=amount)


class CatalogService:
    def __init__(self, store: InventoryStore):
        self.store = store

    def list_sweets(self, category: Optional[Category] = None, in_stock: Optional[bool] = None) -> List[Sweet]:
        return self.store.list(category=category, in_stock=in_stock)

    def search_sweets(self, name: str) -> List[Sweet]:
        name = name.strip()
        if not name:
            return []
        return self.store.search(name)

    def get_sweet(self, item_id: str) -> Sweet:
        sweet = self.store.get(item_id)
        if sweet is None:
            raise NotFound(item_id)
        return sweet

    def create_sweet(self, payload: SweetIn) -> Sweet:
        sweet = self.store.create(payload)
        logger.info("sweet created id=%s name=%r quantity=%d", sweet.id, sweet.name, sweet.quantity)
        return sweet

    def update_sweet(self, item_id: str, payload: SweetUpdate) -> Sweet:
        changes = payload.changes()
        if not changes:
            return self.get_sweet(item_id)
        sweet = self.store.update(item_id, changes)
        if sweet is None:
            raise NotFound(item_id)
        logger.info("sweet updated id=%s fields=%s", item_id, sorted(changes))
        return sweet

    def delete_sweet(self, item_id: str) -> None:
        if not self.store.delete(item_id):
            raise NotFound(item_id)
        logger.info("sweet deleted id=%s", item_id)
