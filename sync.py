"""Cart and wishlist state, mirrored to whichever store currently backs it.

Signed out, the backing store is local storage; signed in, it is the
user's rows on the API. Every mutation updates memory first and then
writes through; a failed write is logged and the in-memory list stays
authoritative. Signing in replaces the in-memory list with the remote
one, local contents are not merged.
"""

import logging
from typing import Any, Dict, List, Optional

from api import ApiClient, RemoteListStore
from errors import ApiError
from session import SessionHolder
from storage import CART_KEY, WISHLIST_KEY, LocalListStore, LocalStorage

logger = logging.getLogger(__name__)


class ListSynchronizer:
    kind: str = ""

    def __init__(self, session: SessionHolder, storage: LocalStorage, api: ApiClient):
        self.local = LocalListStore(storage, self.kind)
        self.remote = RemoteListStore(api, self.kind)
        self.store = None
        self._items: List[Dict[str, Any]] = []
        self._user_id: Optional[str] = None
        self._select(session.identity)
        self._unsubscribe = session.subscribe(self._on_session_change)

    @property
    def items(self) -> List[Dict[str, Any]]:
        return [dict(item) for item in self._items]

    def __len__(self):
        return len(self._items)

    def __contains__(self, product_id) -> bool:
        return self._find(product_id) is not None

    def close(self):
        self._unsubscribe()

    def _on_session_change(self, event: str, identity: Optional[Dict[str, Any]]):
        user_id = identity["id"] if identity else None
        if user_id != self._user_id:
            self._select(identity)

    def _select(self, identity: Optional[Dict[str, Any]]):
        if identity is None:
            self._user_id = None
            self.store = self.local
            self._items = self.local.load()
            return
        self._user_id = identity["id"]
        self.store = self.remote
        try:
            self._items = self.remote.load()
        except ApiError as e:
            logger.warning("Could not load %s for %s: %s", self.kind, self._user_id, e)
            self._items = []

    def _find(self, product_id) -> Optional[Dict[str, Any]]:
        for item in self._items:
            if item["id"] == product_id:
                return item
        return None

    def _commit(self, items: List[Dict[str, Any]], discarded: Optional[str] = None):
        self._items = items
        try:
            if discarded is not None:
                self.store.discard(discarded, self.items)
            else:
                self.store.save(self.items)
        except ApiError as e:
            logger.warning("Failed to mirror %s to %s store: %s", self.kind,
                           "remote" if self.store is self.remote else "local", e)

    def remove(self, product_id):
        if self._find(product_id) is None:
            return
        self._commit([item for item in self._items if item["id"] != product_id], discarded=product_id)


class CartSync(ListSynchronizer):
    kind = CART_KEY

    @property
    def count(self) -> int:
        return sum(item["quantity"] for item in self._items)

    @property
    def subtotal(self) -> float:
        return sum(float(item["price"]) * item["quantity"] for item in self._items)

    def add(self, product: Dict[str, Any], quantity: int = 1):
        if quantity < 1:
            return
        if self._find(product["id"]) is not None:
            items = [
                dict(item, quantity=item["quantity"] + quantity) if item["id"] == product["id"] else item
                for item in self._items
            ]
        else:
            items = self._items + [dict(product, quantity=quantity)]
        self._commit(items)

    def set_quantity(self, product_id, quantity: int):
        """Quantities below 1 are ignored; use remove() to drop an item."""
        if quantity < 1 or self._find(product_id) is None:
            return
        self._commit([
            dict(item, quantity=quantity) if item["id"] == product_id else item
            for item in self._items
        ])

    def clear(self):
        self._commit([])


class WishlistSync(ListSynchronizer):
    kind = WISHLIST_KEY

    def add(self, product: Dict[str, Any]):
        if self._find(product["id"]) is not None:
            return
        entry = {k: v for k, v in product.items() if k != "quantity"}
        self._commit(self._items + [entry])

    def contains(self, product_id) -> bool:
        return product_id in self
