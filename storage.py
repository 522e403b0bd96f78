"""Browser-style local storage for signed-out shoppers."""

import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CART_KEY = "cart"
WISHLIST_KEY = "wishlist"


class LocalStorage:
    """String key/value store, persisted to a JSON file when a path is given."""

    def __init__(self, path: Optional[str] = None):
        self.path = os.path.expanduser(path) if path else None
        self._items: Dict[str, str] = {}
        if self.path and os.path.exists(self.path):
            self._items = self._read()

    def _read(self) -> Dict[str, str]:
        """Load the backing file; an unreadable or malformed file counts as empty."""
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable local storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed local storage file %s", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str):
        self._items.pop(key, None)
        self._flush()

    def _flush(self):
        if not self.path:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(self._items, fh)


class LocalListStore:
    """A JSON list under one LocalStorage key. Never raises."""

    def __init__(self, storage: LocalStorage, key: str):
        self.storage = storage
        self.key = key

    def load(self) -> List[Dict[str, Any]]:
        try:
            raw = self.storage.get_item(self.key)
            items = json.loads(raw) if raw else []
        except (TypeError, ValueError, OSError) as e:
            logger.warning("Error reading %s from local storage: %s", self.key, e)
            return []
        if not isinstance(items, list):
            logger.warning("Discarding malformed %s in local storage", self.key)
            return []
        valid = [i for i in items if isinstance(i, dict) and "id" in i]
        if len(valid) != len(items):
            logger.warning("Dropped %d malformed %s entries", len(items) - len(valid), self.key)
        return valid

    def save(self, items: List[Dict[str, Any]]):
        try:
            self.storage.set_item(self.key, json.dumps(items))
        except (TypeError, ValueError, OSError) as e:
            logger.warning("Error saving %s to local storage: %s", self.key, e)

    def discard(self, product_id: str, items: List[Dict[str, Any]]):
        self.save(items)
