import logging
import uuid
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Rejected input. The message is the human-readable reason."""


def new_id():
    return uuid.uuid4().hex


class Repository:
    """
    Collection of one entity type stored as a JSON array under ``key``.

    Every mutation re-reads the whole array, edits it in memory and writes it
    back once, all while holding the store's lock for that key.
    """

    key = None
    model = None

    def __init__(self, store):
        self.store = store

    def _read(self):
        """Decoded records, plus the raw rows that failed to decode."""
        items, unreadable = [], []
        for row in self.store.get_collection(self.key):
            try:
                items.append(self.model.from_dict(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable %s record %r (%s)", self.key, row.get('id'), e)
                unreadable.append(row)
        return items, unreadable

    def _load(self):
        return self._read()[0]

    def all(self):
        return self._load()

    def get(self, record_id):
        record_id = str(record_id)
        for item in self._load():
            if item.id == record_id:
                return item
        return None

    def save_all(self, items):
        self.store.set_collection(self.key, [item.to_dict() for item in items])

    @contextmanager
    def editing(self):
        """
        Yield the full list for in-place edits; written back once on clean exit.
        Rows that could not be decoded are written back untouched after it.
        """
        with self.store.transaction(self.key):
            items, unreadable = self._read()
            yield items
            self.store.set_collection(self.key, [item.to_dict() for item in items] + unreadable)

    def add(self, item):
        with self.editing() as items:
            items.append(item)
        return item

    def replace(self, item):
        """Swap the stored record with the same id. Returns False if absent."""
        with self.editing() as items:
            for i, existing in enumerate(items):
                if existing.id == item.id:
                    items[i] = item
                    return True
        return False

    def remove(self, record_id):
        """Delete by id and return the removed record (None if absent)."""
        record_id = str(record_id)
        with self.editing() as items:
            for i, existing in enumerate(items):
                if existing.id == record_id:
                    return items.pop(i)
        return None
