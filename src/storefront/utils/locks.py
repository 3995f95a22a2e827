"""Keyed lock registry — one lock per key, no lock shared between keys."""

from contextlib import contextmanager
from threading import Lock


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = Lock()
        self.holders = 0


class KeyedLocks:
    """Hands out a dedicated lock per key (product id, order id, ...).

    The registry's own guard is held only while looking up, creating or
    evicting the entry for a key, never while the caller holds the key's lock.
    An entry lives only while some thread holds or waits on it.
    """

    def __init__(self):
        self._guard = Lock()
        self._entries: dict[str, _Entry] = {}

    @contextmanager
    def hold(self, key):
        key = str(key)
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]

    def __len__(self):
        return len(self._entries)
