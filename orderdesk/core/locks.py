# orderdesk/core/locks.py
"""
In-process keyed locks.

Serializes the duplicate check + write of order creation per customer and
(customer, product, business day) key, and status changes per order.
Locks for unrelated keys never block each other.

Scope is a single process. Across workers the database row lock taken by
the order service (SELECT ... FOR UPDATE on PostgreSQL) provides the same
guarantee.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterable, Iterator


class KeyedLocks:
    """
    Registry of reentrant locks created on demand and dropped when unused.

    Example:
        locks = KeyedLocks()
        with locks.hold(("order", order_id)):
            ...  # read-modify-write

        with locks.hold_many(keys):  # acquired in sorted order
            ...
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # key -> [lock, number of holders/waiters]
        self._entries: dict[Hashable, list] = {}

    def _checkout(self, key: Hashable) -> threading.RLock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._entries[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: Hashable) -> None:
        with self._guard:
            entry = self._entries[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._checkout(key)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            self._checkin(key)

    @contextmanager
    def hold_many(self, keys: Iterable[Hashable]) -> Iterator[None]:
        """
        Hold several keys at once.

        Keys are de-duplicated and acquired in sorted order so two
        requests sharing keys cannot deadlock. Keys must be mutually
        comparable, e.g. tuples tagged by a leading string.
        """
        ordered = sorted(set(keys))
        acquired: list[tuple[Hashable, threading.RLock]] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                acquired.append((key, lock))
                lock.acquire()
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)

    def active_keys(self) -> int:
        with self._guard:
            return len(self._entries)


order_locks = KeyedLocks()
