"""
Per-key locks for mutations.

Postings serialize per account and closing runs per close date.
Reporting never takes a lock: it only reads.
"""

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator


class AccountLockRegistry:
    """
    Hands out one threading.Lock per key, created on first use.

    `hold()` takes several keys at once in sorted order, so two
    transfers between the same pair of accounts can never deadlock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        # Ids in numeric order; mixed key types grouped by type
        ordered = sorted(set(keys), key=lambda k: (type(k).__name__, k))
        acquired = []
        try:
            for key in ordered:
                lock = self.lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


# Process-wide registries
account_locks = AccountLockRegistry()
closing_locks = AccountLockRegistry()

# Held while a posting is stamped and committed, and while a closing
# run picks its read_as_of: a row stamped before the cut-off is
# always committed before any adapter reads.
commit_gate = threading.Lock()
