"""Lock strategies for serialising vector store access."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class LockArena:
    """
    Maps collection names to locks.

    With ``per_collection=False`` (the default) every name shares one global
    re-entrant lock. With ``per_collection=True`` each collection gets its own
    lock, created on first use under the arena's lock, so operations on
    different collections do not block each other.
    """

    def __init__(self, per_collection: bool = False):
        self.per_collection = per_collection
        self._arena_lock = threading.Lock()
        self._global_lock = threading.RLock()
        self._locks: dict[str, threading.RLock] = {}

        logger.debug(f"Initialized LockArena (per_collection={per_collection})")

    def lock_for(self, collection_name: str) -> threading.RLock:
        """Return the lock guarding ``collection_name``."""
        if not self.per_collection:
            return self._global_lock

        with self._arena_lock:
            lock = self._locks.get(collection_name)
            if lock is None:
                lock = threading.RLock()
                self._locks[collection_name] = lock
            return lock

    @contextmanager
    def hold(self, collection_name: str) -> Iterator[None]:
        """Context manager acquiring the lock for ``collection_name``."""
        with self.lock_for(collection_name):
            yield

    @property
    def lock_count(self) -> int:
        """Number of dedicated per-collection locks allocated so far."""
        with self._arena_lock:
            return len(self._locks)
