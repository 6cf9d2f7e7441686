"""
Per-ship serialization for ledger mutations.

Banking and pooling read a balance, check it, then write it back. Two such
operations on the same ship must not interleave inside one process, so each
mutation holds the ship's lock for the whole read-check-write sequence.
Operations on different ships never wait on each other.

Across processes the storage adapter's row locks (SELECT ... FOR UPDATE)
provide the same guarantee.
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from typing import Dict, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


class ShipLockRegistry:
    """
    Thread-safe registry of one re-entrant lock per ship id.

    Multi-ship callers must go through ``hold()``, which acquires locks in
    sorted id order so two pools sharing ships cannot deadlock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def lock_for(self, ship_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(ship_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[ship_id] = lock
            return lock

    @contextmanager
    def hold(self, ship_ids: Iterable[str]) -> Iterator[None]:
        """Hold the locks of every ship in ``ship_ids`` for the block."""
        ordered = sorted(set(ship_ids))
        with ExitStack() as stack:
            for ship_id in ordered:
                stack.enter_context(self.lock_for(ship_id))
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


_registry: Optional[ShipLockRegistry] = None
_registry_lock = threading.Lock()


def get_ship_locks() -> ShipLockRegistry:
    """Process-wide registry shared by every request."""
    global _registry
    if _registry is None:
        with _registry_lock:
            # Double-check locking
            if _registry is None:
                _registry = ShipLockRegistry()
                logger.info("Ship lock registry initialized")
    return _registry
