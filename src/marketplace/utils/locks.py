"""Per-record serialization points.

Every read-validate-write sequence on a contended record runs while holding
that record's lock: stock changes and rating recomputation under
``product:<id>``, status and payment changes under ``order:<id>``. Locks on
unrelated keys never block each other.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import structlog

from marketplace.config import lock_timeout_seconds
from marketplace.errors import StorageConflict

logger = structlog.get_logger(__name__)


def product_key(product_id) -> str:
    return f"product:{product_id}"


def order_key(order_id) -> str:
    return f"order:{order_id}"


def order_number_key(order_number: str) -> str:
    return f"order-number:{order_number}"


def review_key(product_id, buyer_id) -> str:
    return f"review:{product_id}:{buyer_id}"


class KeyedLocks:
    """A registry of re-entrant locks addressed by string key.

    An entry lives only while some thread holds or waits on its lock, so the
    registry stays as small as the set of records currently in contention.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: str):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, keys: Iterable[str], timeout: float | None = None) -> Iterator[None]:
        """Acquire every lock in ``keys`` for the duration of the block.

        Keys are taken in sorted order so two holders of overlapping key sets
        cannot deadlock. Raises ``StorageConflict`` if any lock is not granted
        within ``timeout`` seconds; locks already taken are released first.
        """
        wait = lock_timeout_seconds() if timeout is None else timeout
        acquired = []
        try:
            for key in sorted(set(keys)):
                lock = self._checkout(key)
                if not lock.acquire(timeout=wait):
                    self._checkin(key)
                    logger.warning("Timed out waiting for record lock", key=key, timeout=wait)
                    raise StorageConflict(f"Timed out waiting for {key}")
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)


locks = KeyedLocks()
