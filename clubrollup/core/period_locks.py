"""In-process keyed locks serializing summary writes per period key."""

from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from threading import Lock


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = Lock()
        self.users = 0


class PeriodLockRegistry:
    """Hands out one lock per period key.

    Two recomputation runs in this process touching the same (entity, year,
    month) take the same lock, so at most one upsert per key is in flight.
    Distinct keys never contend with each other. A key's entry lives only
    while some caller holds or waits on it.

    Writers in other processes are serialized by the row lock the summary
    store takes on read (``SELECT ... FOR UPDATE``), not by this registry.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry] = {}
        self._guard = Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0 and self._entries.get(key) is entry:
                    del self._entries[key]

    def is_held(self, key: Hashable) -> bool:
        with self._guard:
            entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    def reset(self) -> None:
        """Forget every tracked key (useful for testing)."""
        with self._guard:
            self._entries.clear()


# Module-level registry shared by every recomputation in this process
period_locks = PeriodLockRegistry()
