"""Per-record mutual exclusion for riders and deliveries.

Locks are process-local and re-entrant. Callers that need both records take
the delivery lock before the rider lock. An entry lives only while some
thread holds or waits for it.
"""

from contextlib import contextmanager
from threading import Lock, RLock


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = RLock()
        self.holders = 0


class RecordLocks:
    def __init__(self):
        self._guard = Lock()
        self._entries: dict[tuple[str, str], _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, kind: str, record_id):
        key = (kind, str(record_id))
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.holders += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]
