"""
Process-local cache of computed dashboards, one entry per owner.

Any write that can move a record between categories must call
``invalidate`` for that owner.
"""
import threading
from datetime import date
from typing import Any, Dict, Optional, Tuple


class ProjectionCache:
    """
    Dashboard cache keyed by (owner id, today).

    - No TTL; the date in the key retires entries at midnight.
    - Guarded by a lock; safe to call from any thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: Dict[Tuple[int, date], Any] = {}

    def get(self, owner_id: int, today: date) -> Optional[Any]:
        with self._lock:
            return self._items.get((owner_id, today))

    def put(self, owner_id: int, today: date, value: Any) -> None:
        with self._lock:
            # Drop anything left over from earlier days for this owner
            for key in [k for k in self._items if k[0] == owner_id and k[1] != today]:
                del self._items[key]
            self._items[(owner_id, today)] = value

    def invalidate(self, owner_id: int) -> int:
        """Forget every cached projection for one owner. Returns entries removed."""
        with self._lock:
            keys = [k for k in self._items if k[0] == owner_id]
            for key in keys:
                del self._items[key]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


# Global, process-local singleton
PROJECTION_CACHE = ProjectionCache()
