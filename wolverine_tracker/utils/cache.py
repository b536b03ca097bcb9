# wolverine_tracker/utils/cache.py
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar("T")

_MISSING = object()


@dataclass
class TTLCache(Generic[T]):
    """In-memory memo whose entries expire ``ttl_seconds`` after being stored.

    A ``ttl_seconds`` of 0 disables caching: nothing is ever stored.
    """

    ttl_seconds: float
    clock: Callable[[], float] = time.monotonic
    _entries: Dict[Hashable, Tuple[float, Any]] = field(
        default_factory=dict, init=False, repr=False
    )

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Returns the cached value, or ``default`` when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        expires_at, value = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return default
        return value

    def set(self, key: Hashable, value: T) -> None:
        if self.ttl_seconds <= 0:
            return
        self._entries[key] = (self.clock() + self.ttl_seconds, value)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        self._cleanup()
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def _cleanup(self) -> None:
        """Remove expired entries."""
        now = self.clock()
        self._entries = {k: e for k, e in self._entries.items() if e[0] > now}


def is_fresh(stored_at: Optional[float], ttl_seconds: float, now: float) -> bool:
    """True when something stored at ``stored_at`` is still within its TTL."""
    return stored_at is not None and ttl_seconds > 0 and now - stored_at < ttl_seconds
