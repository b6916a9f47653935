"""
Short-lived per-owner cache for the course list endpoint.

Entries hold the already serialized list so a hit never touches the DB.
Any write for an owner drops that owner's entry and bumps its generation;
a list read that started before the write carries the old generation and
is not stored.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class CourseListCache:
    def __init__(self, ttl_seconds: int = 60, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def generation(self, owner_email: str) -> int:
        with self._lock:
            return self._generations.get(owner_email, 0)

    def get(self, owner_email: str) -> Optional[Any]:
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(owner_email)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[owner_email]
                return None
            return entry.value

    def set(self, owner_email: str, value: Any, generation: Optional[int] = None) -> bool:
        """
        Store value unless the owner was invalidated since `generation` was read.
        Returns whether the value was stored.
        """
        if not self.enabled:
            return False
        with self._lock:
            if generation is not None and generation != self._generations.get(owner_email, 0):
                return False
            self._entries[owner_email] = _CacheEntry(
                value=value, expires_at=self._clock() + self.ttl_seconds
            )
            return True

    def invalidate(self, owner_email: str) -> None:
        with self._lock:
            self._entries.pop(owner_email, None)
            self._generations[owner_email] = self._generations.get(owner_email, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
