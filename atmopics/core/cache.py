from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class CacheDecision:
    enabled: bool
    ttl_seconds: int = 0


class MemoryCache:
    """
    Simple deterministic memory cache with FIFO eviction.
    (FIFO is stable + predictable; identity mappings rarely churn.)
    """
    def __init__(self, limit: int = 256):
        self._limit = max(1, limit)
        self._store: Dict[str, Tuple[float, Any]] = {}  # key -> (expires_at, data)

    def get(self, key: str) -> Optional[Any]:
        item = self._store.get(key)
        if not item:
            return None
        expires_at, data = item
        if expires_at and time.time() > expires_at:
            self._store.pop(key, None)
            return None
        return data

    def set(self, key: str, data: Any, ttl_seconds: int) -> None:
        if key not in self._store and len(self._store) >= self._limit:
            oldest = next(iter(self._store))
            self._store.pop(oldest, None)
        expires_at = time.time() + ttl_seconds if ttl_seconds > 0 else 0.0
        self._store[key] = (expires_at, data)

    def __len__(self) -> int:
        return len(self._store)

    def clear(self) -> None:
        self._store.clear()


class IdentityCache:
    """
    did -> RepositoryLocation cache.

    A TTL of zero disables caching entirely so every request resolves fresh.
    """
    def __init__(self, ttl_seconds: int = 0, limit: int = 256):
        self.decision = CacheDecision(enabled=ttl_seconds > 0, ttl_seconds=max(0, ttl_seconds))
        self._mem = MemoryCache(limit=limit)

    def get(self, did: str) -> Optional[Any]:
        if not self.decision.enabled:
            return None
        return self._mem.get(did)

    def set(self, did: str, location: Any) -> None:
        if self.decision.enabled:
            self._mem.set(did, location, ttl_seconds=self.decision.ttl_seconds)

    def clear(self) -> None:
        self._mem.clear()
