import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from satoru.utils.logger import cache_logger

T = TypeVar("T")

# ===========================
# Cache Entry
# ===========================
@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    stored_at: float
    ttl_seconds: float

    def is_valid(self, now: float) -> bool:
        return now < self.stored_at + self.ttl_seconds


# ===========================
# TTL Cache With Single-Flight
# ===========================
class TTLCache:
    """In-process key/value store with per-entry TTL.

    ``get_or_set`` coalesces concurrent misses for one key: the first caller
    runs ``compute`` and every caller arriving while it is pending awaits the
    same future. Failures are shared with those waiters but never stored. If
    the computing caller is cancelled, the first waiter to wake recomputes.
    Expired entries are dropped lazily when their key is next read.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, asyncio.Future] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            del self._store[key]
            cache_logger.debug(f"Expired: {key}")
            return None
        return entry

    def set(self, key: str, value: Any, ttl: float) -> CacheEntry:
        entry = CacheEntry(key=key, value=value, stored_at=self._clock(), ttl_seconds=ttl)
        self._store[key] = entry
        return entry

    async def get_or_set(self, key: str, ttl: float, compute: Callable[[], Awaitable[T]]) -> T:
        while True:
            entry = self.get(key)
            if entry is not None:
                cache_logger.debug(f"Hit: {key}")
                return entry.value

            pending = self._inflight.get(key)
            if pending is None:
                return await self._compute(key, ttl, compute)

            cache_logger.debug(f"Joined: {key}")
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # only the computing caller was cancelled: take over its work
                if not pending.cancelled():
                    raise
                cache_logger.debug(f"Computation abandoned, retrying: {key}")

    async def _compute(self, key: str, ttl: float, compute: Callable[[], Awaitable[T]]) -> T:
        cache_logger.debug(f"Miss: {key}")
        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await compute()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # mark retrieved so an unjoined failure is not reported by asyncio
            future.exception()
            raise
        else:
            self.set(key, value, ttl)
            future.set_result(value)
            cache_logger.debug(f"Saved: {key} ({ttl}s)")
            return value
        finally:
            self._inflight.pop(key, None)

    def invalidate(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
