from __future__ import annotations

import logging
import re
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]
Clock = Callable[[], float]

_API_KEY_PARAM = re.compile(r"(api_key=)[^&]*")


def _redact_key(key: str) -> str:
    return _API_KEY_PARAM.sub(r"\1***", key)


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float


class RequestCache:
    """In-memory TTL cache for upstream JSON, keyed by full request URL.

    Entries are valid while ``clock() < expires_at``; an expired entry is a
    miss and gets replaced by the next successful load. Failed loads never
    touch the cache.

    ``max_entries=None`` keeps every entry until :meth:`invalidate`,
    :meth:`clear` or process exit. With a cap, hits refresh recency and
    stores beyond the cap evict the least recently used entry.
    """

    def __init__(self, *, max_entries: int | None = None, clock: Clock = time.monotonic) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be greater than 0")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._is_valid(entry)

    def _is_valid(self, entry: CacheEntry) -> bool:
        return self._clock() < entry.expires_at

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None or not self._is_valid(entry):
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
        self._entries.move_to_end(key)
        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                logger.debug("cache evicted oldest entry size=%s", len(self._entries))

    async def fetch_cached(self, key: str, loader: Loader, ttl: float, bypass: bool = False) -> Any:
        if not bypass:
            entry = self._entries.get(key)
            if entry is not None and self._is_valid(entry):
                self._entries.move_to_end(key)
                logger.debug("cache hit key=%s", _redact_key(key))
                return entry.value

        logger.debug("cache miss key=%s bypass=%s", _redact_key(key), bypass)
        value = await loader()
        self.set(key, value, ttl)
        return value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
