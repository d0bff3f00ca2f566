"""In-memory response cache for fetched content.

Owned by whoever constructs the Fetcher; nothing here is process-global.
Entries expire after `ttl_seconds` and the least recently used entry is
evicted once `max_entries` is reached.
"""

import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from ..config import get_settings
from ..schemas.evidence import FetchResult


class ResponseCache:
    def __init__(self, ttl_seconds: Optional[float] = None, max_entries: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic):
        settings = get_settings()
        ttl_seconds = settings.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        max_entries = settings.CACHE_MAX_ENTRIES if max_entries is None else max_entries
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, FetchResult]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, url: str) -> Optional[FetchResult]:
        entry = self._entries.get(url)
        if entry is None:
            return None
        stored_at, result = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[url]
            return None
        self._entries.move_to_end(url)
        return result

    def put(self, url: str, result: FetchResult) -> None:
        if url in self._entries:
            self._entries.move_to_end(url)
        self._entries[url] = (self._clock(), result)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
