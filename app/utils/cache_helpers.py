import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from app.config import settings

logger = logging.getLogger(__name__)

CACHE_TTL = settings.catalog_cache_ttl_seconds  # 30 minutes


class TTLCache:
    """
    Time-boxed key/value cache.

    A value is served while younger than ``ttl`` seconds. On expiry, or when
    the caller forces a refresh, ``fetch`` is called again; if that raises and
    an older value exists, the older value is served instead of the error.
    """

    def __init__(self, ttl: int = CACHE_TTL, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str, fetch: Callable[[], Any], refresh: bool = False) -> Any:
        entry = self._entries.get(key)
        now = self._clock()

        if entry and not refresh and now - entry[0] < self.ttl:
            return entry[1]

        try:
            data = fetch()
        except Exception:
            if entry is None:
                raise
            logger.exception(f"Refreshing cache key {key} failed, serving stale data")
            return entry[1]

        self._entries[key] = (now, data)
        return data

    def peek(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        return entry[1] if entry else None

    def clear(self, key: Optional[str] = None):
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)


catalog_cache = TTLCache()
