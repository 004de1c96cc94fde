from __future__ import annotations

import threading

from cachetools import TTLCache

from .config import settings

# Serialised analytics results keyed by a hash of the request snapshot.
result_cache: TTLCache[str, dict] = TTLCache(
    maxsize=settings.analytics_cache_size, ttl=settings.analytics_cache_ttl
)
# Sync routes run in the threadpool; TTLCache itself is not thread-safe.
result_cache_lock = threading.Lock()
