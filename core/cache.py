# core/cache.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from django.core.cache import caches

log = logging.getLogger(__name__)

_MISS = object()


class QueryCache:
    """
    Cache-aside helper over a named Django cache alias.

    The cache is an optimisation only: any backend failure (Redis down, bad
    alias, unpicklable value) is logged and behaves like a miss, so callers
    never branch on cache health.
    """

    def __init__(self, alias: str = "default", *, prefix: str = "feedhub"):
        self.alias = alias
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    def get(self, key: str) -> Optional[Any]:
        try:
            value = caches[self.alias].get(self._key(key), _MISS)
        except Exception as e:
            log.warning("cache.degraded op=get key=%s err=%s", key, e)
            return None
        return None if value is _MISS else value

    def set(self, key: str, value: Any, ttl: int) -> None:
        try:
            caches[self.alias].set(self._key(key), value, timeout=ttl)
        except Exception as e:
            log.warning("cache.degraded op=set key=%s err=%s", key, e)

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            caches[self.alias].delete_many([self._key(k) for k in keys])
        except Exception as e:
            log.warning("cache.degraded op=delete keys=%s err=%s", keys, e)

    def get_or_set(self, key: str, ttl: int, loader: Callable[[], Any]) -> Any:
        value = self.get(key)
        if value is None:
            value = loader()
            self.set(key, value, ttl)
        return value
