# app/services/cache_service.py
import json
from typing import Any

import redis

from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)


def cache_key(prefix: str, *parts) -> str:
    return ":".join([prefix, *(str(p) for p in parts)])


class CacheService:
    """Read-through cache of JSON values."""

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def get(self, key: str) -> Any | None:
        raw = self.redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    @redis_retry()
    def set(self, key: str, value: Any, ttl: int | None = None):
        self.redis.set(key, json.dumps(value, default=str), ex=ttl or None)

    @redis_retry()
    def delete(self, key: str):
        self.redis.delete(key)

    @redis_retry()
    def delete_by_prefix(self, prefix: str) -> int:
        keys = list(self.redis.scan_iter(match=f"{prefix}*"))
        if not keys:
            return 0
        logger.info(f"Invalidating {len(keys)} cache keys with prefix {prefix}")
        return self.redis.delete(*keys)
