"""aiocache backends for cached ability rules."""

import logging
from urllib.parse import urlparse

from aiocache import Cache, SimpleMemoryCache
from aiocache.base import BaseCache
from aiocache.serializers import JsonSerializer

from rowguard.config import Settings

logger = logging.getLogger(__name__)

NAMESPACE = "rowguard"


def create_rule_cache(settings: Settings) -> BaseCache:
    """In-process memory cache, or Redis shared between workers."""
    if settings.ability_cache_backend == "redis":
        url = urlparse(settings.redis_url)
        logger.info("Using redis ability cache at %s:%s", url.hostname, url.port or 6379)
        return Cache(
            Cache.REDIS,
            endpoint=url.hostname or "localhost",
            port=url.port or 6379,
            db=int(url.path.lstrip("/") or 0),
            password=url.password,
            serializer=JsonSerializer(),
            namespace=NAMESPACE,
        )
    logger.info("Using in-memory ability cache")
    return SimpleMemoryCache(namespace=NAMESPACE)
