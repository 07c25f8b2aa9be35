import os
import json
import redis
from redis.exceptions import RedisError
from dotenv import load_dotenv

from app.core.logging_config import get_logger

load_dotenv()

logger = get_logger()

CACHE_PREFIX = os.getenv("CACHE_PREFIX", "rides")

_redis_client = None
_redis_down = False


def get_redis_client():
    """Shared client, or None when REDIS_URL is unset or the server is down.

    A failed connect is remembered so a quote does not pay the connect
    timeout on every request.
    """
    global _redis_client, _redis_down

    if _redis_client is not None or _redis_down:
        return _redis_client

    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        return None

    try:
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
    except RedisError as e:
        logger.warning(f"Redis unavailable, caching disabled: {e}")
        _redis_down = True
        return None

    logger.info("Redis connected")
    _redis_client = client
    return _redis_client


def cache_key(namespace: str, *parts) -> str:
    return ":".join([CACHE_PREFIX, namespace, "|".join(str(p).strip().lower() for p in parts)])


def get_cache(key: str):
    client = get_redis_client()
    if not client:
        return None

    try:
        data = client.get(key)
    except RedisError as e:
        logger.warning(f"Cache read failed | {key} | {e}")
        return None

    if not data:
        return None
    try:
        return json.loads(data)
    except ValueError:
        logger.warning(f"Dropping unreadable cache entry | {key}")
        client.delete(key)
        return None


def set_cache(key: str, value, ttl: int = 60):
    client = get_redis_client()
    if not client or ttl <= 0:
        return
    try:
        client.setex(key, ttl, json.dumps(value, default=str))
    except RedisError as e:
        logger.warning(f"Cache write failed | {key} | {e}")
