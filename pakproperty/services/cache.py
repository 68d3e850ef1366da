import json

from redis.asyncio import Redis
from redis.exceptions import RedisError
from structlog import get_logger

from pakproperty.config import settings

logger = get_logger()

FEATURED_KEY = "featured-properties"

# Initialize Redis client lazily for reuse
redis_client: Redis | None = None

async def get_redis_client():
    global redis_client
    if not settings.REDIS_URL:
        return None
    if redis_client is None:
        redis_client = Redis.from_url(settings.REDIS_URL)
    return redis_client

async def close_redis_client():
    global redis_client
    if redis_client is not None:
        await redis_client.close()
        redis_client = None

async def get_cached(key: str):
    redis = await get_redis_client()
    if redis is None:
        return None
    try:
        cached = await redis.get(key)
    except RedisError as e:
        logger.error("Redis read failed", key=key, error=str(e))
        return None
    return json.loads(cached) if cached else None

async def set_cached(key: str, value, ttl: int):
    redis = await get_redis_client()
    if redis is None:
        return
    try:
        await redis.setex(key, ttl, json.dumps(value))
    except RedisError as e:
        logger.error("Redis write failed", key=key, error=str(e))

async def invalidate(*keys: str):
    redis = await get_redis_client()
    if redis is None:
        return
    try:
        await redis.delete(*keys)
    except RedisError as e:
        logger.error("Redis invalidation failed", keys=list(keys), error=str(e))
