import redis.asyncio as aioredis

from .config import settings

# Lazy: no connection is opened until the first command
redis_client = aioredis.from_url(settings.redis_url, decode_responses=True)
