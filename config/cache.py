# config/cache.py
from typing import Awaitable, Callable, Optional
from fastapi import Request
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis, from_url
from config.settings import settings

# Redis only backs the optional submission rate limiter; jobs never touch it.
_client: Optional[Redis] = None


async def get_redis() -> Redis:
    global _client
    if _client is None:
        _client = from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_keepalive=True,
            health_check_interval=30,
        )
        # Fail fast on startup if Redis is unreachable.
        await _client.ping()
    return _client


async def init_rate_limiter(identifier: Callable[[Request], Awaitable[str]]) -> bool:
    """Connect the limiter when RATE_LIMIT_ENABLED; returns whether it is active."""
    if not settings.RATE_LIMIT_ENABLED:
        return False
    redis = await get_redis()
    await FastAPILimiter.init(redis, identifier=identifier)
    return True


async def close_rate_limiter() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
