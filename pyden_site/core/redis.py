from __future__ import annotations
import redis.asyncio as redis
from redis.exceptions import RedisError

from .config import get_settings
from .logging import get_logger

_settings = get_settings()
_r: redis.Redis | None = None
log = get_logger("ratelimit")

def get_redis() -> redis.Redis:
    global _r
    if _r is None:
        _r = redis.from_url(
            _settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=_settings.redis_timeout_seconds,
            socket_timeout=_settings.redis_timeout_seconds,
        )
    return _r

async def ping_redis() -> bool:
    try:
        r = get_redis()
        pong = await r.ping()
        return bool(pong)
    except (RedisError, OSError):
        return False

async def close_redis() -> None:
    global _r
    if _r is not None:
        await _r.aclose()
        _r = None

# ---- Simple fixed-window rate limit per IP/route ----
async def allow_request(ip: str, route_key: str, max_reqs: int) -> bool:
    """
    Fixed window: increment a counter key; allow if <= max.
    The window starts with the first request and is not extended by later ones.
    Fails open when Redis is unreachable.
    """
    if not _settings.rl_enabled:
        return True
    key = f"rl:{route_key}:{ip}"
    try:
        r = get_redis()
        pipe = r.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = await pipe.execute()
        # no expiry yet: this request opened the window
        if ttl < 0:
            await r.expire(key, _settings.rl_window_seconds)
    except (RedisError, OSError) as e:
        log.warning("rate limiter unavailable, allowing %s %s: %s", route_key, ip, e)
        return True
    return int(count) <= max_reqs
