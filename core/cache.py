import time
from typing import Optional, Dict, Tuple

_cache: Dict[str, Tuple[str, float]] = {}


async def get_cache(key: str) -> Optional[str]:
    entry = _cache.get(key)
    if entry is None:
        return None
    value, expires_at = entry
    if expires_at < time.monotonic():
        _cache.pop(key, None)
        return None
    return value


async def set_cache(key: str, value: str, ttl: int = 300):
    _cache[key] = (value, time.monotonic() + ttl)


async def delete_cache(key: str):
    _cache.pop(key, None)


async def clear_cache():
    _cache.clear()
