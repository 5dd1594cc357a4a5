import threading
from typing import Optional

import redis
from .config import settings

_lock = threading.Lock()
_client: Optional[redis.Redis] = None

def get_redis() -> redis.Redis:
    """One pooled client shared by request handlers and the background run thread."""
    global _client
    with _lock:
        if _client is None:
            _client = redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                health_check_interval=30,
            )
        return _client

def reset_redis() -> None:
    global _client
    with _lock:
        if _client is not None:
            _client.close()
        _client = None
