from brandos import redis_client
from brandos.config import settings


def test_client_is_shared_until_reset(monkeypatch):
    monkeypatch.setattr(settings, "redis_url", "redis://localhost:6399/3")
    redis_client.reset_redis()

    first = redis_client.get_redis()
    assert redis_client.get_redis() is first
    assert first.connection_pool.connection_kwargs["db"] == 3

    redis_client.reset_redis()
    assert redis_client.get_redis() is not first
    redis_client.reset_redis()
