import datetime as dt
import fnmatch

import pytest

from brandos import jobs, media_api
from brandos.config import settings
from brandos.storage import ContentStore


class FakeRedis:
    """Just enough of redis-py (decode_responses=True) for jobs and the OG cache."""

    def __init__(self):
        self.kv = {}
        self.hashes = {}
        self.lists = {}
        self.ttls = {}

    def get(self, key):
        return self.kv.get(key)

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.kv:
            return None
        self.kv[key] = str(value)
        if ex:
            self.ttls[key] = ex
        return True

    def setex(self, key, ttl, value):
        self.kv[key] = str(value)
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        n = 0
        for key in keys:
            for store in (self.kv, self.hashes, self.lists):
                if key in store:
                    del store[key]
                    n += 1
        return n

    def expire(self, key, ttl):
        self.ttls[key] = ttl
        return True

    def hset(self, key, mapping=None, **kwargs):
        h = self.hashes.setdefault(key, {})
        h.update({k: str(v) for k, v in (mapping or {}).items()})
        return len(mapping or {})

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def hincrby(self, key, field, amount=1):
        h = self.hashes.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + int(amount))
        return int(h[field])

    def rpush(self, key, *values):
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    def _slice(self, items, start, end):
        n = len(items)
        if start < 0:
            start = max(0, n + start)
        end = n + end if end < 0 else end
        return items[start:end + 1]

    def ltrim(self, key, start, end):
        self.lists[key] = self._slice(self.lists.get(key, []), start, end)
        return True

    def lrange(self, key, start, end):
        return self._slice(self.lists.get(key, []), start, end)

    def scan_iter(self, match="*"):
        keys = list(self.kv) + list(self.hashes) + list(self.lists)
        return [k for k in keys if fnmatch.fnmatch(k, match)]


@pytest.fixture
def fake_redis(monkeypatch):
    r = FakeRedis()
    monkeypatch.setattr(jobs, "get_redis", lambda: r)
    monkeypatch.setattr(media_api, "get_redis", lambda: r)
    return r


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    path = tmp_path / "data"
    monkeypatch.setattr(settings, "data_dir", str(path))
    monkeypatch.setattr(settings, "db_path", str(tmp_path / "brandos.db"))
    return path


@pytest.fixture
def store(data_dir):
    return ContentStore(str(data_dir))


@pytest.fixture
def no_keys(monkeypatch):
    monkeypatch.setattr(settings, "perplexity_api_key", "")
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    monkeypatch.setattr(settings, "pexels_api_key", "")


@pytest.fixture
def now():
    return dt.datetime(2025, 3, 10, 12, 0, tzinfo=dt.timezone.utc)


def make_item(title, source="Smashing Magazine", link=None, pub_date="2025-03-10T08:00:00Z",
              description=None, category="design-ux"):
    return {
        "title": title,
        "link": link or f"https://{source.lower().replace(' ', '')}.com/{abs(hash(title)) % 10000}",
        "pub_date": pub_date,
        "description": description,
        "source": source,
        "source_category": category,
    }


def news_item(title, sources=None, timestamp="03/10/2025, 8:00 AM", **extra):
    item = {
        "title": title,
        "description": extra.pop("description", f"About {title}"),
        "timestamp": timestamp,
        "sources": sources if sources is not None else [{"name": "Wired", "url": "https://wired.com/a"}],
    }
    item.update(extra)
    return item
