from types import SimpleNamespace

import pytest
import redis
from fastapi.testclient import TestClient

from brandos import chat_api, jobs, main, media_api
from brandos.config import settings
from brandos.content_api import get_store
from brandos.llm import LLMError
from brandos.pipeline import PipelineError
from conftest import news_item


@pytest.fixture
def client(fake_redis, data_dir):
    with TestClient(main.app) as c:
        yield c


class _InlineThread:
    def __init__(self, target, args=(), daemon=None):
        self.target = target
        self.args = args

    def start(self):
        self.target(*self.args)


def test_health_and_sources(client):
    assert client.get("/health").json() == {"ok": True}
    assert "Smashing Magazine" in client.get("/sources").json()["sources"]


# -- inspo ------------------------------------------------------------------

def test_inspo_requires_admin_password(client, monkeypatch):
    monkeypatch.setattr(settings, "admin_password", "secret")
    body = {"Name": "Coolors", "URL": "https://coolors.co"}
    assert client.post("/api/inspo", json=body).status_code == 401
    assert client.post("/api/inspo", json=body, headers={"X-Admin-Password": "nope"}).status_code == 401


def test_inspo_create_and_list(client, monkeypatch):
    monkeypatch.setattr(settings, "admin_password", "secret")
    headers = {"X-Admin-Password": "secret"}
    assert client.get("/api/inspo").json() == {"data": []}

    r = client.post("/api/inspo", json={"Name": "Coolors"}, headers=headers)
    assert r.status_code == 400

    r = client.post("/api/inspo", headers=headers, json={
        "Name": "Coolors", "URL": "https://coolors.co", "Category": "Color", "Featured": True, "Pricing": "",
    })
    assert r.status_code == 201
    row = r.json()["data"]
    assert row["Name"] == "Coolors"
    assert row["Featured"] is True
    assert row["OpenSource"] is False
    assert row["Pricing"] is None

    listed = client.get("/api/inspo").json()["data"]
    assert [x["URL"] for x in listed] == ["https://coolors.co"]


# -- media ------------------------------------------------------------------

@pytest.mark.parametrize("url,status", [("", 400), ("ftp://example.com", 400), ("http://localhost:8000/", 400),
                                        ("http://10.0.0.5/admin", 400)])
def test_og_image_rejects_bad_urls(client, url, status):
    assert client.get("/api/og-image", params={"url": url}).status_code == status


def test_og_image_is_cached(client, monkeypatch, fake_redis):
    calls = []

    def fake(url):
        calls.append(url)
        return {"image": "https://example.com/og.png", "title": "T", "description": None,
                "siteName": None, "favicon": None}

    monkeypatch.setattr(media_api, "fetch_og_data", fake)
    first = client.get("/api/og-image", params={"url": "https://example.com/post"}).json()
    second = client.get("/api/og-image", params={"url": "https://example.com/post"}).json()
    assert first == second
    assert first["image"] == "https://example.com/og.png"
    assert calls == ["https://example.com/post"]
    assert fake_redis.ttls["bos:og:https://example.com/post"] == settings.og_cache_ttl


def test_og_image_survives_redis_outage(client, monkeypatch):
    class DownRedis:
        def get(self, key):
            raise redis.ConnectionError("connection refused")

        def setex(self, key, ttl, value):
            raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(media_api, "get_redis", DownRedis)
    monkeypatch.setattr(media_api, "fetch_og_data", lambda url: {"image": None, "title": "T", "description": None,
                                                                  "siteName": None, "favicon": None})
    r = client.get("/api/og-image", params={"url": "https://example.com/post"})
    assert r.status_code == 200
    assert r.json()["title"] == "T"


def test_pexels_endpoint(client, monkeypatch):
    assert client.get("/api/pexels").status_code == 400
    monkeypatch.setattr(settings, "pexels_api_key", "")
    assert client.get("/api/pexels", params={"query": "figma"}).status_code == 500

    monkeypatch.setattr(settings, "pexels_api_key", "px")
    monkeypatch.setattr(media_api, "search_image", lambda q, per_page=5: None)
    assert client.get("/api/pexels", params={"query": "figma"}).status_code == 404

    image = {"imageUrl": "u", "photographer": "p", "pexelsUrl": "x", "alt": "a"}
    monkeypatch.setattr(media_api, "search_image", lambda q, per_page=5: image)
    assert client.get("/api/pexels", params={"query": "figma"}).json() == image


def test_article_enrich(client, monkeypatch, no_keys):
    assert client.post("/api/article-enrich", json={}).status_code == 400

    r = client.post("/api/article-enrich", json={
        "title": "Figma AI", "existingSources": [{"name": "Verge", "url": "https://theverge.com/a"}],
    })
    assert r.status_code == 200
    assert r.json()["allSources"][0]["url"] == "https://theverge.com/a"

    def boom(title, existing):
        raise LLMError("Perplexity API error: 401 - bad PERPLEXITY_API_KEY")

    monkeypatch.setattr(media_api, "enrich_article", boom)
    r = client.post("/api/article-enrich", json={"title": "Figma AI"})
    assert r.status_code == 502
    assert "PERPLEXITY_API_KEY" not in r.json()["detail"]


# -- chat -------------------------------------------------------------------

def test_chat_requires_messages(client):
    assert client.post("/api/chat", json={"messages": []}).status_code == 400


def test_chat_streams_and_reports_model(client, monkeypatch):
    seen = {}

    async def fake_stream(messages, model_id, system=None):
        seen["model"] = model_id
        seen["system"] = system
        for chunk in ("We ", "love ", "kerning."):
            yield chunk

    monkeypatch.setattr(chat_api, "stream_chat", fake_stream)
    r = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Define kerning"}]})
    assert r.status_code == 200
    assert r.text == "We love kerning."
    assert r.headers["x-model-used"] == "claude-haiku"
    assert seen["system"] == chat_api.CHAT_SYSTEM_PROMPT


def test_chat_explicit_model(client, monkeypatch):
    async def fake_stream(messages, model_id, system=None):
        yield model_id

    monkeypatch.setattr(chat_api, "stream_chat", fake_stream)
    r = client.post("/api/chat", json={"model": "sonar-pro", "messages": [{"role": "user", "content": "hi"}]})
    assert r.text == "sonar-pro"
    r = client.post("/api/chat", json={"model": "made-up", "messages": [{"role": "user", "content": "hi"}]})
    assert r.headers["x-model-used"] == "claude-sonnet"


def test_chat_provider_failure(client, monkeypatch):
    async def failing(messages, model_id, system=None):
        raise LLMError("ANTHROPIC_API_KEY not set")
        yield ""

    monkeypatch.setattr(chat_api, "stream_chat", failing)
    r = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})
    assert r.status_code == 502
    assert r.json()["detail"] == "[env] not set"


# -- content ----------------------------------------------------------------

def test_news_endpoints(client):
    assert client.get("/api/news/daily").status_code == 404
    assert client.get("/api/news/weekly-update").status_code == 404

    get_store().save_news([news_item(f"Story {i}", timestamp="2025-03-10T08:00:00Z") for i in range(5)],
                         date="2025-03-10T12:00:00Z")
    data = client.get("/api/news/weekly-update").json()
    assert len(data["updates"]) == 3

    cards = client.get("/api/news/weekly-update", params={"cards": True}).json()
    assert [c["id"] for c in cards["cards"]] == [f"news-weekly-update-{i}" for i in range(3)]
    assert cards["groups"][0]["featured"]["id"] == "news-weekly-update-0"


def test_ideas_endpoints(client):
    assert client.get("/api/ideas/podcast").status_code == 404
    assert client.get("/api/ideas/blog").status_code == 404
    assert client.get("/api/ideas/blog", params={"cards": True}).json() == {"type": "blog", "cards": [], "groups": []}

    get_store().save_ideas("blog", [{"title": "Idea", "description": "d"}], date="2025-03-10T12:00:00Z")
    assert client.get("/api/ideas/blog").json()["ideas"][0]["title"] == "Idea"
    assert client.get("/api/ideas/blog", params={"cards": True}).json()["cards"][0]["isPrompt"] is True


def test_article_endpoints(client):
    assert client.get("/api/articles").json() == {"generatedAt": None, "articles": []}
    assert client.get("/api/articles/missing").status_code == 404

    get_store().save_articles([{"slug": "figma-ai", "title": "Figma AI", "publishedAt": "2025-03-10T12:00:00Z"}])
    assert client.get("/api/articles/figma-ai").json()["title"] == "Figma AI"
    assert [a["slug"] for a in client.get("/api/articles").json()["articles"]] == ["figma-ai"]


def test_discover_endpoints(client):
    assert client.get("/api/discover").status_code == 400
    assert client.post("/api/discover", json={}).status_code == 400
    assert client.get("/api/discover", params={"q": "figma"}).json()["message"] == "No discover content available"

    get_store().save_news([news_item("Figma launches AI design tools", timestamp="2025-03-10T08:00:00Z")],
                              date="2025-03-10T12:00:00Z")
    r = client.post("/api/discover", json={"query": "figma design", "maxResults": 3, "includeFormatted": True})
    body = r.json()
    assert body["totalResults"] == 1
    assert body["results"][0]["title"] == "Figma launches AI design tools"
    assert "formatted" in body

    r = client.get("/api/discover", params={"q": "figma design", "max": 1})
    assert r.json()["totalResults"] == 1


# -- generation jobs --------------------------------------------------------

def test_generate_run_records_job(client, monkeypatch):
    monkeypatch.setattr(main, "threading", SimpleNamespace(Thread=_InlineThread))
    monkeypatch.setattr(main, "run_daily", lambda dry_run, job_id: {
        "dry_run": dry_run, "feed_items": 10, "clusters": 6, "articles_count": 0,
        "news_count": 6, "featured_news": 0, "ideas_count": 15,
    })
    r = client.post("/generate/run", params={"dry_run": True})
    job_id = r.json()["job_id"]

    job = client.get(f"/jobs/{job_id}").json()
    assert job["status"] == "done"
    assert job["ideas_count"] == 15
    assert job["dry_run"] == "1"
    assert jobs.current_run() is None

    listing = client.get("/jobs").json()
    assert listing["total"] == 1
    detail = client.get(f"/jobs/{job_id}/detail").json()
    assert detail["errors"] == []


def test_generate_run_failure_releases_lock(client, monkeypatch):
    monkeypatch.setattr(main, "threading", SimpleNamespace(Thread=_InlineThread))

    def fail(dry_run, job_id):
        raise PipelineError("No RSS items fetched. Check network connectivity.")

    monkeypatch.setattr(main, "run_daily", fail)
    job_id = client.post("/generate/run").json()["job_id"]
    job = client.get(f"/jobs/{job_id}").json()
    assert job["status"] == "failed"
    assert job["error"].startswith("No RSS items fetched")
    assert jobs.current_run() is None


def test_generate_run_conflict(client):
    jobs.acquire_run_lock("busy")
    r = client.post("/generate/run")
    assert r.status_code == 409
    assert "busy" in r.json()["detail"]
