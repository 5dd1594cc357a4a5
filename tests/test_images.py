import random

import httpx
import pytest

from brandos import images
from brandos.config import settings
from brandos.images import (
    CATEGORY_IMAGE_KEYWORDS,
    DEFAULT_MODIFIERS,
    QUERY_MODIFIERS,
    build_pexels_query,
    build_search_query,
    detect_query_category,
    extract_core_concept,
    fetch_pexels_image,
    likely_contains_text,
    search_image,
)


@pytest.mark.parametrize("title,concept", [
    ("How to Build a Brand Identity System", "build brand"),
    ("Figma launches AI features", "figma features"),
    ("", "creative"),
])
def test_extract_core_concept(title, concept):
    assert extract_core_concept(title) == concept


def test_build_pexels_query_uses_category_modifiers():
    query = build_pexels_query("Figma launches AI features", "branding", random.Random(0))
    concept, _, modifier = query.partition(" features ")
    assert concept == "figma"
    assert modifier in CATEGORY_IMAGE_KEYWORDS["branding"]
    assert build_pexels_query("x", "unknown", random.Random(0)).split(" ", 1)[1] in DEFAULT_MODIFIERS


def test_likely_contains_text():
    assert likely_contains_text({"alt": "Neon sign on a brick wall"})
    assert not likely_contains_text({"alt": "Orange gradient"})
    assert not likely_contains_text({})


@pytest.mark.parametrize("query,category", [
    ("figma tips", "design"),
    ("chatgpt prompts", "ai"),
    ("logo refresh", "brand"),
    ("cooking", "default"),
])
def test_detect_query_category(query, category):
    assert detect_query_category(query) == category


def test_build_search_query():
    query = build_search_query("Instagram carousel orange gradients", random.Random(1))
    assert query.startswith("instagram orange ")
    assert query[len("instagram orange "):] in QUERY_MODIFIERS["social"]
    assert build_search_query("the reel", random.Random(1)) in DEFAULT_MODIFIERS


def _photo(alt, large, **extra):
    return dict({"alt": alt, "src": {"large": large}}, **extra)


def _use_pexels(monkeypatch, handler):
    monkeypatch.setattr(settings, "pexels_api_key", "px")
    monkeypatch.setattr(images, "_client", lambda: httpx.Client(transport=httpx.MockTransport(handler)))


def test_no_key_no_image(no_keys):
    assert fetch_pexels_image("Figma AI") is None


def test_photos_with_lettering_are_skipped(monkeypatch):
    def handler(request):
        color = request.url.params.get("color")
        assert request.url.params["orientation"] == "landscape"
        if color == "orange":
            return httpx.Response(200, json={"photos": [_photo("Neon sign", "sign.jpg")]})
        return httpx.Response(200, json={"photos": [_photo("Dark gradient", f"{color}.jpg")]})

    _use_pexels(monkeypatch, handler)
    assert fetch_pexels_image("Figma AI", "design-ux", random.Random(0)) == "black.jpg"


def test_fallback_query_after_errors(monkeypatch):
    def handler(request):
        if request.url.params.get("color"):
            return httpx.Response(500)
        assert request.url.params["query"] == images.FALLBACK_QUERY
        return httpx.Response(200, json={"photos": [_photo("Soft blur", "fallback.jpg")]})

    _use_pexels(monkeypatch, handler)
    assert fetch_pexels_image("Figma AI", rng=random.Random(0)) == "fallback.jpg"


def test_search_image_attribution(monkeypatch):
    photo = _photo("", "big.jpg", photographer="Ana", url="https://pexels.com/photo/1")
    _use_pexels(monkeypatch, lambda request: httpx.Response(200, json={"photos": [photo]}))
    assert search_image("figma", rng=random.Random(0)) == {
        "imageUrl": "big.jpg",
        "photographer": "Ana",
        "pexelsUrl": "https://pexels.com/photo/1",
        "alt": "Abstract design image",
    }


def test_search_image_nothing_found(monkeypatch):
    _use_pexels(monkeypatch, lambda request: httpx.Response(200, json={"photos": []}))
    assert search_image("figma", rng=random.Random(0)) is None
