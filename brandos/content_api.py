"""Read side of the generated documents plus discover search."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from .discover import generate_card_groups, load_inspiration_cards, process_news_data, search
from .models import IDEA_CATEGORIES, NEWS_TYPES, DiscoverSearchIn
from .storage import ContentStore

router = APIRouter(prefix="/api", tags=["content"])


def get_store() -> ContentStore:
    return ContentStore()


@router.get("/news/{news_type}")
def news(news_type: str, cards: bool = Query(False)):
    if news_type not in NEWS_TYPES:
        raise HTTPException(status_code=404, detail="Unknown news type")
    data = get_store().load_news(news_type)
    if data is None:
        raise HTTPException(status_code=404, detail="No news generated yet")
    if cards:
        news_cards = process_news_data(data)
        return {"type": news_type, "cards": news_cards, "groups": generate_card_groups(news_cards)}
    return data


@router.get("/ideas/{category}")
def ideas(category: str, cards: bool = Query(False)):
    if category not in IDEA_CATEGORIES:
        raise HTTPException(status_code=404, detail="Unknown idea category")
    store = get_store()
    if cards:
        idea_cards = load_inspiration_cards(store, category)
        return {"type": category, "cards": idea_cards, "groups": generate_card_groups(idea_cards)}
    data = store.load_ideas(category)
    if data is None:
        raise HTTPException(status_code=404, detail="No ideas generated yet")
    return data


@router.get("/articles")
def articles():
    return get_store().load_manifest()


@router.get("/articles/{slug}")
def article(slug: str):
    doc = get_store().load_article(slug)
    if doc is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return doc


@router.get("/discover")
def discover_get(q: str = Query(""), max_results: int = Query(5, ge=1, le=50, alias="max")):
    if not q:
        raise HTTPException(status_code=400, detail="Query parameter (q) is required")
    return search(get_store(), q, max_results=max_results)


@router.post("/discover")
def discover_post(body: DiscoverSearchIn):
    if not body.query:
        raise HTTPException(status_code=400, detail="Query is required")
    categories: Optional[List[str]] = body.categories or None
    return search(
        get_store(),
        body.query,
        max_results=body.max_results,
        categories=categories,
        include_formatted=body.include_formatted,
    )
