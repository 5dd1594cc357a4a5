"""Tier-1 selection: which news items deserve a full featured article.

Score out of 130 = sources (10 each, max 30) + recency (10..50) +
brand relevance (10 per keyword, max 50).
"""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional, Set

from .models import NEWS_TYPES
from .utils import article_slug, hours_since, slugify, utc_now

logger = logging.getLogger(__name__)

SLUG_LEN = 50

BRAND_KEYWORDS = [
    "brand", "design", "creative", "agency", "marketing", "ui", "ux",
    "interface", "visual", "logo", "identity", "typography", "color",
    "experience", "product", "innovation", "digital", "strategy",
    "ai", "artificial intelligence", "automation", "tool", "platform",
    "startup", "launch", "funding", "growth", "enterprise",
]


def relevance_score(text: str) -> int:
    lower = text.lower()
    return min(sum(10 for k in BRAND_KEYWORDS if k in lower), 50)


def recency_score(timestamp: str, now: Optional[dt.datetime] = None) -> int:
    hours = hours_since(timestamp, now)
    if hours is None:
        return 10
    if hours < 24:
        return 50
    if hours < 48:
        return 40
    if hours < 72:
        return 30
    if hours < 168:
        return 20
    return 10


def source_score(item: Dict[str, Any]) -> int:
    return min(len(item.get("sources") or []) * 10, 30)


def score_candidates(
    store,
    existing_slugs: Optional[Set[str]] = None,
    now: Optional[dt.datetime] = None,
) -> List[Dict[str, Any]]:
    """Every eligible news item with its score, best first."""
    now = now or utc_now()
    if existing_slugs is None:
        existing_slugs = set(store.list_article_slugs())

    scored = []
    for news_type in NEWS_TYPES:
        data = store.load_news(news_type)
        if data is None:
            logger.warning("news file not found: %s", store.news_path(news_type))
            continue
        for index, item in enumerate(data.get("updates") or []):
            if item.get("tier") == "featured" or item.get("articlePath"):
                continue
            slug = slugify(item["title"], SLUG_LEN)
            if slug in existing_slugs or article_slug(item["title"]) in existing_slugs:
                continue
            breakdown = {
                "sourceScore": source_score(item),
                "recencyScore": recency_score(item.get("timestamp") or "", now),
                "relevanceScore": relevance_score(f"{item['title']} {item.get('description') or ''}"),
            }
            scored.append({
                "item": item,
                "news_type": news_type,
                "index": index,
                "slug": slug,
                "score": sum(breakdown.values()),
                "breakdown": breakdown,
            })
    scored.sort(key=lambda c: c["score"], reverse=True)
    return scored


def mark_featured(store, candidates: List[Dict[str, Any]]) -> None:
    by_type: Dict[str, List[int]] = {}
    for c in candidates:
        by_type.setdefault(c["news_type"], []).append(c["index"])
    for news_type, indexes in by_type.items():
        data = store.load_news(news_type)
        for index in indexes:
            data["updates"][index]["tier"] = "featured"
        store.write_news(store.news_path(news_type), data)
        logger.info("marked %d %s items as featured", len(indexes), news_type)


def select_featured(
    store,
    count: int = 3,
    mark: bool = False,
    now: Optional[dt.datetime] = None,
) -> List[Dict[str, Any]]:
    existing = set(store.list_article_slugs())
    logger.info("found %d existing featured articles", len(existing))
    candidates = score_candidates(store, existing, now)[:count]
    for i, c in enumerate(candidates, 1):
        logger.info(
            "#%d score %d/130: %s (sources %d, recency %d, relevance %d)",
            i, c["score"], c["item"]["title"][:60],
            len(c["item"].get("sources") or []),
            c["breakdown"]["recencyScore"], c["breakdown"]["relevanceScore"],
        )
    if mark and candidates:
        mark_featured(store, candidates)
    return candidates
