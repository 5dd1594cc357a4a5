"""Discover feed shaping and keyword search over the saved news.

News and idea documents become cards for the discover page; the search helpers
find the cards relevant to a chat query and format them as context for the
model.
"""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional, TypeVar

from .models import IDEA_CATEGORIES, NEWS_TYPES
from .sources import CATEGORY_KEYWORDS
from .utils import relative_time, slugify

logger = logging.getLogger(__name__)

T = TypeVar("T")

CARD_SLUG_LEN = 50
DEFAULT_SEARCH_CATEGORIES = ["design-ux", "branding", "ai-creative", "social-trends"]

CATEGORY_LABELS: Dict[str, str] = {
    "design-ux": "Design & UX",
    "branding": "Branding",
    "ai-creative": "AI & Creative",
    "social-trends": "Social Trends",
    "general-tech": "Tech",
    "startup-business": "Business",
}


def aggregate_sources(items: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Distinct sources across items, first occurrence of each name wins."""
    seen: Dict[str, Dict[str, str]] = {}
    for item in items:
        for source in item.get("sources") or []:
            key = source["name"].lower()
            if key not in seen:
                seen[key] = {"id": f"source-{len(seen)}", "name": source["name"], "url": source["url"]}
    return list(seen.values())


def unified_title(items: List[Dict[str, Any]]) -> str:
    if not items:
        return ""
    title = items[0]["title"]
    if len(items) > 1 and len(title) > 100:
        return title[:97] + "..."
    return title


def unified_summary(items: List[Dict[str, Any]]) -> str:
    if not items:
        return ""
    if len(items) == 1:
        return items[0].get("description") or items[0]["title"][:150]
    summaries = [s for s in (i.get("description") or i.get("title") for i in items) if s][:3]
    if not summaries:
        return ""
    if len(summaries) == 1:
        return summaries[0][:200]
    combined = " • ".join(summaries)[:200]
    return combined + ("..." if len(combined) >= 200 else "")


def determine_tier(update: Dict[str, Any]) -> str:
    """Explicit tier wins; otherwise an article makes it featured and a summary makes it summary."""
    if update.get("tier"):
        return update["tier"]
    if update.get("articlePath"):
        return "featured"
    if update.get("aiSummary"):
        return "summary"
    return "quick"


def _card_sources(sources: List[Dict[str, str]], index: int) -> List[Dict[str, str]]:
    return [
        {"id": f"source-{index}-{idx}", "name": s["name"], "url": s["url"]}
        for idx, s in enumerate(sources or [])
    ]


def process_news_data(data: Optional[Dict[str, Any]], now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    if not data or not data.get("updates"):
        return []
    cards = []
    for index, update in enumerate(data["updates"]):
        sources = _card_sources(update.get("sources"), index)
        description = update.get("description")
        tier = determine_tier(update)
        source_url = sources[0]["url"] if tier == "quick" and sources else update.get("sourceUrl")
        cards.append({
            "id": f"news-{data['type']}-{index}",
            "slug": slugify(update["title"], CARD_SLUG_LEN),
            "title": update["title"],
            "summary": description.split("\n")[0] if description else update["title"][:200],
            "content": description.split("\n\n") if description else None,
            "sources": sources,
            "publishedAt": relative_time(update.get("timestamp") or "", now),
            "category": data["type"],
            "tier": tier,
            "articlePath": update.get("articlePath"),
            "aiSummary": update.get("aiSummary"),
            "sourceUrl": source_url,
            "topicCategory": update.get("topicCategory"),
        })
    return cards


def process_inspiration_data(data: Optional[Dict[str, Any]], now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    """Idea cards are prompts for the chat, never links."""
    if not data or not data.get("ideas"):
        return []
    published = relative_time(data.get("date") or "", now)
    return [
        {
            "id": f"inspiration-{data['type']}-{index}",
            "slug": slugify(idea["title"], CARD_SLUG_LEN),
            "title": idea["title"],
            "description": idea.get("description"),
            "sources": _card_sources(idea.get("sources"), index),
            "publishedAt": published,
            "category": data["type"],
            "starred": idea.get("starred"),
            "isPrompt": True,
            "hooks": idea.get("hooks"),
            "platformTips": idea.get("platformTips"),
            "visualDirection": idea.get("visualDirection"),
            "exampleOutline": idea.get("exampleOutline"),
            "hashtags": idea.get("hashtags"),
            "pexelsImageUrl": idea.get("pexelsImageUrl"),
            "textureIndex": idea.get("textureIndex"),
        }
        for index, idea in enumerate(data["ideas"])
    ]


def generate_card_groups(cards: List[T]) -> List[Dict[str, Any]]:
    """Layout groups of one featured card followed by up to three compact ones."""
    return [
        {"featured": cards[i], "compact": cards[i + 1:i + 4]}
        for i in range(0, len(cards), 4)
    ]


def load_news_cards(store, now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    cards: List[Dict[str, Any]] = []
    for news_type in NEWS_TYPES:
        try:
            cards.extend(process_news_data(store.load_news(news_type), now))
        except (ValueError, KeyError) as e:
            logger.error("failed to load %s news data: %s", news_type, e)
    return cards


def load_inspiration_cards(store, category: str, now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    if category not in IDEA_CATEGORIES:
        raise ValueError(f"Unknown idea category: {category}")
    return process_inspiration_data(store.load_ideas(category), now)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def get_relevant_categories(query: str) -> List[str]:
    """Up to four topic categories whose keywords appear in the query."""
    q = query.lower()
    scored = []
    for category, keywords in CATEGORY_KEYWORDS.items():
        score = sum(2 if len(k) > 5 else 1 for k in keywords if k.lower() in q)
        if score > 0:
            scored.append((category, score))
    if not scored:
        return list(DEFAULT_SEARCH_CATEGORIES)
    scored.sort(key=lambda x: x[1], reverse=True)
    return [c for c, _ in scored[:4]]


def _relevance(card: Dict[str, Any], query: str, terms: List[str]) -> int:
    title = card["title"].lower()
    summary = (card.get("summary") or "").lower()
    score = 0
    for term in terms:
        if term in title:
            score += 10 if len(term) > 4 else 5
        if term in summary:
            score += 5 if len(term) > 4 else 2
    if query.lower() in title:
        score += 20
    return score


def search_news_data(
    cards: List[Dict[str, Any]],
    query: str,
    max_results: int = 5,
    min_relevance: int = 5,
    categories: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    terms = [t for t in query.lower().split() if len(t) > 2]
    scored = []
    for card in cards:
        topic = card.get("topicCategory")
        # cards without a topic category are never filtered out
        if categories and topic and topic not in categories:
            continue
        score = _relevance(card, query, terms)
        if score >= min_relevance:
            scored.append((score, card))
    scored.sort(key=lambda x: x[0], reverse=True)

    results = []
    for score, card in scored[:max_results]:
        sources = card.get("sources") or []
        results.append({
            "id": card["id"],
            "title": card["title"],
            "snippet": card.get("summary") or card["title"][:150],
            "url": card.get("sourceUrl") or "#",
            "sourceName": sources[0]["name"] if sources else "Unknown Source",
            "category": card.get("topicCategory") or card.get("category") or "general-tech",
            "publishedAt": card.get("publishedAt"),
            "relevanceScore": score,
        })
    return results


def format_results_for_ai(results: List[Dict[str, Any]]) -> str:
    if not results:
        return ""
    blocks = []
    for idx, r in enumerate(results, 1):
        label = CATEGORY_LABELS.get(r["category"], r["category"])
        published = f"Published: {r['publishedAt']}" if r.get("publishedAt") else ""
        blocks.append(
            f"[{idx}] {r['title']}\n"
            f"   Source: {r['sourceName']} ({label})\n"
            f"   {r['snippet']}\n"
            f"   {published}"
        )
    return "\n\n## Relevant Content from Your News Sources:\n" + "\n\n".join(blocks)


def search(
    store,
    query: str,
    max_results: int = 5,
    categories: Optional[List[str]] = None,
    include_formatted: bool = False,
    now: Optional[dt.datetime] = None,
) -> Dict[str, Any]:
    cards = load_news_cards(store, now)
    if not cards:
        return {
            "results": [],
            "query": query,
            "searchedCategories": [],
            "totalResults": 0,
            "message": "No discover content available",
        }
    searched = categories or get_relevant_categories(query)
    results = search_news_data(cards, query, max_results=max_results, min_relevance=3, categories=searched)
    out: Dict[str, Any] = {
        "results": results,
        "query": query,
        "searchedCategories": searched,
        "totalResults": len(results),
    }
    if include_formatted and results:
        out["formatted"] = format_results_for_ai(results)
    return out
