"""Headline clustering and story selection for the daily news feed.

Feed items reporting the same story are merged with a greedy single pass over
Jaccard word overlap; clusters are then scored and picked with a per-category
cap so no single topic dominates the feed.
"""

import datetime as dt
import logging
import math
import re
from typing import Any, Dict, List, Optional, Set

from .sources import CATEGORY_KEYWORDS
from .utils import hours_since, parse_date, utc_now

logger = logging.getLogger(__name__)

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "dare", "ought",
    "used", "this", "that", "these", "those", "how", "what", "when", "where",
    "why", "who", "whom", "which", "whose", "your", "our", "their", "its",
    "new", "first", "last", "just", "now", "more", "most", "other", "into",
    "over", "such", "than", "too", "very", "only", "own", "same",
    "so", "also", "no", "not", "about", "out", "up", "down", "off", "after",
    "before", "between", "under", "again", "further", "then", "once", "here",
    "there", "all", "each", "few", "both", "any", "some", "one", "two",
}

HIGH_VALUE_KEYWORDS = [
    "design", "brand", "creative", "ai", "figma", "ux", "ui",
    "typography", "logo", "visual", "strategy", "workflow",
    "midjourney", "dall-e", "gpt", "claude", "gemini",
    "instagram", "tiktok", "content", "creator",
]

MEDIUM_VALUE_KEYWORDS = [
    "startup", "product", "marketing", "social", "video",
    "tutorial", "guide", "how to", "tips", "tools",
]

FOCUS_CATEGORIES = ("design-ux", "branding", "ai-creative")

SIMILARITY_THRESHOLD = 0.5

# Trending grouping for the discover article generator
TRENDING_WINDOW_HOURS = 24
TRENDING_KEY_WORDS = 4
TRENDING_MIN_OVERLAP = 2
TRENDING_MIN_SOURCES = 2
TRENDING_MAX_TOPICS = 10


def extract_significant_words(title: str) -> Set[str]:
    text = re.sub(r"[^a-z0-9\s]", " ", (title or "").lower())
    return {w for w in text.split() if len(w) > 2 and w not in STOP_WORDS}


def jaccard_similarity(a: Set[str], b: Set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def _is_newer(candidate: str, current: str) -> bool:
    new = parse_date(candidate)
    old = parse_date(current)
    if new is None or old is None:
        return False
    return new > old


def cluster_similar_topics(items: List[Dict[str, Any]], threshold: float = SIMILARITY_THRESHOLD) -> List[Dict[str, Any]]:
    """Merge feed items that describe the same story.

    Each unassigned item seeds a cluster; later unassigned items whose title
    overlap reaches ``threshold`` join it. Joined items contribute their
    source (unless that outlet or URL is already listed), a longer
    description and a more recent date.
    """
    clusters: List[Dict[str, Any]] = []
    assigned: Set[int] = set()
    word_sets = [extract_significant_words(it.get("title") or "") for it in items]

    for i, item in enumerate(items):
        if i in assigned:
            continue
        assigned.add(i)
        cluster = {
            "title": item["title"],
            "description": item.get("description"),
            "pub_date": item.get("pub_date"),
            "sources": [{"name": item["source"], "url": item["link"]}],
            "source_category": item.get("source_category"),
            "score": 0,
        }

        for j in range(i + 1, len(items)):
            if j in assigned:
                continue
            if jaccard_similarity(word_sets[i], word_sets[j]) < threshold:
                continue
            other = items[j]
            assigned.add(j)

            if not any(s["name"] == other["source"] or s["url"] == other["link"] for s in cluster["sources"]):
                cluster["sources"].append({"name": other["source"], "url": other["link"]})

            desc = other.get("description")
            if desc and (not cluster["description"] or len(desc) > len(cluster["description"])):
                cluster["description"] = desc

            if _is_newer(other.get("pub_date") or "", cluster["pub_date"] or ""):
                cluster["pub_date"] = other["pub_date"]

        clusters.append(cluster)

    multi = sum(1 for c in clusters if len(c["sources"]) > 1)
    logger.info("clustered %d items into %d topics (%d multi-source)", len(items), len(clusters), multi)
    return clusters


def _cluster_text(cluster: Dict[str, Any]) -> str:
    return f"{cluster.get('title') or ''} {cluster.get('description') or ''}".lower()


def score_cluster(cluster: Dict[str, Any], now: Optional[dt.datetime] = None) -> int:
    text = _cluster_text(cluster)
    score = 0
    score += 10 * sum(1 for kw in HIGH_VALUE_KEYWORDS if kw in text)
    score += 5 * sum(1 for kw in MEDIUM_VALUE_KEYWORDS if kw in text)

    if len(cluster.get("description") or "") > 100:
        score += 15
    if cluster.get("source_category") in FOCUS_CATEGORIES:
        score += 20

    # several outlets on one story matters more than any keyword
    score += 15 * len(cluster.get("sources") or [])

    hours = hours_since(cluster.get("pub_date"), now or utc_now())
    if hours is not None:
        if hours < 24:
            score += 30
        elif hours < 48:
            score += 20
        elif hours < 72:
            score += 10
        elif hours < 168:
            score += 5
    return score


def classify_cluster(cluster: Dict[str, Any]) -> str:
    text = _cluster_text(cluster)
    best = cluster.get("source_category") or "general-tech"
    highest = 0
    for category, keywords in CATEGORY_KEYWORDS.items():
        score = 0
        for kw in keywords:
            if kw.lower() in text:
                score += 2 if len(kw) > 5 else 1
        if score > highest:
            highest = score
            best = category
    return best


def rank_clusters(clusters: List[Dict[str, Any]], now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    """Attach scores and return clusters best first (stable for ties)."""
    now = now or utc_now()
    scored = [dict(c, score=score_cluster(c, now)) for c in clusters]
    scored.sort(key=lambda c: c["score"], reverse=True)
    return scored


def select_best_clusters(
    clusters: List[Dict[str, Any]],
    target: int,
    now: Optional[dt.datetime] = None,
) -> List[Dict[str, Any]]:
    ranked = rank_clusters(clusters, now)
    max_per_category = math.ceil(target / 4)

    selected: List[int] = []
    per_category: Dict[str, int] = {}
    for idx, cluster in enumerate(ranked):
        if len(selected) >= target:
            break
        cat = classify_cluster(cluster)
        if per_category.get(cat, 0) < max_per_category:
            selected.append(idx)
            per_category[cat] = per_category.get(cat, 0) + 1

    # backfill from the top if diversity left us short
    if len(selected) < target:
        for idx in range(len(ranked)):
            if len(selected) >= target:
                break
            if idx not in selected:
                selected.append(idx)

    return [ranked[i] for i in selected]


# ---------------------------------------------------------------------------
# Trending topics
# ---------------------------------------------------------------------------

def _trending_words(title: str) -> List[str]:
    text = re.sub(r"[^a-z0-9\s]", "", (title or "").lower())
    return [w for w in text.split() if len(w) > 3]


def group_into_topics(items: List[Dict[str, Any]], now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    """Group the last day's headlines into topics covered by several outlets.

    Returns ``[{"title", "sources": [{name, url}], "first_seen"}]`` ordered by
    source count.
    """
    now = now or utc_now()

    def _when(it: Dict[str, Any]) -> dt.datetime:
        return parse_date(it.get("pub_date")) or dt.datetime.min.replace(tzinfo=dt.timezone.utc)

    recent = []
    for it in sorted(items, key=_when, reverse=True):
        hours = hours_since(it.get("pub_date"), now)
        if hours is not None and hours < TRENDING_WINDOW_HOURS:
            recent.append(it)

    groups: Dict[str, Dict[str, Any]] = {}
    for it in recent:
        words = _trending_words(it.get("title") or "")
        key = "_".join(sorted(words[:TRENDING_KEY_WORDS]))
        if not key:
            continue

        matched = None
        for existing_key in groups:
            key_words = existing_key.split("_")
            if sum(1 for w in words if w in key_words) >= TRENDING_MIN_OVERLAP:
                matched = existing_key
                break
        if matched is None and key in groups:
            matched = key

        if matched is not None:
            groups[matched]["sources"].append({"name": it["source"], "url": it["link"]})
        else:
            groups[key] = {
                "title": it["title"],
                "sources": [{"name": it["source"], "url": it["link"]}],
                "first_seen": it.get("pub_date"),
            }

    topics = [g for g in groups.values() if len(g["sources"]) >= TRENDING_MIN_SOURCES]
    topics.sort(key=lambda g: len(g["sources"]), reverse=True)
    return topics[:TRENDING_MAX_TOPICS]
