"""Daily content generation.

fetch feeds -> cluster -> score -> featured articles -> news -> ideas

Runs from the CLI, the scheduler (through ``POST /generate/run``) or tests.
A dry run does everything except paid LLM/image calls and file writes.
"""

import datetime as dt
import logging
import random
import time
from typing import Any, Dict, List, Optional

import httpx

from . import jobs
from .article_generator import ArticleGenerationError, build_discover_article, generate_discover_article
from .clustering import classify_cluster, cluster_similar_topics, rank_clusters, select_best_clusters
from .config import settings
from .enricher import batch_enrich_topics
from .feeds import fetch_all_feeds
from .ideas import generate_ideas_batch
from .images import IDEA_IMAGE_CATEGORY, fetch_pexels_image
from .llm import LLMError
from .models import IDEA_CATEGORIES
from .sources import get_sources_for_daily_fetch
from .storage import ContentStore
from .utils import article_slug, format_timestamp, utc_iso, utc_now

logger = logging.getLogger(__name__)

IDEA_TOPICS = 8
MIN_ARTICLE_SOURCES = 5
MIN_ARTICLE_PARAGRAPHS = 3
ARTICLE_DELAY = 2.0
IMAGE_DELAY = 0.3


class PipelineError(RuntimeError):
    pass


def _progress(job_id: Optional[str], **fields) -> None:
    if job_id:
        jobs.set_job(job_id, **fields)


def _error(job_id: Optional[str], stage: str, target: str, error: Exception) -> None:
    if job_id:
        jobs.push_error(job_id, stage, target, str(error)[:300])
        jobs.incr_job(job_id, errors_count=1)


# ---------------------------------------------------------------------------
# Featured articles
# ---------------------------------------------------------------------------

def build_featured_article(cluster: Dict[str, Any], result: Dict[str, Any], now: Optional[dt.datetime] = None) -> Dict[str, Any]:
    """Discover article keyed by the cluster title so the news item can point at it."""
    article = build_discover_article(cluster["title"], result, now)
    slug = article_slug(cluster["title"])
    article["id"] = slug
    article["slug"] = slug
    article["summary"] = cluster.get("description") or ""
    return article


def generate_featured_articles(
    clusters: List[Dict[str, Any]],
    target: Optional[int] = None,
    job_id: Optional[str] = None,
    delay: float = ARTICLE_DELAY,
) -> List[Dict[str, Any]]:
    """Full Perplexity articles for the top clusters. Thin results are skipped, never saved."""
    target = settings.target_featured_articles if target is None else target
    if not settings.perplexity_api_key:
        logger.warning("PERPLEXITY_API_KEY not set, skipping featured article generation")
        return []

    top = clusters[:target]
    articles = []
    for i, cluster in enumerate(top):
        logger.info("[%d/%d] generating featured article: %s", i + 1, len(top), cluster["title"][:50])
        try:
            result = generate_discover_article(cluster["title"], cluster["sources"])
        except (ArticleGenerationError, LLMError, httpx.HTTPError) as e:
            logger.error("failed to generate article: %s", e)
            _error(job_id, "article", cluster["title"], e)
            continue

        if len(result["all_sources"]) < MIN_ARTICLE_SOURCES:
            logger.error("too few sources (%d), skipping", len(result["all_sources"]))
            continue
        article = build_featured_article(cluster, result)
        paragraphs = sum(len(s["paragraphs"]) for s in article["sections"])
        if paragraphs < MIN_ARTICLE_PARAGRAPHS:
            logger.error("too few paragraphs (%d), skipping", paragraphs)
            continue

        articles.append(article)
        logger.info(
            "generated with %d sources, %d sections, %d paragraphs",
            article["totalSources"], len(article["sections"]), paragraphs,
        )
        if i < len(top) - 1 and delay:
            time.sleep(delay)
    return articles


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------

def _dedup_sources(sources: List[Dict[str, str]]) -> List[Dict[str, str]]:
    seen = set()
    out = []
    for s in sources:
        key = s["url"].lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(s)
    return out


def cluster_to_news_item(cluster: Dict[str, Any], now: Optional[dt.datetime] = None) -> Dict[str, Any]:
    sources = list(cluster["sources"])
    return {
        "title": cluster["title"],
        "description": cluster.get("description"),
        "timestamp": format_timestamp(cluster.get("pub_date"), now),
        "sources": sources,
        "tier": "quick",
        "sourceUrl": sources[0]["url"] if sources else "",
        "topicCategory": classify_cluster(cluster),
    }


def generate_news(
    clusters: List[Dict[str, Any]],
    dry_run: bool = False,
    now: Optional[dt.datetime] = None,
    enrich_delay: float = 0.6,
) -> List[Dict[str, Any]]:
    selected = select_best_clusters(clusters, settings.target_news_count, now)
    logger.info("selected %d top topics", len(selected))
    news = [cluster_to_news_item(c, now) for c in selected]

    categories: Dict[str, int] = {}
    for item in news:
        categories[item["topicCategory"]] = categories.get(item["topicCategory"], 0) + 1
    logger.info("category distribution: %s", categories)

    if dry_run or not settings.perplexity_api_key:
        return news

    topics = [{"title": n["title"], "existing_urls": [s["url"] for s in n["sources"]]} for n in news[:3]]
    extra = batch_enrich_topics(topics, max_enrichments=3, delay=enrich_delay)
    for item in news:
        if item["title"] in extra:
            item["sources"] = _dedup_sources(item["sources"] + extra[item["title"]])
    return news


def mark_featured_news(news: List[Dict[str, Any]], articles: List[Dict[str, Any]]) -> int:
    featured_slugs = {a["slug"] for a in articles}
    marked = 0
    for item in news:
        if article_slug(item["title"]) in featured_slugs:
            item["tier"] = "featured"
            marked += 1
    return marked


# ---------------------------------------------------------------------------
# Ideas
# ---------------------------------------------------------------------------

def idea_topics(news: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"title": n["title"], "description": n.get("description") or n["title"], "sources": n.get("sources") or []}
        for n in news[:IDEA_TOPICS]
    ]


def generate_ideas_for_category(
    topics: List[Dict[str, Any]],
    category: str,
    dry_run: bool = False,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    rng = rng or random
    count = settings.target_ideas_per_category
    if dry_run:
        ideas = [
            {
                "title": f"[{category}] {t['title']}",
                "description": t["description"],
                "starred": idx == 0,
                "sources": t["sources"],
                "textureIndex": idx % settings.texture_count,
            }
            for idx, t in enumerate(topics[:count])
        ]
    else:
        ideas = generate_ideas_batch(topics, category, max_ideas=count)
        image_category = IDEA_IMAGE_CATEGORY[category]
        for i, idea in enumerate(ideas):
            image = fetch_pexels_image(idea["title"], image_category, rng)
            if image:
                idea["pexelsImageUrl"] = image
            idea["textureIndex"] = rng.randrange(settings.texture_count)
            if i < len(ideas) - 1 and settings.pexels_api_key:
                time.sleep(IMAGE_DELAY)
        with_images = sum(1 for i in ideas if i.get("pexelsImageUrl"))
        logger.info("fetched %d/%d brand-aligned images", with_images, len(ideas))

    if ideas:
        ideas[0]["starred"] = True
    return ideas


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

def run_daily(
    dry_run: bool = False,
    store: Optional[ContentStore] = None,
    job_id: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> Dict[str, Any]:
    store = store or ContentStore()
    now = now or utc_now()
    stamp = utc_iso(now)
    logger.info(
        "daily content generation (%s): %d news, %d featured, %d ideas",
        "dry run" if dry_run else "live",
        settings.target_news_count, settings.target_featured_articles,
        settings.target_ideas_per_category * len(IDEA_CATEGORIES),
    )

    _progress(job_id, stage="fetch")
    items = fetch_all_feeds(get_sources_for_daily_fetch())
    if not items:
        raise PipelineError("No RSS items fetched. Check network connectivity.")
    _progress(job_id, stage="cluster", feed_items=len(items))

    clusters = cluster_similar_topics(items)
    ranked = rank_clusters(clusters, now)
    _progress(job_id, stage="articles", clusters=len(clusters))

    articles = [] if dry_run else generate_featured_articles(ranked, job_id=job_id)
    if articles:
        store.save_articles(articles)

    _progress(job_id, stage="news", articles_count=len(articles))
    news = generate_news(clusters, dry_run=dry_run, now=now)
    marked = mark_featured_news(news, articles)
    if dry_run:
        logger.info("dry run, not saving %d news items", len(news))
    else:
        store.save_news(news, stamp)

    _progress(job_id, stage="ideas", news_count=len(news))
    topics = idea_topics(news)
    ideas_count = 0
    if not topics:
        logger.warning("no topics for idea generation")
    else:
        for category in IDEA_CATEGORIES:
            ideas = generate_ideas_for_category(topics, category, dry_run=dry_run)
            ideas_count += len(ideas)
            if not dry_run:
                store.save_ideas(category, ideas, stamp)

    summary = {
        "dry_run": dry_run,
        "feed_items": len(items),
        "clusters": len(clusters),
        "articles_count": len(articles),
        "news_count": len(news),
        "featured_news": marked,
        "ideas_count": ideas_count,
    }
    _progress(job_id, stage="done", ideas_count=ideas_count)
    logger.info("daily content generation complete: %s", summary)
    return summary
