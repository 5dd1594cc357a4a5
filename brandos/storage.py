"""Static JSON documents the frontend reads.

Layout under ``data_dir``::

    news/<weekly-update|monthly-outlook>/latest.json, YYYY-MM-DD.json
    weekly-ideas/<short-form|long-form|blog>/latest.json, YYYY-MM-DD.json
    discover/articles/<slug>.json, manifest.json

Every write overwrites ``latest.json`` and the dated copy for the day.
"""

import json
import logging
import math
import os
import tempfile
from typing import Any, Dict, List, Optional

from .article_generator import build_manifest
from .config import settings
from .models import IDEA_CATEGORIES, NEWS_TYPES
from .utils import utc_iso

logger = logging.getLogger(__name__)

MANIFEST = "manifest.json"
WEEKLY_SHARE = 0.6


def _write_json(path: str, data: Any) -> None:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    # write beside the target and swap in, so a failed dump never truncates it
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=folder or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


def _read_json(path: str) -> Optional[Any]:
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def split_news(items: List[Dict[str, Any]]):
    """First 60 % (rounded up) are the weekly update, the rest the monthly outlook."""
    cut = math.ceil(len(items) * WEEKLY_SHARE)
    return items[:cut], items[cut:]


class ContentStore:
    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = data_dir or settings.data_dir
        self.news_dir = os.path.join(self.data_dir, "news")
        self.ideas_dir = os.path.join(self.data_dir, "weekly-ideas")
        self.articles_dir = os.path.join(self.data_dir, "discover", "articles")

    # -- news ---------------------------------------------------------------

    def news_path(self, news_type: str, name: str = "latest") -> str:
        if news_type not in NEWS_TYPES:
            raise ValueError(f"Unknown news type: {news_type}")
        return os.path.join(self.news_dir, news_type, f"{name}.json")

    def news_paths(self) -> List[str]:
        return [self.news_path(t) for t in NEWS_TYPES]

    def save_news(self, items: List[Dict[str, Any]], date: Optional[str] = None) -> Dict[str, int]:
        date = date or utc_iso()
        day = date.split("T")[0]
        weekly, monthly = split_news(items)
        for news_type, updates in (("weekly-update", weekly), ("monthly-outlook", monthly)):
            data = {"type": news_type, "date": date, "updates": updates}
            _write_json(self.news_path(news_type), data)
            _write_json(self.news_path(news_type, day), data)
        logger.info("saved %d news items (%d weekly, %d monthly)", len(items), len(weekly), len(monthly))
        return {"weekly-update": len(weekly), "monthly-outlook": len(monthly)}

    def load_news(self, news_type: str) -> Optional[Dict[str, Any]]:
        return _read_json(self.news_path(news_type))

    def write_news(self, path: str, data: Dict[str, Any]) -> None:
        _write_json(path, data)

    # -- ideas --------------------------------------------------------------

    def ideas_path(self, category: str, name: str = "latest") -> str:
        if category not in IDEA_CATEGORIES:
            raise ValueError(f"Unknown idea category: {category}")
        return os.path.join(self.ideas_dir, category, f"{name}.json")

    def save_ideas(self, category: str, ideas: List[Dict[str, Any]], date: Optional[str] = None) -> None:
        date = date or utc_iso()
        data = {"type": category, "date": date, "ideas": ideas}
        _write_json(self.ideas_path(category), data)
        _write_json(self.ideas_path(category, date.split("T")[0]), data)
        logger.info("saved %d %s ideas", len(ideas), category)

    def load_ideas(self, category: str) -> Optional[Dict[str, Any]]:
        return _read_json(self.ideas_path(category))

    # -- discover articles --------------------------------------------------

    def article_path(self, slug: str) -> str:
        if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
            raise ValueError(f"Invalid article slug: {slug!r}")
        return os.path.join(self.articles_dir, f"{slug}.json")

    def list_article_slugs(self) -> List[str]:
        if not os.path.isdir(self.articles_dir):
            return []
        return sorted(
            name[:-5]
            for name in os.listdir(self.articles_dir)
            if name.endswith(".json") and name != MANIFEST and not name.startswith(".")
        )

    def load_article(self, slug: str) -> Optional[Dict[str, Any]]:
        try:
            path = self.article_path(slug)
        except ValueError:
            return None
        return _read_json(path)

    def save_articles(self, articles: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Write each article and rebuild the manifest from every article on disk."""
        for article in articles:
            _write_json(self.article_path(article["slug"]), article)
            logger.info("saved article: %s.json", article["slug"])

        stored = [a for a in (self.load_article(s) for s in self.list_article_slugs()) if a]
        stored.sort(key=lambda a: a.get("publishedAt") or "", reverse=True)
        manifest = build_manifest(stored)
        _write_json(os.path.join(self.articles_dir, MANIFEST), manifest)
        return manifest

    def load_manifest(self) -> Dict[str, Any]:
        manifest = _read_json(os.path.join(self.articles_dir, MANIFEST))
        return manifest or {"generatedAt": None, "articles": []}
