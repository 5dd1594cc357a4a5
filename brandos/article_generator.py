"""Multi-source discover articles.

A topic is researched with several Perplexity ``sonar`` searches to collect
citation URLs, then written by ``sonar-pro`` in a marker format
(``===INTRO_P1===`` ... ``SOURCES: [n][m]``) that is parsed back into
sections and paragraphs with source ids.
"""

import datetime as dt
import logging
import re
import time
from typing import Any, Dict, List, Optional, Set

import httpx

from .clustering import group_into_topics
from .feeds import fetch_all_feeds
from .llm import LLMError, call_perplexity
from .sources import TRENDING_FEEDS
from .utils import domain_name, favicon_url, slugify, utc_iso, utc_now

logger = logging.getLogger(__name__)

MAX_SOURCES = 40
MIN_SOURCES = 5
SOURCE_CARDS = 6
SEARCH_DELAY = 0.3

ARTICLE_SYSTEM_PROMPT = (
    "You are a professional journalist who writes clear, well-sourced articles. "
    "Always follow the exact output format requested."
)

SEARCH_PROMPT = """Search for the latest comprehensive news and analysis about: "{topic}"

    Provide detailed information with specific facts, quotes, and data points.
    Include multiple perspectives and viewpoints from different sources.
    Focus on recent developments and breaking news.

    IMPORTANT: Cite as many different sources as possible (aim for 10+ unique sources).
    Include mainstream news outlets, tech publications, industry blogs, and expert analysis.
    Every claim should be cited with [number] format."""

ARTICLE_GENERATION_PROMPT = """You are a professional news writer creating a well-researched article. Follow this EXACT structure with clear section markers.

OUTPUT FORMAT (use these exact markers):
===TITLE===
[Write a compelling headline]

===INTRO_P1===
[Write 3-4 sentences summarizing the main news. Include specific facts and context.]
SOURCES: [1][2][3]

===INTRO_P2===
[Write 3-4 sentences with additional key details and implications.]
SOURCES: [4][5]

===SECTION1_TITLE===
[Write a specific subheading relevant to this topic - NOT generic like "Background" or "Details"]

===SECTION1_P1===
[Write 3-4 sentences exploring this aspect of the story. Include quotes or data if available.]
SOURCES: [6][7][8]

===SECTION1_P2===
[Write 3-4 sentences continuing the analysis with different information.]
SOURCES: [9][10]

===SECTION2_TITLE===
[Write another specific subheading for a different angle on the topic]

===SECTION2_P1===
[Write 3-4 sentences covering this aspect. Include expert opinions or reactions.]
SOURCES: [11][12][13]

===SECTION2_P2===
[Write 3-4 sentences wrapping up this section with forward-looking insights.]
SOURCES: [14][15]

CRITICAL RULES:
- Each paragraph MUST have 3-4 complete sentences
- Each paragraph MUST cite 2-5 DIFFERENT sources using [number] format
- NEVER reuse the same source number in different paragraphs
- Subheadings must be specific to the topic content, not generic
- Write in professional, clear news style
- Be factual and avoid speculation"""

FALLBACK_TOPICS = [
    {
        "title": "AI Design Tools and Creative Workflows",
        "seed_sources": [
            {"name": "TechCrunch", "url": "https://techcrunch.com/ai"},
            {"name": "The Verge", "url": "https://www.theverge.com/ai-artificial-intelligence"},
        ],
    },
    {
        "title": "Latest Developments in Large Language Models",
        "seed_sources": [
            {"name": "Wired", "url": "https://www.wired.com/tag/artificial-intelligence/"},
            {"name": "Ars Technica", "url": "https://arstechnica.com/ai/"},
        ],
    },
]


class ArticleGenerationError(RuntimeError):
    pass


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def clean_text(text: str) -> str:
    text = re.sub(r"===\w+===\s*", "", text or "", flags=re.I)
    text = re.sub(r"SOURCES:\s*\[[\d\]\[]+\s*", "", text, flags=re.I)
    text = re.sub(r"\[\d+\]\s*", "", text)
    text = re.sub(r"^\[|\]$", "", text)
    return re.sub(r"\s+", " ", text).strip()


def extract_source_ids(text: str) -> List[str]:
    out: List[str] = []
    for num in re.findall(r"\[(\d+)\]", text or ""):
        sid = f"source-{num}"
        if sid not in out:
            out.append(sid)
    return out


def _fallback_source_ids(start: int, count: int) -> List[str]:
    return [f"source-{start + i + 1}" for i in range(count)]


def _total_paragraphs(sections: List[Dict[str, Any]]) -> int:
    return sum(len(s["paragraphs"]) for s in sections)


def validate_article(sections: List[Dict[str, Any]]) -> bool:
    return len(sections) >= 2 and _total_paragraphs(sections) >= 4


def _marker_block(text: str, marker: str) -> Optional[str]:
    m = re.search(rf"==={marker}===\s*([\s\S]*?)(?=SOURCES:|===|\Z)", text, flags=re.I)
    return m.group(1) if m else None


def _marker_sources(text: str, marker: str) -> Optional[str]:
    m = re.search(rf"==={marker}===[\s\S]*?SOURCES:\s*(\[[\d\]\[]+)", text, flags=re.I)
    return m.group(1) if m else None


def _marker_paragraph(text: str, marker: str) -> Optional[Dict[str, Any]]:
    block = _marker_block(text, marker)
    if block is None:
        return None
    content = clean_text(block)
    if len(content) <= 50:
        return None
    refs = _marker_sources(text, marker)
    return {"content": content, "source_ids": extract_source_ids(refs if refs is not None else block)}


def parse_article_content(text: str) -> Dict[str, Any]:
    """Parse the ``===MARKER===`` article format.

    Returns ``{"title", "sections": [{"title"?, "paragraphs": [{"content",
    "source_ids"}]}], "sidebar_sections"}``. Falls back to plain-paragraph
    parsing when fewer than four paragraphs survive.
    """
    text = text or ""
    sections: List[Dict[str, Any]] = []
    sidebar: List[str] = []

    m = re.search(r"===TITLE===\s*([\s\S]*?)(?====|\Z)", text, flags=re.I) or \
        re.search(r"TITLE:\s*([\s\S]*?)(?=\n===|\n\n)", text, flags=re.I)
    title = clean_text(m.group(1)) if m else "News Update"

    intro = [p for p in (_marker_paragraph(text, "INTRO_P1"), _marker_paragraph(text, "INTRO_P2")) if p]
    if intro:
        sections.append({"title": None, "paragraphs": intro})

    for n in (1, 2):
        tm = re.search(rf"===SECTION{n}_TITLE===\s*([\s\S]*?)(?====|\Z)", text, flags=re.I)
        if not tm:
            continue
        section_title = clean_text(tm.group(1))
        if len(section_title) <= 3:
            continue
        sidebar.append(section_title)
        paras = [p for p in (_marker_paragraph(text, f"SECTION{n}_P1"), _marker_paragraph(text, f"SECTION{n}_P2")) if p]
        if paras:
            sections.append({"title": section_title, "paragraphs": paras})

    if not sections or _total_paragraphs(sections) < 4:
        logger.info("structured parsing failed, falling back to plain paragraphs")
        return fallback_parsing(text, title)

    return {"title": title, "sections": sections, "sidebar_sections": sidebar}


_FALLBACK_TITLE_PATTERNS = [
    re.compile(r"^#\s*(.+)$", re.M),
    re.compile(r"^##\s*(.+)$", re.M),
    re.compile(r"TITLE:\s*(.+)$", re.M | re.I),
    re.compile(r"^\*\*(.+)\*\*$", re.M),
]

_FALLBACK_GROUPS = [
    # (title, paragraph slice, first fallback source index)
    (None, slice(0, 2), 0),
    ("Key Developments", slice(2, 4), 4),
    ("Looking Ahead", slice(4, 6), 8),
]


def fallback_parsing(text: str, default_title: str) -> Dict[str, Any]:
    title = default_title
    for pattern in _FALLBACK_TITLE_PATTERNS:
        m = pattern.search(text or "")
        if m:
            title = clean_text(m.group(1))
            break

    paragraphs = [p.strip() for p in re.split(r"\n\n+", text or "")]
    paragraphs = [p for p in paragraphs if len(p) > 100 and not p.startswith("===") and not p.startswith("SOURCES:")]

    sections: List[Dict[str, Any]] = []
    sidebar: List[str] = []
    if len(paragraphs) < 4:
        return {"title": title, "sections": sections, "sidebar_sections": sidebar}

    for group_title, span, start in _FALLBACK_GROUPS:
        chunk = paragraphs[span]
        if len(chunk) < 2 and group_title is not None:
            break
        paras = []
        for idx, p in enumerate(chunk):
            ids = extract_source_ids(p) or _fallback_source_ids(start + idx * 2, 3)
            paras.append({"content": clean_text(re.sub(r"\[\d+\]", "", p)), "source_ids": ids})
        sections.append({"title": group_title, "paragraphs": paras})
        if group_title:
            sidebar.append(group_title)

    return {"title": title, "sections": sections, "sidebar_sections": sidebar}


# ---------------------------------------------------------------------------
# Research + generation
# ---------------------------------------------------------------------------

def search_for_sources(topic: str, existing_urls: Set[str]) -> Dict[str, Any]:
    """One ``sonar`` search; citations not seen before become sources."""
    result = call_perplexity(SEARCH_PROMPT.format(topic=topic), model="sonar", max_tokens=2000)
    sources: List[Dict[str, Any]] = []
    for url in result.citations:
        if url in existing_urls:
            continue
        existing_urls.add(url)
        sources.append({
            "id": f"source-{len(sources) + 1}",
            "name": domain_name(url),
            "url": url,
            "favicon": favicon_url(url),
        })
    return {"text": result.text, "sources": sources}


def generate_article_content(topic: str, sources: List[Dict[str, Any]], search_results: List[str]) -> Dict[str, Any]:
    context = "\n\n---\n\n".join(search_results[:3])
    source_list = "\n".join(f"[{i + 1}] {s['name']}: {s['url']}" for i, s in enumerate(sources[:MAX_SOURCES]))
    prompt = f"""Write a comprehensive article about: "{topic}"

RESEARCH CONTEXT:
{context}

AVAILABLE SOURCES (cite by number):
{source_list}

{ARTICLE_GENERATION_PROMPT}"""
    result = call_perplexity(prompt, system=ARTICLE_SYSTEM_PROMPT, model="sonar-pro", max_tokens=2500)
    return parse_article_content(result.text)


def generate_discover_article(
    topic: str,
    seed_sources: Optional[List[Dict[str, Any]]] = None,
    delay: float = SEARCH_DELAY,
) -> Dict[str, Any]:
    """Research ``topic`` and write it up.

    Returns ``{"title", "sections", "all_sources", "hero_image_url"}``.
    Raises ArticleGenerationError when research finds too few sources or the
    written article is too thin.
    """
    seed_sources = seed_sources or []
    all_sources: List[Dict[str, Any]] = []
    existing: Set[str] = set()
    search_results: List[str] = []

    for seed in seed_sources:
        if seed["url"] in existing:
            continue
        existing.add(seed["url"])
        all_sources.append({
            "id": f"source-{len(all_sources) + 1}",
            "name": seed["name"],
            "url": seed["url"],
            "favicon": favicon_url(seed["url"]),
            "title": topic,
        })

    queries = [
        topic,
        f"{topic} latest news today",
        f"{topic} analysis opinions",
        f"{topic} impact implications",
        f"{topic} expert commentary",
        f"{topic} industry reaction",
    ]
    for query in queries:
        try:
            logger.info("searching: %s", query)
            found = search_for_sources(query, existing)
        except (LLMError, httpx.HTTPError) as e:
            logger.warning("search failed for %r: %s", query, e)
            continue
        for source in found["sources"]:
            source["id"] = f"source-{len(all_sources) + 1}"
            all_sources.append(source)
        search_results.append(found["text"])
        if len(all_sources) >= MAX_SOURCES:
            logger.info("reached %d sources, stopping search", len(all_sources))
            break
        if delay:
            time.sleep(delay)

    logger.info("total sources gathered: %d", len(all_sources))
    if len(all_sources) < MIN_SOURCES:
        raise ArticleGenerationError(f"Only gathered {len(all_sources)} sources - not enough for a rich article")

    parsed = generate_article_content(topic, all_sources, search_results)
    if not validate_article(parsed["sections"]):
        logger.warning(
            "article validation failed: %d sections, %d paragraphs",
            len(parsed["sections"]), _total_paragraphs(parsed["sections"]),
        )
        raise ArticleGenerationError("Generated article does not meet minimum content requirements")

    hero = next((s["thumbnail_url"] for s in seed_sources if s.get("thumbnail_url")), None)
    return {
        "title": parsed["title"] or topic,
        "sections": parsed["sections"],
        "all_sources": all_sources,
        "hero_image_url": hero,
    }


# ---------------------------------------------------------------------------
# Document building
# ---------------------------------------------------------------------------

def _public_source(s: Dict[str, Any]) -> Dict[str, Any]:
    out = {"id": s["id"], "name": s["name"], "url": s["url"], "favicon": s.get("favicon") or ""}
    if s.get("title"):
        out["title"] = s["title"]
    return out


def _chip(group: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "primarySource": _public_source(group[0]),
        "additionalCount": len(group) - 1,
        "additionalSources": [_public_source(s) for s in group[1:]],
    }


def distribute_sources_to_chips(source_ids: List[str], all_sources: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    by_id = {s["id"]: s for s in all_sources}
    used = [by_id[sid] for sid in source_ids if sid in by_id]

    if not used:
        fallback = all_sources[:3]
        return [_chip(fallback)] if fallback else []

    chips = [_chip(used)]
    if len(used) >= 5:
        second = used[1:][2:]
        if second:
            chips.append(_chip(second))
    return chips


def build_source_cards(all_sources: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "id": s["id"],
            "name": s["name"],
            "url": s["url"],
            "favicon": s.get("favicon") or "",
            "title": s.get("title") or s["name"],
        }
        for s in all_sources[:SOURCE_CARDS]
    ]


def build_discover_article(topic: str, result: Dict[str, Any], now: Optional[dt.datetime] = None) -> Dict[str, Any]:
    now = now or utc_now()
    stamp = utc_iso(now)
    all_sources = result["all_sources"]
    used_ids: Set[str] = set()

    sections = []
    for si, raw_section in enumerate(result["sections"]):
        paragraphs = []
        for pi, raw_para in enumerate(raw_section["paragraphs"]):
            ids = [sid for sid in raw_para["source_ids"] if sid not in used_ids] or raw_para["source_ids"]
            used_ids.update(ids)
            paragraphs.append({
                "id": f"para-{si}-{pi}",
                "content": raw_para["content"],
                "citations": distribute_sources_to_chips(ids, all_sources),
            })
        section: Dict[str, Any] = {"id": f"section-{si}", "paragraphs": paragraphs}
        if raw_section.get("title"):
            section["title"] = raw_section["title"]
        sections.append(section)

    title = result.get("title") or topic
    article: Dict[str, Any] = {
        "id": f"article-{int(now.timestamp() * 1000)}",
        "slug": slugify(title),
        "title": title,
        "publishedAt": stamp,
        "generatedAt": stamp,
        "totalSources": len(all_sources),
        "sections": sections,
        "sourceCards": build_source_cards(all_sources),
        "allSources": [_public_source(s) for s in all_sources],
        "sidebarSections": [s["title"] for s in sections if s.get("title")],
        "relatedArticles": [],
    }
    if result.get("hero_image_url"):
        article["heroImageUrl"] = result["hero_image_url"]
    return article


def build_manifest(articles: List[Dict[str, Any]], now: Optional[dt.datetime] = None) -> Dict[str, Any]:
    entries = []
    for a in articles:
        entry = {
            "slug": a["slug"],
            "title": a["title"],
            "publishedAt": a.get("publishedAt"),
            "totalSources": a.get("totalSources", len(a.get("allSources") or [])),
            "sidebarSections": a.get("sidebarSections") or [],
        }
        if a.get("heroImageUrl"):
            entry["heroImageUrl"] = a["heroImageUrl"]
        entries.append(entry)
    return {"generatedAt": utc_iso(now), "articles": entries}


# ---------------------------------------------------------------------------
# Trending topics
# ---------------------------------------------------------------------------

def get_topics_for_generation() -> List[Dict[str, Any]]:
    """Trending topics from the tech desks, or two evergreen fallbacks."""
    items = fetch_all_feeds(TRENDING_FEEDS)
    trending = group_into_topics(items)
    logger.info("found %d trending topics", len(trending))
    if trending:
        return [{"title": t["title"], "seed_sources": t["sources"]} for t in trending]
    return [dict(t, seed_sources=list(t["seed_sources"])) for t in FALLBACK_TOPICS]


def generate_articles(max_articles: int = 5, delay: float = SEARCH_DELAY) -> List[Dict[str, Any]]:
    topics = get_topics_for_generation()
    logger.info("generating up to %d articles from %d topics", max_articles, len(topics))
    articles = []
    for topic in topics[:max_articles]:
        try:
            result = generate_discover_article(topic["title"], topic["seed_sources"], delay=delay)
        except (ArticleGenerationError, LLMError, httpx.HTTPError) as e:
            logger.error("failed to generate article for %r: %s", topic["title"], e)
            continue
        article = build_discover_article(topic["title"], result)
        articles.append(article)
        logger.info("generated: %s (%d sources)", article["title"], article["totalSources"])
    return articles
