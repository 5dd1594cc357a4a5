"""Extra coverage for news items and on-demand article expansion (Perplexity)."""

import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx

from .config import settings
from .llm import LLMError, call_perplexity
from .utils import hostname, domain_name, favicon_url

logger = logging.getLogger(__name__)

ENRICH_SYSTEM_PROMPT = "You are a news researcher. Find recent articles about the given topic. Be concise."
MAX_ADDITIONAL_SOURCES = 5
LONG_PARAGRAPH = 200

ARTICLE_ENRICH_PROMPT = """Write a comprehensive news article summary about: "{title}"

Structure your response with:
1. An introduction section (2-3 paragraphs) covering the main news
2. A section titled "Historical Context" or "Background" (2 paragraphs) providing context
3. A section titled "Market Reaction and Outlook" or "Impact and Future" (2 paragraphs) discussing implications

Requirements:
- Each paragraph should be 2-4 sentences
- Include citations [1], [2], etc. inline where you reference sources
- Be factual and cite recent news sources
- Focus on the most relevant and current information
- Write in a professional news style"""

_CITATION_RE = re.compile(r"\[(\d+)\]")


def source_display_name(url: str) -> str:
    """`https://www.theverge.com/x` -> `Theverge`."""
    host = hostname(url)
    if not host:
        return "Unknown Source"
    domain = re.sub(r"^www\.", "", host)
    parts = domain.split(".")
    if len(parts) >= 2:
        return parts[0][:1].upper() + parts[0][1:]
    return domain


def enrich_with_perplexity(topic: str, existing_urls: Optional[List[str]] = None) -> Dict[str, Any]:
    """Other outlets covering ``topic``. Never raises; failures give no sources."""
    empty: Dict[str, Any] = {"additional_sources": []}
    if not settings.perplexity_api_key:
        logger.warning("PERPLEXITY_API_KEY not set, skipping enrichment")
        return empty

    try:
        result = call_perplexity(
            f'Find recent news coverage about: "{topic}". List the main sources covering this story.',
            system=ENRICH_SYSTEM_PROMPT,
            model="sonar",
            max_tokens=300,
        )
    except (LLMError, httpx.HTTPError) as e:
        logger.warning("perplexity enrichment failed: %s", str(e)[:100])
        return empty

    existing = {u.lower() for u in (existing_urls or [])}
    seen_domains = set()
    sources: List[Dict[str, str]] = []
    for url in result.citations:
        if not url.startswith("http") or url.lower() in existing:
            continue
        name = source_display_name(url)
        if name.lower() in seen_domains:
            continue
        seen_domains.add(name.lower())
        sources.append({"name": name, "url": url})

    return {"additional_sources": sources[:MAX_ADDITIONAL_SOURCES], "summary": result.text[:200]}


def batch_enrich_topics(
    topics: List[Dict[str, Any]],
    max_enrichments: int = 3,
    delay: float = 0.5,
) -> Dict[str, List[Dict[str, str]]]:
    """``topics`` are ``{"title", "existing_urls"}``; returns title -> new sources."""
    results: Dict[str, List[Dict[str, str]]] = {}
    to_enrich = topics[:max_enrichments]
    logger.info("enriching %d topics with perplexity", len(to_enrich))

    for i, topic in enumerate(to_enrich):
        found = enrich_with_perplexity(topic["title"], topic.get("existing_urls") or [])
        if found["additional_sources"]:
            results[topic["title"]] = found["additional_sources"]
            logger.info("%s... +%d sources", topic["title"][:40], len(found["additional_sources"]))
        if i < len(to_enrich) - 1 and delay:
            time.sleep(delay)

    total = sum(len(v) for v in results.values())
    logger.info("enrichment complete: +%d sources across %d topics", total, len(results))
    return results


# ---------------------------------------------------------------------------
# /api/article-enrich
# ---------------------------------------------------------------------------

def _paragraph_source(idx: int, url: str, title: Optional[str] = None) -> Dict[str, Any]:
    src = {"id": f"source-{idx}", "name": domain_name(url), "url": url, "favicon": favicon_url(url)}
    if title:
        src["title"] = title
    return src


def parse_enriched_content(text: str, citations: Optional[List[str]] = None) -> Dict[str, Any]:
    """Markdown-ish Perplexity output -> sections of cited paragraphs.

    ``##``/``###`` lines open sections, a ``#`` title is skipped, bullet lines
    become their own paragraphs and a running paragraph is cut once it
    passes ~200 chars. ``[n]`` markers resolve against ``citations``.
    """
    text = text or ""
    source_map: Dict[int, Dict[str, Any]] = {}
    all_sources: List[Dict[str, Any]] = []
    for idx, url in enumerate(citations or [], start=1):
        src = _paragraph_source(idx, url)
        source_map[idx] = src
        all_sources.append(src)

    sections: List[Dict[str, Any]] = []
    state: Dict[str, Any] = {"section": None, "para": ""}

    def flush_paragraph():
        para = state["para"]
        section = state["section"]
        if not para.strip() or section is None:
            return
        para_sources: List[Dict[str, Any]] = []
        for num in _CITATION_RE.findall(para):
            src = source_map.get(int(num))
            if src and src not in para_sources:
                para_sources.append(src)
        cleaned = _CITATION_RE.sub("", para).strip()
        if cleaned:
            section["paragraphs"].append({"content": cleaned, "sources": para_sources})
        state["para"] = ""

    def flush_section():
        flush_paragraph()
        if state["section"] and state["section"]["paragraphs"]:
            sections.append(state["section"])

    for line in (ln for ln in text.split("\n") if ln.strip()):
        if line.startswith("## ") or line.startswith("### "):
            flush_section()
            state["section"] = {
                "id": f"section-{len(sections) + 1}",
                "title": re.sub(r"^#+\s*", "", line).strip(),
                "paragraphs": [],
            }
            continue
        if line.startswith("# "):
            continue

        if state["section"] is None:
            state["section"] = {"id": "section-intro", "paragraphs": []}

        is_bullet = line.startswith("-") or line.startswith("*")
        if is_bullet:
            flush_paragraph()
            state["para"] = re.sub(r"^[-*]\s*", "", line)
            flush_paragraph()
        elif state["para"]:
            if len(state["para"]) > LONG_PARAGRAPH:
                flush_paragraph()
            state["para"] += " " + line
        else:
            state["para"] = line

    flush_section()

    if not sections:
        sections.append({
            "id": "section-1",
            "paragraphs": [{"content": _CITATION_RE.sub("", text).strip(), "sources": all_sources[:3]}],
        })
    return {"sections": sections, "all_sources": all_sources}


def related_queries(title: str) -> List[str]:
    return [
        f"{title} latest updates",
        f"{title} analysis",
        f"{title} impact",
        f"{title} future outlook",
    ]


def fallback_enrichment(title: str, existing_sources: List[Dict[str, str]]) -> Dict[str, Any]:
    sources = [
        {"id": f"source-{idx}", "name": domain_name(s["url"]), "url": s["url"], "favicon": favicon_url(s["url"])}
        for idx, s in enumerate(existing_sources)
    ]
    return {
        "sections": [{
            "id": "section-1",
            "paragraphs": [{
                "content": f"{title}. This article explores the latest developments and insights in this area.",
                "sources": sources,
            }],
        }],
        "relatedQueries": [],
        "allSources": sources,
    }


def enrich_article(title: str, existing_sources: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
    """Expanded, cited write-up of a headline. Raises LLMError on provider failure."""
    existing_sources = existing_sources or []
    if not settings.perplexity_api_key:
        logger.info("perplexity key not configured, returning fallback enrichment")
        return fallback_enrichment(title, existing_sources)

    result = call_perplexity(ARTICLE_ENRICH_PROMPT.format(title=title), model="sonar-pro", max_tokens=2500)
    parsed = parse_enriched_content(result.text, result.citations)
    return {
        "sections": parsed["sections"],
        "relatedQueries": related_queries(title),
        "allSources": parsed["all_sources"],
    }
