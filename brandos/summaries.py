"""Tier-2 news content: short AI summaries written by Claude Haiku.

Roughly 500 output tokens per summary; about fifty a month costs well under
a dollar.
"""

import logging
import math
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from .llm import HAIKU, LLMError, generate_text
from .models import NEWS_TYPES
from .utils import utc_iso

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = """You are a brand strategist and creative writer for BRAND-OS, a design and branding agency. Your task is to create concise, informative summaries of news articles and topics.

Writing Style:
- Use first person plural (we, us, our) when appropriate
- Active voice, present tense
- Balance expertise with accessibility
- Never gatekeep knowledge
- Be friendly, creative, and visionary

Output Format:
- Write exactly 2-3 paragraphs
- First paragraph: Key facts and what happened
- Second paragraph: Why it matters for brands/designers
- Third paragraph (optional): Actionable insight or forward-looking perspective
- Total length: 150-250 words
- No headers, bullet points, or formatting - just flowing paragraphs"""

SUMMARY_PROMPT = """Create a summary for this news topic:

Title: {title}

Description: {description}

Sources:
{sources}

Write a 2-3 paragraph summary that explains what happened and why it matters for brand designers and creative professionals."""

TIERS = ("featured", "summary", "quick")


class SummaryError(RuntimeError):
    pass


def _source_list(sources: List[Dict[str, str]]) -> str:
    return "\n".join(f"- {s['name']}: {s['url']}" for s in sources)


def generate_summary(item: Dict[str, Any]) -> Dict[str, Any]:
    """``item`` carries ``title``, ``description`` and ``sources``."""
    prompt = SUMMARY_PROMPT.format(
        title=item["title"],
        description=item.get("description") or item["title"],
        sources=_source_list(item.get("sources") or []),
    )
    try:
        result = generate_text(prompt, system=SUMMARY_SYSTEM_PROMPT, model=HAIKU, max_tokens=500, temperature=0.7)
    except (LLMError, httpx.HTTPError) as e:
        raise SummaryError(f"Failed to generate summary: {e}") from e

    out: Dict[str, Any] = {
        "summary": result.text.strip(),
        "generatedAt": utc_iso(),
        "model": HAIKU,
    }
    if result.input_tokens and result.output_tokens:
        out["tokenUsage"] = {"promptTokens": result.input_tokens, "completionTokens": result.output_tokens}
    return out


def generate_summaries_batch(
    items: List[Dict[str, Any]],
    delay: float = 0.5,
    on_progress: Optional[Callable[[int, int], None]] = None,
    on_error: Optional[Callable[[Dict[str, Any], Exception], None]] = None,
) -> Dict[str, Dict[str, Any]]:
    """Summaries keyed by item title; failed items are reported and skipped."""
    results: Dict[str, Dict[str, Any]] = {}
    for i, item in enumerate(items):
        try:
            results[item["title"]] = generate_summary(item)
        except SummaryError as e:
            logger.error("summary failed for %r: %s", item["title"], e)
            if on_error:
                on_error(item, e)
            continue
        if on_progress:
            on_progress(i + 1, len(items))
        if i < len(items) - 1 and delay > 0:
            time.sleep(delay)
    return results


def estimate_token_usage(item: Dict[str, Any]) -> Dict[str, int]:
    urls = "\n".join(s["url"] for s in item.get("sources") or [])
    prompt_text = f"{SUMMARY_SYSTEM_PROMPT}\n{item['title']}\n{item.get('description') or ''}\n{urls}"
    # ~4 chars per token in, ~200 words out
    return {"promptTokens": math.ceil(len(prompt_text) / 4), "completionTokens": 260}


def estimate_cost(item_count: int) -> Dict[str, Any]:
    prompt_tokens, completion_tokens = 300, 260
    cost = item_count * prompt_tokens / 1_000_000 * 0.25 + item_count * completion_tokens / 1_000_000 * 1.25
    return {
        "estimated_cost_usd": round(cost * 100) / 100,
        "breakdown": f"{item_count} summaries x ~{prompt_tokens + completion_tokens} tokens = ~${cost:.4f}",
    }


def _needs_summary(item: Dict[str, Any]) -> bool:
    return item.get("tier") not in TIERS and not item.get("aiSummary") and not item.get("articlePath")


def find_candidates(store) -> List[Dict[str, Any]]:
    """News items with no tier, no summary and no article, in file order."""
    candidates = []
    for news_type in NEWS_TYPES:
        data = store.load_news(news_type)
        if data is None:
            logger.warning("news file not found: %s", store.news_path(news_type))
            continue
        for index, item in enumerate(data.get("updates") or []):
            if _needs_summary(item):
                candidates.append({"news_type": news_type, "index": index, "item": item})
    return candidates


def summarize_latest_news(
    store,
    max_items: Optional[int] = None,
    dry_run: bool = False,
    delay: float = 0.5,
) -> Dict[str, Any]:
    candidates = find_candidates(store)
    to_process = candidates if max_items is None else candidates[:max_items]
    cost = estimate_cost(len(to_process))
    logger.info("found %d items without summaries, processing %d (%s)", len(candidates), len(to_process), cost["breakdown"])

    report: Dict[str, Any] = {
        "candidates": len(candidates),
        "processed": len(to_process),
        "success": 0,
        "errors": 0,
        "titles": [c["item"]["title"] for c in to_process],
        "cost": cost,
    }
    if dry_run or not to_process:
        return report

    by_type: Dict[str, List[Dict[str, Any]]] = {}
    for c in to_process:
        by_type.setdefault(c["news_type"], []).append(c)

    for news_type, group in by_type.items():
        data = store.load_news(news_type)
        for n, c in enumerate(group):
            item = c["item"]
            try:
                result = generate_summary(item)
            except SummaryError as e:
                logger.error("summary failed for %r: %s", item["title"][:40], e)
                report["errors"] += 1
                continue
            update = data["updates"][c["index"]]
            update["tier"] = "summary"
            update["aiSummary"] = result["summary"]
            sources = item.get("sources") or []
            if sources:
                update["sourceUrl"] = sources[0]["url"]
            report["success"] += 1
            if n < len(group) - 1 and delay > 0:
                time.sleep(delay)
        store.write_news(store.news_path(news_type), data)
        logger.info("saved summaries to %s/latest.json", news_type)

    return report
