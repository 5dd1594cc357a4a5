"""Topic classification for news items.

Keyword matching is free and good enough for most headlines; items it is
unsure about can be sent to Claude Haiku.
"""

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from .llm import HAIKU, LLMError, extract_json, generate_text
from .sources import CATEGORIES, CATEGORY_KEYWORDS

logger = logging.getLogger(__name__)

RELEVANT_CATEGORIES = ["design-ux", "branding", "ai-creative", "social-trends"]
DEFAULT_CATEGORY = "general-tech"
DEFAULT_AI_CONFIDENCE = 70

CLASSIFY_PROMPT = """Classify this news item into ONE of these categories:

1. design-ux: Design & UX/UI (interface design, user experience, design tools, accessibility, web design, Figma, Sketch)
2. branding: Branding & Strategy (logo design, brand identity, rebranding, visual identity, brand guidelines)
3. ai-creative: AI for Creatives (AI art, generative AI, ChatGPT, Midjourney, Runway, Figma AI, creative AI tools)
4. social-trends: Social Media Trends (Instagram, TikTok, YouTube, platform updates, viral content, influencers)
5. general-tech: General Tech (technology news, software, hardware, apps, launches)
6. startup-business: Startup/Agency Business (funding, entrepreneurship, agency life, freelance, business strategy)

NEWS ITEM:
Title: {title}
Description: {description}

Respond with ONLY this JSON format:
{{
  "category": "category-slug",
  "confidence": 85,
  "reasoning": "Brief explanation in 10 words or less"
}}"""


def score_text_for_category(text: str, category: str) -> int:
    """0..100 keyword score; longer keywords count double."""
    keywords = CATEGORY_KEYWORDS[category]
    normalized = (text or "").lower()
    weighted = 0
    for kw in keywords:
        count = len(re.findall(r"\b" + re.escape(kw.lower()) + r"\b", normalized))
        if count:
            weighted += count * (2 if len(kw) > 5 else 1)
    max_possible = len(keywords) * 3
    return min(100, int(weighted / max_possible * 100 + 0.5))


def classify_by_keywords(title: str, description: Optional[str] = None) -> Dict[str, Any]:
    text = f"{title} {description or ''}"
    scores = {cat: score_text_for_category(text, cat) for cat in CATEGORIES}
    best = DEFAULT_CATEGORY
    highest = 0
    for cat, score in scores.items():
        if score > highest:
            highest = score
            best = cat
    return {"category": best, "confidence": highest, "scores": scores}


def classify_by_ai(title: str, description: Optional[str] = None) -> Dict[str, Any]:
    prompt = CLASSIFY_PROMPT.format(title=title, description=description or "No description provided")
    try:
        result = generate_text(prompt, model=HAIKU, max_tokens=150, temperature=0.1)
        parsed = extract_json(result.text)
        if not parsed:
            raise ValueError("No valid JSON in response")
        category = parsed.get("category")
        if category not in CATEGORIES:
            raise ValueError(f"Invalid category: {category}")
        try:
            confidence = int(parsed.get("confidence") or DEFAULT_AI_CONFIDENCE)
        except (TypeError, ValueError):
            confidence = DEFAULT_AI_CONFIDENCE
        return {
            "category": category,
            "confidence": min(100, max(0, confidence)),
            "reasoning": parsed.get("reasoning") or "AI classification",
        }
    except (LLMError, httpx.HTTPError, ValueError) as e:
        logger.warning("AI classification failed: %s", e)
        kw = classify_by_keywords(title, description)
        return {
            "category": kw["category"],
            "confidence": kw["confidence"],
            "reasoning": "Fallback to keyword classification",
        }


def classify_news(
    title: str,
    description: Optional[str] = None,
    force_ai: bool = False,
    keyword_threshold: int = 50,
) -> Dict[str, Any]:
    kw = classify_by_keywords(title, description)
    if not force_ai and kw["confidence"] >= keyword_threshold:
        return {"category": kw["category"], "confidence": kw["confidence"], "method": "keywords"}
    ai = classify_by_ai(title, description)
    return {"category": ai["category"], "confidence": ai["confidence"], "method": "ai"}


def classify_news_batch(
    items: List[Dict[str, Any]],
    keyword_threshold: int = 50,
    delay: float = 0.2,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[Dict[str, Any]]:
    """Keyword pass over everything, then AI only for the ambiguous items."""
    results: List[Dict[str, Any]] = []
    needs_ai: List[int] = []
    for i, item in enumerate(items):
        kw = classify_by_keywords(item.get("title") or "", item.get("description"))
        results.append({"category": kw["category"], "confidence": kw["confidence"], "method": "keywords"})
        if kw["confidence"] < keyword_threshold:
            needs_ai.append(i)

    total = len(items)
    for j, i in enumerate(needs_ai):
        item = items[i]
        ai = classify_by_ai(item.get("title") or "", item.get("description"))
        results[i] = {"category": ai["category"], "confidence": ai["confidence"], "method": "ai"}
        if on_progress:
            on_progress(total - len(needs_ai) + j + 1, total)
        if j < len(needs_ai) - 1 and delay > 0:
            time.sleep(delay)

    if on_progress:
        on_progress(total, total)
    return results


def is_relevant(title: str, description: Optional[str] = None, min_confidence: int = 30) -> bool:
    result = classify_by_keywords(title, description)
    return result["category"] in RELEVANT_CATEGORIES and result["confidence"] >= min_confidence


def filter_relevant_news(
    items: List[Dict[str, Any]],
    min_confidence: int = 30,
    include_general: bool = False,
) -> List[Dict[str, Any]]:
    allowed = CATEGORIES if include_general else RELEVANT_CATEGORIES
    out = []
    for item in items:
        result = classify_by_keywords(item.get("title") or "", item.get("description"))
        if result["category"] in allowed and result["confidence"] >= min_confidence:
            out.append(item)
    return out


def estimate_classification_cost(item_count: int) -> Dict[str, Any]:
    # Haiku pricing per million tokens: 0.25 in / 1.25 out
    prompt_tokens, completion_tokens = 300, 50
    cost = item_count * prompt_tokens / 1_000_000 * 0.25 + item_count * completion_tokens / 1_000_000 * 1.25
    return {
        "estimated_cost_usd": round(cost * 100) / 100,
        "breakdown": f"{item_count} classifications x ~{prompt_tokens + completion_tokens} tokens = ~${cost:.4f}",
    }
