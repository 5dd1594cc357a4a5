"""Brand-aligned imagery from Pexels.

Queries combine a two-word core concept from the title with an abstract,
minimal modifier, are filtered to the brand palette (orange, black, white)
and reject photos whose alt text suggests lettering.
"""

import logging
import random
import re
from typing import Any, Dict, List, Optional

import httpx

from .config import settings

logger = logging.getLogger(__name__)

PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"
BRAND_COLORS = ("orange", "black", "white")
FALLBACK_QUERY = "abstract minimal gradient"
DEFAULT_MODIFIERS = ["abstract minimal design", "geometric pattern", "modern gradient"]

CATEGORY_IMAGE_KEYWORDS: Dict[str, List[str]] = {
    "design-ux": ["geometric shapes minimal", "abstract gradient design", "clean lines architecture"],
    "branding": ["minimal typography", "abstract pattern design", "clean workspace"],
    "ai-creative": ["abstract digital art", "futuristic minimal", "technology abstract"],
    "social-trends": ["colorful abstract pattern", "modern gradient", "vibrant geometric"],
    "general-tech": ["technology minimal", "abstract circuit", "modern office minimal"],
    "startup-business": ["minimal workspace", "modern architecture", "abstract success"],
}

# Idea formats map onto the image categories above.
IDEA_IMAGE_CATEGORY = {
    "short-form": "social-trends",
    "long-form": "ai-creative",
    "blog": "design-ux",
}

# Modifiers for free-text queries coming through the API.
QUERY_MODIFIERS: Dict[str, List[str]] = {
    "design": ["geometric abstract minimal", "clean lines architecture", "modern gradient"],
    "ai": ["futuristic abstract digital", "technology minimal", "neural network abstract"],
    "brand": ["minimal typography layout", "modern workspace", "clean design"],
    "tech": ["technology abstract pattern", "circuit minimal", "digital abstract"],
    "social": ["colorful abstract gradient", "vibrant geometric", "modern pattern"],
    "default": DEFAULT_MODIFIERS,
}

TEXT_INDICATOR_WORDS = [
    "sign", "text", "banner", "poster", "billboard", "quote", "typography",
    "word", "letter", "message", "slogan", "label", "headline", "title",
    "writing", "book", "magazine", "newspaper", "document", "note",
]

_REMOVE_PATTERNS = [
    re.compile(p, re.I)
    for p in (
        r"^how to ", r"^guide to ", r"^the complete ", r"^introduction to ",
        r"^what is ", r"^why you should ", r"^tips for ", r"^\d+ ways to ",
        r" launches? ", r" announces? ", r" unveils? ", r" introduces? ",
    )
]

CONCEPT_STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "this",
    "that", "how", "what", "when", "where", "why", "your", "our", "new",
}

QUERY_STOP_WORDS = CONCEPT_STOP_WORDS | {
    "been", "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "can", "these", "those", "it",
    "its", "it's", "which", "their", "my", "his", "her", "we", "you", "they",
    "reel", "carousel", "blog", "post", "video", "article", "content",
    "launches", "announces", "unveils", "introduces", "guide",
}


def _words(text: str, stop_words) -> List[str]:
    cleaned = re.sub(r"[^a-z0-9\s]", " ", text.lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in stop_words]


def extract_core_concept(title: str) -> str:
    cleaned = title
    for pattern in _REMOVE_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)
    return " ".join(_words(cleaned, CONCEPT_STOP_WORDS)[:2]) or "creative"


def build_pexels_query(title: str, category: Optional[str] = None, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    modifiers = CATEGORY_IMAGE_KEYWORDS.get(category or "", DEFAULT_MODIFIERS)
    return f"{extract_core_concept(title)} {rng.choice(modifiers)}"


def likely_contains_text(photo: Dict[str, Any]) -> bool:
    alt = (photo.get("alt") or "").lower()
    return any(word in alt for word in TEXT_INDICATOR_WORDS)


def _search(client: httpx.Client, query: str, per_page: int, color: Optional[str] = None) -> List[Dict[str, Any]]:
    params: Dict[str, Any] = {"query": query, "per_page": per_page, "orientation": "landscape"}
    if color:
        params["color"] = color
    r = client.get(PEXELS_SEARCH_URL, params=params)
    r.raise_for_status()
    photos = r.json().get("photos") or []
    return [p for p in photos if not likely_contains_text(p)]


def _client() -> httpx.Client:
    return httpx.Client(
        headers={"Authorization": settings.pexels_api_key},
        timeout=settings.request_timeout,
    )


def fetch_pexels_image(title: str, category: Optional[str] = None, rng: Optional[random.Random] = None) -> Optional[str]:
    """Large image URL for an idea card, or None when nothing suitable turns up."""
    if not settings.pexels_api_key:
        return None
    rng = rng or random
    with _client() as client:
        for color in BRAND_COLORS:
            try:
                photos = _search(client, build_pexels_query(title, category, rng), 10, color)
            except (httpx.HTTPError, ValueError) as e:
                logger.debug("pexels %s search failed: %s", color, e)
                continue
            if photos:
                return rng.choice(photos[:5])["src"]["large"]
        try:
            photos = _search(client, FALLBACK_QUERY, 5)
        except (httpx.HTTPError, ValueError) as e:
            logger.info("pexels fallback search failed: %s", e)
            return None
    return photos[0]["src"]["large"] if photos else None


def detect_query_category(raw_query: str) -> str:
    q = raw_query.lower()
    if any(k in q for k in ("design", "ux", "ui", "figma")):
        return "design"
    if any(k in q for k in ("ai", "gpt", "claude", "machine learning")):
        return "ai"
    if any(k in q for k in ("brand", "logo", "identity")):
        return "brand"
    if any(k in q for k in ("tech", "software", "startup")):
        return "tech"
    if any(k in q for k in ("social", "instagram", "tiktok")):
        return "social"
    return "default"


def build_search_query(raw_query: str, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    keywords = " ".join(_words(raw_query, QUERY_STOP_WORDS)[:2])
    modifier = rng.choice(QUERY_MODIFIERS[detect_query_category(raw_query)])
    return f"{keywords} {modifier}" if keywords else modifier


def _attribution(photo: Dict[str, Any], default_alt: str) -> Dict[str, Any]:
    return {
        "imageUrl": photo["src"]["large"],
        "photographer": photo.get("photographer"),
        "pexelsUrl": photo.get("url"),
        "alt": photo.get("alt") or default_alt,
    }


def search_image(raw_query: str, per_page: int = 5, rng: Optional[random.Random] = None) -> Optional[Dict[str, Any]]:
    """Image with attribution for a free-text query; None when nothing passes the filters."""
    rng = rng or random
    query = build_search_query(raw_query, rng)
    with _client() as client:
        for color in BRAND_COLORS:
            try:
                photos = _search(client, query, per_page, color)
            except (httpx.HTTPError, ValueError) as e:
                logger.debug("pexels %s search failed: %s", color, e)
                continue
            if photos:
                return _attribution(photos[rng.randrange(min(len(photos), 3))], "Abstract design image")
        try:
            photos = _search(client, FALLBACK_QUERY, 5)
        except (httpx.HTTPError, ValueError) as e:
            logger.info("pexels fallback search failed: %s", e)
            return None
    return _attribution(photos[0], "Abstract minimal image") if photos else None
