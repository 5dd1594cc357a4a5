from __future__ import annotations

from typing import Dict, List

from .base import RssSource, SourceConfig, SourceParser
from . import ai_creative, branding, design_ux, general_tech, social_trends, startup_business, trending

CATEGORIES: List[str] = [
    "design-ux",
    "branding",
    "ai-creative",
    "social-trends",
    "general-tech",
    "startup-business",
]

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "design-ux": [
        "design", "ux", "ui", "user experience", "interface", "typography", "figma",
        "sketch", "adobe", "prototype", "wireframe", "usability", "accessibility",
        "responsive", "mobile design", "web design", "design system", "component",
        "atomic design", "design token",
    ],
    "branding": [
        "brand", "branding", "logo", "identity", "rebrand", "visual identity",
        "brand strategy", "brand guidelines", "packaging", "trademark", "brand voice",
        "positioning", "brand architecture", "naming",
    ],
    "ai-creative": [
        "ai", "artificial intelligence", "machine learning", "generative", "chatgpt",
        "gpt", "claude", "gemini", "midjourney", "dall-e", "stable diffusion", "runway",
        "sora", "ai art", "ai design", "ai tool", "prompt", "text-to-image",
        "text-to-video", "llm", "large language model", "figma ai", "adobe firefly",
        "creative ai",
    ],
    "social-trends": [
        "instagram", "tiktok", "linkedin", "youtube", "twitter", "x", "social media",
        "influencer", "viral", "algorithm", "engagement", "content creator", "shorts",
        "reels", "stories", "carousel", "hashtag", "trending", "social strategy",
        "platform update",
    ],
    "general-tech": [
        "technology", "tech", "startup", "innovation", "digital", "software", "hardware",
        "app", "platform", "saas", "cloud", "developer", "engineering", "product", "launch",
    ],
    "startup-business": [
        "startup", "entrepreneur", "agency", "freelance", "business", "funding", "venture",
        "growth", "scale", "revenue", "client", "proposal", "pricing", "retainer",
        "contract", "portfolio", "pitch", "investor", "bootstrap", "solopreneur",
    ],
}

_MODULES = [design_ux, branding, ai_creative, social_trends, general_tech, startup_business]

# Registry keyed by source name
REGISTRY: Dict[str, RssSource] = {p.config.name: p for m in _MODULES for p in m.SOURCES}

ALL_SOURCES: List[SourceConfig] = [p.config for p in REGISTRY.values()]

TRENDING_FEEDS: List[SourceConfig] = [p.config for p in trending.SOURCES]


def list_source_names() -> List[str]:
    return list(REGISTRY.keys())

def get_parser(source_name: str) -> SourceParser:
    try:
        return REGISTRY[source_name]
    except KeyError:
        raise KeyError(f"Unknown source: {source_name}")

def get_source(source_name: str) -> SourceConfig:
    return get_parser(source_name).config

def get_sources_by_category(category: str) -> List[SourceConfig]:
    return [s for s in ALL_SOURCES if s.category == category]

def get_high_priority_sources() -> List[SourceConfig]:
    return [s for s in ALL_SOURCES if s.priority == 1]

def get_sources_for_daily_fetch() -> List[SourceConfig]:
    """Priority 1 and 2 feeds, best first; order within a priority is kept."""
    return sorted((s for s in ALL_SOURCES if s.priority <= 2), key=lambda s: s.priority)
