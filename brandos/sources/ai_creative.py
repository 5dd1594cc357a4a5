from __future__ import annotations

from .base import rss

SOURCES = [
    rss('Google AI Blog', 'https://blog.google/technology/ai/rss/', 'ai-creative', 1,
        ['ai', 'google', 'gemini', 'bard']),
    rss('TechCrunch AI', 'https://techcrunch.com/category/artificial-intelligence/feed/', 'ai-creative', 1,
        ['ai', 'machine learning', 'startups']),
    rss('Ars Technica', 'https://feeds.arstechnica.com/arstechnica/features/', 'ai-creative', 1,
        ['ai', 'technology', 'science']),
    rss('VentureBeat AI', 'https://venturebeat.com/category/ai/feed/', 'ai-creative', 1,
        ['ai', 'enterprise', 'machine learning']),
    rss('MIT Technology Review AI', 'https://www.technologyreview.com/topic/artificial-intelligence/feed', 'ai-creative', 2,
        ['ai', 'research', 'technology']),
    rss('Love + Money', 'https://loveandmoney.substack.com/feed', 'ai-creative', 1,
        ['ai', 'creative', 'business', 'design']),
    rss('Awwwards', 'https://www.awwwards.com/blog/feed', 'ai-creative', 1,
        ['web design', 'awards', 'creative', 'inspiration']),
    rss('Dribbble', 'https://dribbble.com/stories.rss', 'ai-creative', 1,
        ['design', 'creative', 'portfolio', 'inspiration']),
]
