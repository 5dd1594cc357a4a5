from __future__ import annotations

from .base import rss

SOURCES = [
    rss('Buffer Resources', 'https://buffer.com/resources/feed/', 'social-trends', 1,
        ['social media', 'marketing', 'content']),
    rss('Hootsuite Blog', 'https://blog.hootsuite.com/feed/', 'social-trends', 1,
        ['social media', 'marketing', 'analytics']),
    rss('Sprout Social Insights', 'https://sproutsocial.com/insights/feed/', 'social-trends', 1,
        ['social media', 'marketing', 'strategy']),
    rss('Social Media Examiner', 'https://www.socialmediaexaminer.com/feed/', 'social-trends', 1,
        ['social media', 'marketing', 'facebook', 'instagram']),
]
