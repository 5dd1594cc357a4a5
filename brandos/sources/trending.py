from __future__ import annotations

from .base import rss

# Broad tech desks polled by the discover article generator to spot stories
# several outlets are covering at once.
SOURCES = [
    rss('TechCrunch', 'https://techcrunch.com/feed/', 'general-tech', 2, []),
    rss('The Verge', 'https://www.theverge.com/rss/index.xml', 'general-tech', 2, []),
    rss('Wired', 'https://www.wired.com/feed/rss', 'general-tech', 2, []),
    rss('Ars Technica', 'https://feeds.arstechnica.com/arstechnica/index', 'general-tech', 2, []),
    rss('Engadget', 'https://www.engadget.com/rss.xml', 'general-tech', 2, []),
    rss('9to5Mac', 'https://9to5mac.com/feed/', 'general-tech', 2, []),
    rss('MacRumors', 'https://feeds.macrumors.com/MacRumors-All', 'general-tech', 2, []),
    rss('Android Central', 'https://www.androidcentral.com/feed', 'general-tech', 2, []),
]
