from __future__ import annotations

from .base import rss

SOURCES = [
    rss('TechCrunch', 'https://techcrunch.com/feed/', 'general-tech', 2,
        ['technology', 'startups', 'innovation']),
    rss('The Verge', 'https://www.theverge.com/rss/index.xml', 'general-tech', 2,
        ['technology', 'gadgets', 'culture']),
    rss('Wired', 'https://www.wired.com/feed/rss', 'general-tech', 3,
        ['technology', 'science', 'culture']),
    rss('Naval Ravikant', 'https://nav.al/podcast/feed', 'general-tech', 1,
        ['startup', 'philosophy', 'wealth', 'entrepreneurship']),
    rss('Peter Yang (Creator Economy)', 'https://creatoreconomy.so/feed', 'general-tech', 1,
        ['creator', 'economy', 'product', 'growth']),
    rss('Sequoia Capital', 'https://medium.com/feed/sequoia-capital', 'general-tech', 1,
        ['venture', 'startup', 'investing', 'growth']),
    rss('a16z', 'https://a16z.com/news-content/feed', 'general-tech', 1,
        ['venture', 'crypto', 'ai', 'startup']),
    rss('SemiAnalysis', 'https://semianalysis.substack.com/feed', 'general-tech', 1,
        ['semiconductors', 'ai', 'chips', 'hardware']),
    rss('Hacker News', 'https://news.ycombinator.com/rss', 'general-tech', 2,
        ['tech', 'startup', 'programming', 'news']),
]
