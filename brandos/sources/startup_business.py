from __future__ import annotations

from .base import rss

SOURCES = [
    rss('Agency Post (HubSpot)', 'https://blog.hubspot.com/agency/rss.xml', 'startup-business', 1,
        ['agency', 'marketing', 'business']),
    rss('Paul Graham Essays', 'http://www.aaronsw.com/2002/feeds/pgessays.rss', 'startup-business', 1,
        ['startup', 'essays', 'yc', 'founder']),
    rss('Seth Godin', 'https://seths.blog/feed/', 'startup-business', 2,
        ['marketing', 'business', 'strategy']),
    rss('Stratechery', 'https://stratechery.com/feed/', 'startup-business', 2,
        ['tech', 'strategy', 'business', 'analysis']),
    rss('Derek Thompson', 'https://derekthompson.substack.com/feed', 'startup-business', 1,
        ['culture', 'economics', 'media', 'trends']),
    rss('Greg Isenberg (Late Checkout)', 'https://latecheckout.substack.com/feed', 'startup-business', 1,
        ['startup', 'community', 'business', 'ideas']),
    rss("Lenny's Newsletter", 'https://lennysnewsletter.com/feed', 'startup-business', 1,
        ['product', 'growth', 'startup', 'advice']),
]
