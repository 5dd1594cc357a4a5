from __future__ import annotations

from .base import rss

SOURCES = [
    rss('Logo Design Love', 'https://www.logodesignlove.com/feed', 'branding', 1,
        ['logo', 'identity', 'branding']),
    rss('BP&O', 'https://bpando.org/feed/', 'branding', 1,
        ['branding', 'packaging', 'opinion']),
    rss('Identity Designed', 'https://identitydesigned.com/feed/', 'branding', 1,
        ['branding', 'identity', 'logo', 'visual identity']),
    rss('Oren Meets World', 'https://www.productworld.xyz/feed', 'branding', 1,
        ['product', 'strategy', 'branding', 'business']),
    rss('Marcus on AI (Gary Marcus)', 'https://garymarcus.substack.com/feed', 'branding', 2,
        ['ai', 'criticism', 'technology', 'analysis']),
]
