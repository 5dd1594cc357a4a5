from __future__ import annotations

from .base import rss

SOURCES = [
    rss('Design Week', 'https://www.designweek.co.uk/feed/', 'design-ux', 1,
        ['design', 'ux', 'ui', 'branding', 'typography']),
    rss('Creative Bloq', 'https://www.creativebloq.com/feed', 'design-ux', 1,
        ['design', 'creative', 'graphic design', 'illustration']),
    rss('Abduzeedo', 'https://abduzeedo.com/rss.xml', 'design-ux', 2,
        ['design', 'inspiration', 'tutorials']),
    rss('UX Collective', 'https://uxdesign.cc/feed', 'design-ux', 1,
        ['ux', 'user experience', 'design thinking', 'product design']),
    rss('Smashing Magazine', 'https://www.smashingmagazine.com/feed/', 'design-ux', 1,
        ['web design', 'ux', 'css', 'accessibility']),
    rss('CSS-Tricks', 'https://css-tricks.com/feed/', 'design-ux', 2,
        ['css', 'web design', 'frontend', 'development']),
    rss('Sidebar', 'https://sidebar.io/feed.xml', 'design-ux', 1,
        ['design', 'links', 'curated', 'ux']),
    rss('Figma Blog', 'https://figma.com/blog/feed/atom.xml', 'design-ux', 1,
        ['figma', 'design', 'product design', 'collaboration']),
    rss('Freethink', 'https://www.freethink.com/feed/all', 'design-ux', 2,
        ['innovation', 'technology', 'future', 'design']),
    rss('Design Better', 'https://designbetterpodcast.com/feed', 'design-ux', 1,
        ['design', 'podcast', 'product design', 'teams']),
    rss('AI Patterns (Tommy Geoco)', 'https://aipatterns.substack.com/feed', 'design-ux', 1,
        ['ai', 'design patterns', 'ux', 'ai design']),
]
