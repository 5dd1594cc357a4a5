from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..feeds import fetch_feed

@dataclass(frozen=True)
class SourceConfig:
    name: str
    url: str
    category: str
    priority: int = 2  # 1 = highest, 3 = lowest
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    kind: str = "rss"

class SourceParser:
    config: SourceConfig

    def __init__(self, config: SourceConfig):
        self.config = config


class RssSource(SourceParser):
    def fetch_items(self, client: Optional[httpx.Client] = None) -> List[Dict[str, Any]]:
        """Feed entries as plain dicts; an unreachable feed yields []."""
        return fetch_feed(self.config, client=client)


def rss(name: str, url: str, category: str, priority: int, keywords: List[str]) -> RssSource:
    return RssSource(SourceConfig(
        name=name,
        url=url,
        category=category,
        priority=priority,
        keywords=tuple(keywords),
    ))
