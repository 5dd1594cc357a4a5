import logging
import urllib.parse as up
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup
from lxml import etree

from .config import settings
from .security import validate_url
from .utils import decode_html_entities, normalize_whitespace, strip_tags, utc_iso

logger = logging.getLogger(__name__)

FEED_ACCEPT = "application/rss+xml, application/xml, text/xml, application/atom+xml"
OG_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
OG_TIMEOUT = 5.0
OG_MAX_REDIRECTS = 5

TITLE_MAX = 200
TITLE_MIN = 10
DESCRIPTION_MAX = 500

def _client(user_agent: Optional[str] = None, timeout: Optional[float] = None):
    return httpx.Client(
        headers={"User-Agent": user_agent or settings.user_agent},
        timeout=timeout or settings.request_timeout,
        follow_redirects=True,
    )

def _strip_ns(tag: Any) -> str:
    # lxml hands back comments and processing instructions with a callable tag
    if not isinstance(tag, str):
        return ""
    return tag.split('}', 1)[1] if tag.startswith('{') and '}' in tag else tag

def _find_child(parent, names: List[str]):
    for name in names:
        for ch in list(parent):
            if _strip_ns(ch.tag) == name:
                return ch
    return None

def _find_children(parent, name: str) -> List[Any]:
    return [ch for ch in list(parent) if _strip_ns(ch.tag) == name]

def _full_text(node) -> str:
    if node is None:
        return ""
    return "".join(node.itertext())

def _clean(raw: str, limit: int) -> str:
    text = decode_html_entities(strip_tags(raw))
    return normalize_whitespace(text)[:limit]

def _parse_root(data: bytes):
    try:
        return ET.fromstring(data)
    except ET.ParseError:
        pass
    # Half-broken feeds (stray ampersands, unclosed tags) are common; keep what parses.
    try:
        parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)
        return etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError):
        return None

def _entry_link(entry, fallback: str) -> str:
    links = _find_children(entry, "link")
    for link_el in links:
        text = (link_el.text or "").strip()
        if text:
            return text
    # Atom: prefer the alternate link
    for link_el in links:
        if (link_el.attrib.get("rel") or "alternate") == "alternate" and link_el.attrib.get("href"):
            return link_el.attrib["href"].strip()
    for link_el in links:
        if link_el.attrib.get("href"):
            return link_el.attrib["href"].strip()
    return fallback

def parse_feed(data, source) -> List[Dict[str, Any]]:
    """Parse RSS 2.0 / RSS 1.0 / Atom into feed item dicts.

    RSS ``<item>`` elements are used when present, otherwise Atom ``<entry>``.
    Never raises on bad input: an unparseable document yields ``[]``.
    """
    if not data:
        return []
    if isinstance(data, str):
        data = data.encode("utf-8")
    root = _parse_root(data)
    if root is None:
        return []

    is_atom = False
    entries = [el for el in root.iter() if _strip_ns(el.tag) == "item"]
    if not entries:
        entries = [el for el in root.iter() if _strip_ns(el.tag) == "entry"]
        is_atom = True

    items: List[Dict[str, Any]] = []
    for e in entries:
        title = _clean(_full_text(_find_child(e, ["title"])), TITLE_MAX)
        if len(title) <= TITLE_MIN:
            continue

        link = _entry_link(e, source.url)

        date_names = ["published", "updated"] if is_atom else ["pubDate", "date"]
        pub_date = normalize_whitespace(_full_text(_find_child(e, date_names))) or utc_iso()

        desc_names = ["summary", "content"] if is_atom else ["description", "encoded"]
        description = _clean(_full_text(_find_child(e, desc_names)), DESCRIPTION_MAX) or None

        items.append({
            "title": title,
            "link": link,
            "pub_date": pub_date,
            "description": description,
            "source": source.name,
            "source_category": source.category,
        })
    return items

def fetch_feed(source, client: Optional[httpx.Client] = None) -> List[Dict[str, Any]]:
    """GET one feed; failures are logged and yield no items."""
    headers = {"User-Agent": settings.user_agent, "Accept": FEED_ACCEPT}
    try:
        if client is None:
            with _client() as c:
                r = c.get(source.url, headers=headers)
        else:
            r = client.get(source.url, headers=headers)
        r.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning("%s: HTTP %s", source.name, e.response.status_code)
        return []
    except httpx.TimeoutException:
        logger.warning("%s: timeout", source.name)
        return []
    except httpx.HTTPError as e:
        logger.warning("%s: %s", source.name, str(e)[:50])
        return []

    items = parse_feed(r.content, source)
    logger.info("%s: %d items", source.name, len(items))
    return items

def fetch_all_feeds(sources, batch_size: Optional[int] = None) -> List[Dict[str, Any]]:
    """Fetch feeds in parallel batches; items come back in source order."""
    batch_size = max(1, int(batch_size or settings.fetch_concurrency))
    out: List[Dict[str, Any]] = []
    with _client() as c:
        for i in range(0, len(sources), batch_size):
            batch = sources[i:i + batch_size]
            with ThreadPoolExecutor(max_workers=len(batch)) as ex:
                for items in ex.map(lambda s: fetch_feed(s, client=c), batch):
                    out.extend(items)
    logger.info("fetched %d items from %d sources", len(out), len(sources))
    return out

def _meta(soup: BeautifulSoup, keys: List[str]) -> Optional[str]:
    for key in keys:
        node = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if node and node.get("content"):
            return node["content"].strip()
    return None

def _favicon(soup: BeautifulSoup, page_url: str) -> str:
    parts = up.urlsplit(page_url)
    origin = f"{parts.scheme}://{parts.netloc}"
    for link in soup.find_all("link", href=True):
        rel = " ".join(link.get("rel") or []).lower()
        if rel not in ("icon", "shortcut icon"):
            continue
        href = link["href"].strip()
        if href.startswith("//"):
            return "https:" + href
        return up.urljoin(page_url, href)
    return f"{origin}/favicon.ico"

def empty_og() -> Dict[str, Optional[str]]:
    return {"image": None, "title": None, "description": None, "siteName": None, "favicon": None}

def fetch_og_data(url: str) -> Dict[str, Optional[str]]:
    """Open Graph preview of a page. Any fetch failure gives an all-null result.

    Redirects are followed by hand so every hop passes the same public-host
    check as the URL the caller gave us.
    """
    target = url
    try:
        with _client(user_agent=OG_USER_AGENT, timeout=OG_TIMEOUT) as c:
            for _ in range(OG_MAX_REDIRECTS + 1):
                r = c.get(target, headers={"Accept": "text/html,application/xhtml+xml"}, follow_redirects=False)
                if not r.is_redirect:
                    break
                target = up.urljoin(str(r.url), r.headers["location"])
                ok, error = validate_url(target)
                if not ok:
                    logger.warning("og redirect blocked for %s -> %s: %s", url, target, error)
                    return empty_og()
            else:
                logger.info("og fetch gave up after %d redirects for %s", OG_MAX_REDIRECTS, url)
                return empty_og()
            r.raise_for_status()
            html = r.text
    except httpx.HTTPError as e:
        logger.info("og fetch failed for %s: %s", url, e)
        return empty_og()

    soup = BeautifulSoup(html, "lxml")
    image = _meta(soup, ["og:image", "twitter:image"])
    if image and not image.startswith("http"):
        image = "https:" + image if image.startswith("//") else up.urljoin(target, image)
    return {
        "image": image,
        "title": _meta(soup, ["og:title", "twitter:title"]),
        "description": _meta(soup, ["og:description", "twitter:description", "description"]),
        "siteName": _meta(soup, ["og:site_name"]),
        "favicon": _favicon(soup, target),
    }
