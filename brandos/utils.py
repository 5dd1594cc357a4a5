import re
import datetime as dt
from typing import Optional
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from dateutil import parser as dtparser

NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "mdash": "\u2014",
    "ndash": "\u2013",
    "ldquo": "\u201c",
    "rdquo": "\u201d",
    "lsquo": "\u2018",
    "rsquo": "\u2019",
    "hellip": "\u2026",
    "copy": "\u00a9",
    "reg": "\u00ae",
    "trade": "\u2122",
}

_ENTITY_RE = re.compile(r"&(?:#[xX]([0-9a-fA-F]+)|#(\d+)|(\w+));")
_TAG_RE = re.compile(r"<[^>]+>")
_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")

def canonicalize_url(url: str) -> str:
    try:
        p = urlparse(url)
        q = [(k, v) for k, v in parse_qsl(p.query, keep_blank_values=True)
             if not k.lower().startswith("utm_") and k.lower() not in ("yclid", "gclid", "fbclid")]
        new = p._replace(query=urlencode(q, doseq=True), fragment="")
        return urlunparse(new)
    except Exception:
        return url

def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()

def decode_html_entities(text: str) -> str:
    """Decode the entities feeds commonly emit. Unknown named entities are kept as-is."""
    if not text:
        return text

    def _sub(m: re.Match) -> str:
        hex_code, dec_code, name = m.groups()
        try:
            if hex_code:
                return chr(int(hex_code, 16))
            if dec_code:
                return chr(int(dec_code, 10))
        except (ValueError, OverflowError):
            return m.group(0)
        return NAMED_ENTITIES.get(name.lower(), m.group(0))

    decoded = _ENTITY_RE.sub(_sub, text)
    if _SURROGATE_RE.search(decoded):
        # UTF-16 pairs written as two entities; lone halves become U+FFFD
        decoded = decoded.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return decoded

def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html or "")

def slugify(title: str, max_len: int = 60) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    return slug[:max_len].rstrip("-")

def article_slug(title: str, max_len: int = 60) -> str:
    """File name of a featured article. Punctuation is dropped, not turned into a dash: "AI's" -> "ais"."""
    slug = re.sub(r"[^a-z0-9\s-]", "", (title or "").lower())
    slug = re.sub(r"-+", "-", re.sub(r"\s+", "-", slug))
    return slug[:max_len].rstrip("-")

def hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""

def domain_name(url: str) -> str:
    """`https://www.theverge.com/x` -> `theverge`."""
    host = hostname(url)
    if not host:
        return "source"
    if host.startswith("www."):
        host = host[4:]
    return host.split(".")[0]

def favicon_url(url: str) -> str:
    host = hostname(url)
    if not host:
        return ""
    return f"https://www.google.com/s2/favicons?domain={host}&sz=32"

def parse_date(raw: Optional[str]) -> Optional[dt.datetime]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return dtparser.parse(raw).astimezone()
    except (ValueError, OverflowError):
        return None

def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)

def utc_iso(now: Optional[dt.datetime] = None) -> str:
    now = now or utc_now()
    return now.astimezone(dt.timezone.utc).isoformat().replace("+00:00", "Z")

def hours_since(raw: Optional[str], now: Optional[dt.datetime] = None) -> Optional[float]:
    when = parse_date(raw)
    if when is None:
        return None
    now = now or utc_now()
    return (now - when).total_seconds() / 3600.0

def format_timestamp(raw: Optional[str], now: Optional[dt.datetime] = None) -> str:
    """US style `MM/DD/YYYY, h:MM AM`; unparseable input falls back to `now`."""
    when = parse_date(raw) or (now or utc_now()).astimezone()
    hour = when.hour % 12 or 12
    ampm = "AM" if when.hour < 12 else "PM"
    return f"{when.month:02d}/{when.day:02d}/{when.year}, {hour}:{when.minute:02d} {ampm}"

def relative_time(raw: str, now: Optional[dt.datetime] = None) -> str:
    when = parse_date(raw)
    if when is None:
        return raw
    now = now or utc_now()
    diff_hours = int((now - when).total_seconds() // 3600)
    diff_days = diff_hours // 24
    if diff_hours < 1:
        return "Just now"
    if diff_hours < 24:
        return f"{diff_hours} {'hour' if diff_hours == 1 else 'hours'} ago"
    if diff_days < 7:
        return f"{diff_days} {'day' if diff_days == 1 else 'days'} ago"
    return f"{when.strftime('%b')} {when.day}"

def today_str(now: Optional[dt.datetime] = None) -> str:
    return utc_iso(now).split("T")[0]
