"""Request-boundary helpers shared by the HTTP routes.

SSRF checks for user supplied URLs, constant-time secret comparison and
scrubbing of error messages before they leave the API.
"""

from __future__ import annotations

import hmac
import ipaddress
import re
from typing import Optional, Tuple
from urllib.parse import urlparse

BLOCKED_HOSTNAMES = {
    "localhost",
    "metadata.google.internal",
    "metadata.internal",
    "169.254.169.254",
}


def is_private_host(hostname: str) -> bool:
    host = (hostname or "").strip("[]").lower()
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    if ip.version == 4:
        return (
            ip.is_loopback
            or ip.is_private
            or ip.is_link_local
            or ip in ipaddress.ip_network("0.0.0.0/8")
        )
    return ip.is_loopback or ip in ipaddress.ip_network("fc00::/7") or ip.is_link_local


def validate_url(url: str) -> Tuple[bool, Optional[str]]:
    """Return (ok, error). Only public http(s) targets pass."""
    try:
        parsed = urlparse(url or "")
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        return False, "Invalid URL format"
    if not parsed.scheme or not parsed.netloc:
        return False, "Invalid URL format"
    if parsed.scheme not in ("http", "https"):
        return False, "Only http and https URLs are allowed"
    if hostname in BLOCKED_HOSTNAMES:
        return False, "URL points to a blocked host"
    if is_private_host(hostname):
        return False, "URL points to a private IP address"
    return True, None


def timing_safe_equal(a: str, b: str) -> bool:
    return hmac.compare_digest((a or "").encode("utf-8"), (b or "").encode("utf-8"))


def sanitize_error_message(error: object) -> str:
    if not isinstance(error, Exception):
        return "Internal server error"
    message = str(error)
    message = re.sub(r"/[^\s:]+\.[a-z]{1,4}", "[path]", message, flags=re.I)
    message = re.sub(r"[A-Z]:\\[^\s:]+\.[a-z]{1,4}", "[path]", message, flags=re.I)
    message = re.sub(r"\b[A-Z][A-Z0-9_]{2,}\b", "[env]", message)
    message = re.sub(r"\s+at\s+.+", "", message)
    return message[:200] or "Internal server error"
