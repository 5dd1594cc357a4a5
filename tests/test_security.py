import pytest

from brandos.security import is_private_host, sanitize_error_message, timing_safe_equal, validate_url


@pytest.mark.parametrize("url", [
    "https://example.com/page",
    "http://news.ycombinator.com/item?id=1",
])
def test_public_urls_pass(url):
    assert validate_url(url) == (True, None)


@pytest.mark.parametrize("url,error", [
    ("ftp://example.com/file", "Only http and https URLs are allowed"),
    ("not a url", "Invalid URL format"),
    ("http://localhost:8080/", "URL points to a blocked host"),
    ("http://169.254.169.254/latest/meta-data", "URL points to a blocked host"),
    ("http://10.0.0.5/admin", "URL points to a private IP address"),
    ("http://192.168.1.1/", "URL points to a private IP address"),
    ("http://[::1]/", "URL points to a private IP address"),
])
def test_blocked_urls(url, error):
    ok, msg = validate_url(url)
    assert not ok
    assert msg == error


def test_is_private_host():
    assert is_private_host("127.0.0.1")
    assert is_private_host("172.16.0.1")
    assert is_private_host("fd00::1")
    assert not is_private_host("8.8.8.8")
    assert not is_private_host("example.com")


def test_timing_safe_equal():
    assert timing_safe_equal("secret", "secret")
    assert not timing_safe_equal("secret", "Secret")
    assert not timing_safe_equal("", "secret")


def test_sanitize_error_message():
    msg = sanitize_error_message(RuntimeError("PERPLEXITY_API_KEY not set in /srv/app/config.py"))
    assert "PERPLEXITY_API_KEY" not in msg
    assert "/srv/app" not in msg
    assert sanitize_error_message("not an exception") == "Internal server error"
