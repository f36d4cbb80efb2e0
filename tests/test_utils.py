# File: tests/test_utils.py
import hashlib

import pytest
from sitemap_monitor.utils import get_scheme, hash_url, normalize_domain, normalize_url, remove_duplicates


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("http://x.com/a/#frag", "http://x.com/a"),
        ("  https://x.com/game/  ", "https://x.com/game"),
        ("https://x.com/a#b/", "https://x.com/a"),
        ("https://x.com/a?page=2", "https://x.com/a?page=2"),
        ("https://x.com/", "https://x.com"),
        ("https://x.com//", "https://x.com/"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize(
    "url",
    ["http://x.com/a/#frag", "https://x.com/game", " https://x.com/b/ ", "https://x.com/a?q=1#top"],
)
def test_normalize_url_idempotent(url):
    once = normalize_url(url)
    assert normalize_url(once) == once


def test_hash_url_is_lowercase_sha1_hex():
    url = "https://x.com/game"
    digest = hash_url(url)
    assert digest == hashlib.sha1(url.encode("utf-8")).hexdigest()
    assert len(digest) == 40
    assert digest == digest.lower()


def test_hash_url_distinguishes_urls():
    assert hash_url("https://x.com/a") != hash_url("https://x.com/b")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Example.COM", "example.com"),
        ("https://example.com/", "example.com"),
        ("  http://localhost:3000 ", "localhost:3000"),
        ("example.com/blog/", "example.com/blog"),
    ],
)
def test_normalize_domain(raw, expected):
    assert normalize_domain(raw) == expected


@pytest.mark.parametrize(
    "domain,scheme",
    [
        ("localhost", "http://"),
        ("localhost:8080", "http://"),
        ("127.0.0.1:5000", "http://"),
        ("0.0.0.0", "http://"),
        ("192.168.1.20", "http://"),
        ("10.0.0.1:8000", "http://"),
        ("example.com", "https://"),
        ("games.example.org", "https://"),
    ],
)
def test_get_scheme(domain, scheme):
    assert get_scheme(domain) == scheme


def test_remove_duplicates_keeps_order():
    assert remove_duplicates(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
