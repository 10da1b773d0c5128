# tests/infrastructure/test_rate_limiter.py

import time
from unittest.mock import patch

import httpx

from ghdir.infrastructure.rate_limiter import RateLimitInfo


## 1. Header parsing
# ------------------------------------

def test_from_headers_sets_values_correctly():
    """Rate limit info is parsed from GitHub headers."""
    reset_timestamp = int(time.time()) + 60

    info = RateLimitInfo.from_headers({
        "X-RateLimit-Limit": "5000",
        "X-RateLimit-Remaining": "4500",
        "X-RateLimit-Used": "500",
        "X-RateLimit-Reset": str(reset_timestamp),
    })

    assert info.limit == 5000
    assert info.remaining == 4500
    assert info.used == 500
    assert info.reset_timestamp == float(reset_timestamp)
    assert not info.is_exhausted


def test_from_headers_accepts_httpx_headers():
    headers = httpx.Headers({"x-ratelimit-remaining": "0"})
    assert RateLimitInfo.from_headers(headers).is_exhausted


def test_from_headers_ignores_missing_and_garbage_values():
    info = RateLimitInfo.from_headers({"X-RateLimit-Remaining": "lots"})

    assert info.remaining is None
    assert info.reset_timestamp is None
    assert not info.is_exhausted


## 2. Exhaustion and reset estimate
# ------------------------------------

def test_is_exhausted_only_at_zero():
    assert RateLimitInfo(remaining=0).is_exhausted
    assert not RateLimitInfo(remaining=1).is_exhausted
    assert not RateLimitInfo().is_exhausted


def test_reset_in_minutes_rounds_up():
    with patch("ghdir.infrastructure.rate_limiter.time.time", return_value=1000.0):
        assert RateLimitInfo(reset_timestamp=1300.0).reset_in_minutes == 5
        assert RateLimitInfo(reset_timestamp=1301.0).reset_in_minutes == 6
        assert RateLimitInfo(reset_timestamp=1030.0).reset_in_minutes == 1


def test_reset_in_the_past_is_zero():
    with patch("ghdir.infrastructure.rate_limiter.time.time", return_value=1000.0):
        info = RateLimitInfo(reset_timestamp=900.0)
        assert info.reset_in_seconds == 0.0
        assert info.reset_in_minutes == 0


def test_describe_reset_pluralises():
    with patch("ghdir.infrastructure.rate_limiter.time.time", return_value=1000.0):
        assert RateLimitInfo(reset_timestamp=1060.0).describe_reset() == (
            "Rate limit will reset in approximately 1 minute."
        )
        assert RateLimitInfo(reset_timestamp=1300.0).describe_reset() == (
            "Rate limit will reset in approximately 5 minutes."
        )
    assert RateLimitInfo().describe_reset() == ""
