"""Tests for rate limiting."""

import json
from unittest.mock import MagicMock

from fastapi import Request
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded

from taxdocs.main import app
from taxdocs.middleware.rate_limit import get_client_ip, rate_limit_exceeded_handler


def make_request(client_ip: str, forwarded_for: str | None = None) -> Request:
    headers = []
    if forwarded_for:
        headers.append((b"x-forwarded-for", forwarded_for.encode()))
    return Request({"type": "http", "headers": headers, "client": (client_ip, 5000)})


class TestGetClientIP:
    def test_direct_connection(self):
        assert get_client_ip(make_request("203.0.113.7")) == "203.0.113.7"

    def test_forwarded_for_ignored_without_trusted_proxies(self):
        assert get_client_ip(make_request("203.0.113.7", "198.51.100.1")) == "203.0.113.7"

    def test_forwarded_for_from_trusted_proxy(self, monkeypatch):
        monkeypatch.setenv("TRUSTED_PROXIES", "10.0.0.1, 10.0.0.2")
        request = make_request("10.0.0.2", "198.51.100.1, 10.0.0.1")
        assert get_client_ip(request) == "198.51.100.1"

    def test_forwarded_for_from_untrusted_peer(self, monkeypatch):
        monkeypatch.setenv("TRUSTED_PROXIES", "10.0.0.1")
        assert get_client_ip(make_request("203.0.113.7", "198.51.100.1")) == "203.0.113.7"


def test_rate_limit_exceeded_handler():
    exc = MagicMock(spec=RateLimitExceeded)
    exc.detail = "2 per 1 minute"

    response = rate_limit_exceeded_handler(make_request("203.0.113.7"), exc)

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert response.headers["X-RateLimit-Limit"] == "2 per 1 minute"
    body = json.loads(response.body)
    assert body["detail"] == "Rate limit exceeded"
    assert body["retry_after"] == 60


def test_classify_endpoint_is_rate_limited(monkeypatch):
    monkeypatch.setenv("API_RATE_LIMIT", "2/minute")
    client = TestClient(app)

    statuses = [
        client.post("/api/classify", json={"text": "Tax Invoice"}).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]
