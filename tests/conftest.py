"""Shared fixtures: a fake upstream site served through httpx.MockTransport."""
import httpx
import pytest

from satoru.scrapers.satoru import SatoruScraper
from satoru.utils.cache import TTLCache
from satoru.utils.http_client import HTTPClient

BASE_URL = "https://satoru.test"


class Upstream:
    """Routes requests by ``scheme://host/path`` and records every request seen."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, responder):
        self.routes[url] = responder

    def add_html(self, url, body, status_code=200):
        self.add(url, lambda request: httpx.Response(status_code, text=body,
                                                     headers={"Content-Type": "text/html"}))

    def add_json(self, url, payload, status_code=200):
        self.add(url, lambda request: httpx.Response(status_code, json=payload))

    def handler(self, request):
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        responder = self.routes.get(key)
        if responder is None:
            return httpx.Response(404, text="not found")
        return responder(request)

    def requests_to(self, path):
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def make_scraper(upstream):
    """Build a scraper bound to the fake upstream with a fresh cache."""

    def factory(**kwargs):
        client = HTTPClient(transport=httpx.MockTransport(upstream.handler))
        kwargs.setdefault("cache", TTLCache())
        return SatoruScraper(base_url=BASE_URL, client=client, **kwargs)

    return factory
