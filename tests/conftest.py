"""Test configuration helpers and fixtures."""

from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app

REVIEW_PAGE = """
<html><head><title>Example Messenger - Apps on Google Play</title></head><body>
<h1 itemprop="name">Example Messenger</h1>
<div class="review-nav">Games Apps Movies Books</div>
<div class="review-stars">4.5</div>
<div class="review-card" data-meta='{"rating": 4, "author": "Jane Doe"}'>
  <span>Works great on my phone,</span> <b>love</b> the new update &amp; the dark mode.
</div>
<div data-testid="review-item">Fast and reliable messaging app.</div>
<script>AF_initData({"reviews": [
  {"reviewText": "Battery drain after the last update", "starRating": 2,
   "reviewDate": "2024-02-03", "userName": "Sam", "helpfulCount": 7},
  {"text": "", "rating": 5},
  {"text": "Solid app", "rating": 9}
]});</script>
</body></html>
"""

EMPTY_PAGE = "<html><body><p>Nothing to see here</p></body></html>"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)


def serve(*bodies: str, status_code: int = 200) -> RecordingTransport:
    """Answer successive requests with `bodies`; the last one repeats."""
    queue = list(bodies)

    def handler(request: httpx.Request) -> httpx.Response:
        body = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status_code, text=body)

    return RecordingTransport(handler)


def offline() -> RecordingTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("network unreachable", request=request)

    return RecordingTransport(handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(rate_limit_max=0, enable_cors=False, log_level="WARNING")


@pytest.fixture
def make_client(settings):
    def _make(transport: httpx.AsyncBaseTransport, app_settings: Settings = None) -> TestClient:
        return TestClient(create_app(app_settings or settings, transport=transport))

    return _make
