"""
Shared fixtures: API clients wired to httpx.MockTransport.
"""

import httpx
import pytest

from maxbot.client import Client

BASE_URL = "https://api.example.test"
TOKEN = "test-token"


def make_client(handler, **kwargs) -> Client:
    """Client whose HTTP traffic goes to handler(request) -> httpx.Response."""
    kwargs.setdefault("rate_limit_rps", -1)
    kwargs.setdefault("initial_backoff", 0.001)
    kwargs.setdefault("max_backoff", 0.002)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Client(TOKEN, BASE_URL, http_client=http_client, **kwargs)


class Recorder:
    """Mock handler replaying scripted responses and recording requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def client_factory():
    return make_client
