"""Pytest configuration and fixtures."""

import json

import httpx
import pytest

from resty.client import AsyncResty, Resty
from resty.config import RestyConfig

BASE_URL = "https://mock.resty.test"


class RecordingHandler:
    """MockTransport handler that records requests and replies from a queue."""

    def __init__(self):
        self.requests = []
        self.status = 200
        self.payload = {"ok": True}
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"simulated {self.error.__name__}", request=request)
        return httpx.Response(self.status, content=json.dumps(self.payload).encode())

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def config():
    """Configuration with the stock defaults, independent of the environment."""
    return RestyConfig()


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def transport(handler):
    return httpx.MockTransport(handler)


@pytest.fixture
def resty(config, transport):
    """Blocking client wired to the recording transport."""
    client = Resty(config=config, transport=transport)
    yield client
    client.close()


@pytest.fixture
def async_resty(config, transport):
    """Asyncio client wired to the recording transport."""
    return AsyncResty(config=config, transport=transport)
