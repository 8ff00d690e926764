"""Shared pytest fixtures."""

import json
from pathlib import Path

import httpx
import pytest

from rdap_lookup.rdap_bootstrap import BootstrapRegistry

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def eib_rdap() -> dict:
    """Registry RDAP response for eib.org."""
    return json.loads((FIXTURES / "eib.org.json").read_text())


@pytest.fixture
def registry() -> BootstrapRegistry:
    """Small registry pointing at stub hosts."""
    return BootstrapRegistry({
        "org": ("https://rdap.org.test/rdap/",),
        "com": ("https://primary.test/com/v1/", "https://backup.test/com/v1/"),
        "co.uk": ("https://rdap.couk.test/",),
    })


class StubServer:
    """
    httpx.MockTransport handler that records requests and replays routes.

    Routes map a full URL to a callable(request) -> httpx.Response, or to a
    (status, body, headers) tuple; a fresh Response is built per request.
    Unknown URLs answer 404.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, json={"errorCode": 404, "title": "Not Found"})
        if callable(route):
            return route(request)
        status, body, headers = route
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body, headers=headers)
        return httpx.Response(status, content=body or b"", headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def stub() -> StubServer:
    return StubServer()
