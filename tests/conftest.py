"""Shared fixtures: a stubbed upstream API behind httpx.MockTransport."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from fastapi.testclient import TestClient

from booking_proxy.app import create_app
from booking_proxy.config import Settings
from booking_proxy.upstream import MindbodyClient

BASE_URL = "https://api.test/public/v6"
SITE_TOKEN = "site-token-1"


class UpstreamStub:
    """Callable handler for httpx.MockTransport.

    Register responses per ``(method, path)`` with ``on()``; every request
    is recorded in ``calls``.  Unregistered paths answer 404.
    """

    def __init__(self) -> None:
        self.routes = {}
        self.calls: list[httpx.Request] = []
        self.on("POST", "/usertoken/issue", {"AccessToken": SITE_TOKEN, "User": {"Id": 1}})

    def on(self, method, path, json=None, status=200, handler=None):
        if handler is None:
            def handler(request, _json=json, _status=status):
                return httpx.Response(_status, json=_json if _json is not None else {})
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path.removeprefix("/public/v6")
        handler = self.routes.get((request.method, path))
        if handler is None:
            return httpx.Response(404, json={"Error": {"Message": f"No stub for {path}"}})
        return handler(request)

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.url.path.removeprefix("/public/v6") == path]


@pytest.fixture
def stub():
    return UpstreamStub()


@pytest.fixture
def upstream(stub):
    http = httpx.AsyncClient(transport=httpx.MockTransport(stub))
    client = MindbodyClient(http, api_key="test-key", site_id="-99", base_url=BASE_URL)
    client.use_site_credentials("owner", "secret")
    return client


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        mindbody_api_key="test-key",
        mindbody_site_id="-99",
        mindbody_username="owner",
        mindbody_password="secret",
        mindbody_base_url=BASE_URL,
    )


@pytest.fixture
def client(settings, upstream):
    return TestClient(create_app(settings=settings, upstream=upstream))
