"""Shared fixtures — settings and a Rarible client backed by httpx.MockTransport."""
import httpx
import pytest

from nftchat.config import Settings
from nftchat.tools.rarible import RaribleClient

BASE_URL = "https://api.rarible.org/v0.1"


def make_rarible_client(routes, calls=None, api_key=None) -> RaribleClient:
    """Build a client whose upstream is a dict of path -> JSON / Response / callable.

    Unrouted paths answer 404.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        path = request.url.path[len("/v0.1"):]
        route = routes.get(path)
        if route is None:
            return httpx.Response(404, json={"code": "NOT_FOUND", "message": path})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    return RaribleClient(api_key=api_key, base_url=BASE_URL, transport=httpx.MockTransport(handler))


@pytest.fixture
def settings():
    return Settings(openai_api_key="sk-test", rarible_api_key="")


@pytest.fixture
def calls():
    return []


@pytest.fixture
def rarible(calls):
    """Factory: rarible(routes) -> RaribleClient recording requests into `calls`."""
    def _make(routes, api_key=None):
        return make_rarible_client(routes, calls=calls, api_key=api_key)
    return _make
