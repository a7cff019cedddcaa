"""Shared fixtures: an ASGI test client plus MockTransport-backed upstreams."""

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from imagegrid.api.deps import get_image_proxy
from imagegrid.config import settings
from imagegrid.main import app
from imagegrid.schemas.search import SearchItem, SearchPage
from imagegrid.services.image_proxy import ImageProxy


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def mock_search(monkeypatch):
    """Configure credentials and route Google calls to a MockTransport handler."""
    monkeypatch.setattr(settings, "GOOGLE_API_KEY", "test-key")
    monkeypatch.setattr(settings, "GOOGLE_SEARCH_ENGINE_ID", "test-cx")
    clients = []

    def install(handler):
        c = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(c)
        app.state.search_client = c
        return c

    yield install

    for c in clients:
        await c.aclose()


@pytest_asyncio.fixture
async def mock_proxy():
    """Swap the app's ImageProxy for one whose upstream is a MockTransport."""
    clients = []

    def install(handler, timeout: float = 10.0) -> ImageProxy:
        c = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(c)
        proxy = ImageProxy(c, timeout=timeout)
        app.dependency_overrides[get_image_proxy] = lambda: proxy
        return proxy

    yield install

    app.dependency_overrides.pop(get_image_proxy, None)
    for c in clients:
        await c.aclose()


def make_items(start: int, count: int, prefix: str = "img") -> list[SearchItem]:
    return [
        SearchItem(
            title=f"{prefix} {n}",
            link=f"https://images.example.com/{prefix}/{n}.jpg",
            thumbnail=f"https://thumbs.example.com/{prefix}/{n}.jpg",
        )
        for n in range(start, start + count)
    ]


class FakeGateway:
    """In-memory page source for controller tests.

    ``pages`` maps a start offset to a SearchPage or to an exception to raise.
    """

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls: list[tuple[str, int]] = []

    async def fetch_page(self, query: str, start: int) -> SearchPage:
        self.calls.append((query, start))
        result = self.pages.get(start, SearchPage())
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_gateway():
    return FakeGateway()
