"""Tests for the browser-side /api/search client and raw item mapping."""

import httpx
import pytest

from imagegrid.browse.client import (
    SearchApiClient,
    SearchGatewayError,
    SearchTransportError,
    error_message,
)
from imagegrid.schemas.search import SearchItem, SearchPage

GOOGLE_PAGE = {
    "searchInformation": {"totalResults": "2340000"},
    "items": [
        {
            "title": "Tabby cat",
            "link": "https://example.com/tabby.jpg",
            "image": {"thumbnailLink": "https://encrypted-tbn0.gstatic.com/images?q=tbn:1"},
        },
        {"title": "Kitten", "link": "https://example.com/kitten.png", "thumbnail": "https://t.example.com/k.png"},
        {"title": "No link at all"},
        {"link": "https://example.com/untitled.gif"},
    ],
}


def _client(handler) -> SearchApiClient:
    return SearchApiClient(
        "http://app.test",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestSearchPageMapping:
    def test_from_gateway(self):
        page = SearchPage.from_gateway(GOOGLE_PAGE)
        assert page.total_results == 2340000
        assert [i.link for i in page.items] == [
            "https://example.com/tabby.jpg",
            "https://example.com/kitten.png",
            "https://example.com/untitled.gif",
        ]
        assert page.items[0].thumbnail.startswith("https://encrypted-tbn0")
        assert page.items[1].thumbnail == "https://t.example.com/k.png"
        assert page.items[2].title == ""
        assert page.items[2].thumbnail is None

    def test_missing_or_bad_total(self):
        assert SearchPage.from_gateway({}).total_results is None
        assert SearchPage.from_gateway({"searchInformation": {"totalResults": "lots"}}).total_results is None
        assert SearchPage.from_gateway({}).items == []

    def test_items_are_frozen(self):
        item = SearchItem(title="a", link="https://x.example/a.jpg")
        with pytest.raises(Exception):
            item.link = "https://x.example/b.jpg"


class TestErrorMessage:
    @pytest.mark.parametrize(
        "body,expected",
        [
            ({"error": {"message": "Search API error", "details": "Quota exceeded"}}, "Quota exceeded"),
            ({"error": {"message": "Missing search query"}}, "Missing search query"),
            ({"error": "API configuration missing"}, "API configuration missing"),
            ({"error": "Search API error", "details": "Bad key"}, "Bad key"),
            ({"error": {}}, "An unknown error occurred."),
            ({}, "An unknown error occurred."),
            (None, "An unknown error occurred."),
            (["unexpected"], "An unknown error occurred."),
        ],
    )
    def test_shapes(self, body, expected):
        assert error_message(body) == expected


class TestFetchPage:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request: httpx.Request):
            seen.append(request.url)
            return httpx.Response(200, json=GOOGLE_PAGE)

        async with _client(handler) as api:
            page = await api.fetch_page("cats & dogs", 11)

        assert len(page.items) == 3
        assert seen[0].path == "/api/search"
        assert seen[0].params["q"] == "cats & dogs"
        assert seen[0].params["start"] == "11"

    @pytest.mark.asyncio
    async def test_error_body_detail(self):
        def handler(request):
            return httpx.Response(
                403, json={"error": {"message": "Search API error", "details": "API key not valid"}}
            )

        async with _client(handler) as api:
            with pytest.raises(SearchGatewayError) as exc:
                await api.fetch_page("cats", 1)
        assert exc.value.message == "API key not valid"
        assert exc.value.status_code == 403

    @pytest.mark.asyncio
    async def test_malformed_error_body(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        async with _client(handler) as api:
            with pytest.raises(SearchGatewayError) as exc:
                await api.fetch_page("cats", 1)
        assert exc.value.message == "An unknown error occurred."

    @pytest.mark.asyncio
    async def test_malformed_success_body(self):
        def handler(request):
            return httpx.Response(200, text="not json")

        async with _client(handler) as api:
            with pytest.raises(SearchGatewayError):
                await api.fetch_page("cats", 1)

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as api:
            with pytest.raises(SearchTransportError) as exc:
                await api.fetch_page("cats", 1)
        assert exc.value.message == "Could not connect to the search service."

MALFORMED_PAGES = [
    {"items": 5},
    {"items": {"link": "https://example.com/a.jpg"}},
    {"items": [{"link": "https://example.com/a.jpg", "title": 123}]},
    {"items": [{"link": "https://example.com/a.jpg", "image": {"thumbnailLink": 7}}]},
]


class TestMalformedPage:
    def test_non_list_items_rejected(self):
        with pytest.raises(TypeError):
            SearchPage.from_gateway({"items": 5})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", MALFORMED_PAGES)
    async def test_bad_field_types_are_gateway_errors(self, body):
        async with _client(lambda request: httpx.Response(200, json=body)) as api:
            with pytest.raises(SearchGatewayError) as exc:
                await api.fetch_page("cats", 1)
        assert exc.value.message == "An unknown error occurred."
        assert exc.value.status_code == 200
