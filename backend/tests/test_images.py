"""Unit tests for the per-image DIRECT -> PROXY_RETRY -> FAILED state machine."""

from urllib.parse import parse_qs, urlparse

import pytest

from imagegrid.browse.images import (
    ImageLoadState,
    ImageResolver,
    ImageStage,
    View,
    proxy_url,
)
from imagegrid.schemas.search import SearchItem

ITEM = SearchItem(
    title="Sunset",
    link="https://photos.example.org/full/sunset.jpg?size=xl&v=2",
    thumbnail="https://thumbs.example.net/sunset_t.jpg",
)
NO_THUMB = SearchItem(title="Bare", link="http://cdn.example.com/bare.png")


class TestImageLoadState:
    def test_initial_stage_is_direct(self):
        assert ImageLoadState().stage is ImageStage.DIRECT

    def test_two_failures_then_idempotent(self):
        state = ImageLoadState()
        assert state.advance() is ImageStage.PROXY_RETRY
        assert state.using_proxy is True
        assert state.advance() is ImageStage.FAILED
        assert state.failed is True
        assert state.using_proxy is False
        assert state.advance() is ImageStage.FAILED
        assert state.advance() is ImageStage.FAILED
        assert (state.using_proxy, state.failed) == (False, True)


class TestProxyUrl:
    def test_target_fully_encoded(self):
        url = proxy_url(ITEM.link)
        parsed = urlparse(url)
        assert parsed.path == "/api/image-proxy"
        assert parse_qs(parsed.query)["u"] == [ITEM.link]
        assert "&v=2" not in url

    def test_base_url(self):
        assert proxy_url("https://a.example/x.png", "http://localhost:8000/").startswith(
            "http://localhost:8000/api/image-proxy?u=https%3A%2F%2Fa.example"
        )


class TestImageResolver:
    def test_grid_prefers_thumbnail(self):
        resolver = ImageResolver()
        src = resolver.source(ITEM, View.GRID)
        assert src.url == ITEM.thumbnail
        assert src.stage is ImageStage.DIRECT

    def test_grid_without_thumbnail_uses_link(self):
        assert ImageResolver().source(NO_THUMB, View.GRID).url == NO_THUMB.link

    def test_expanded_always_uses_link(self):
        assert ImageResolver().source(ITEM, View.EXPANDED).url == ITEM.link

    def test_failure_retries_same_representation_through_proxy(self):
        resolver = ImageResolver()
        src = resolver.on_error(ITEM, View.GRID)
        assert src.stage is ImageStage.PROXY_RETRY
        assert src.url == proxy_url(ITEM.thumbnail)

    def test_second_failure_shows_host_placeholder(self):
        resolver = ImageResolver()
        resolver.on_error(ITEM, View.GRID)
        src = resolver.on_error(ITEM, View.GRID)
        assert src.is_placeholder
        assert src.stage is ImageStage.FAILED
        assert src.host == "thumbs.example.net"

        again = resolver.on_error(ITEM, View.GRID)
        assert again.stage is ImageStage.FAILED
        assert again.url is None

    def test_views_share_state_per_link(self):
        resolver = ImageResolver()
        resolver.on_error(ITEM, View.GRID)

        expanded = resolver.source(ITEM, View.EXPANDED)
        assert expanded.stage is ImageStage.PROXY_RETRY
        assert expanded.url == proxy_url(ITEM.link)

        resolver.on_error(ITEM, View.EXPANDED)
        assert resolver.source(ITEM, View.GRID).is_placeholder

    def test_placeholder_names_host_of_failed_representation(self):
        resolver = ImageResolver()
        resolver.on_error(ITEM, View.GRID)
        resolver.on_error(ITEM, View.GRID)
        assert resolver.source(ITEM, View.GRID).host == "thumbs.example.net"
        assert resolver.source(ITEM, View.EXPANDED).host == "photos.example.org"
        assert resolver.source(NO_THUMB, View.GRID).host == "cdn.example.com"

    def test_links_are_independent(self):
        resolver = ImageResolver()
        resolver.on_error(ITEM)
        resolver.on_error(ITEM)
        assert resolver.stage(ITEM.link) is ImageStage.FAILED
        assert resolver.stage(NO_THUMB.link) is ImageStage.DIRECT
        assert resolver.source(NO_THUMB).url == NO_THUMB.link

    @pytest.mark.parametrize("view", [View.GRID, View.EXPANDED])
    def test_proxy_base_url_prefixes_retry(self, view):
        resolver = ImageResolver("http://localhost:8000")
        src = resolver.on_error(NO_THUMB, view)
        assert src.url.startswith("http://localhost:8000/api/image-proxy?u=")
