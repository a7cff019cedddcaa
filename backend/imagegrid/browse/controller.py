"""Incremental search aggregation.

``SearchController`` owns exactly one ``SearchSession`` at a time. It pulls
pages from a gateway in cursor order, merges them by link, and decides when
pagination is over. ``ContinuationTrigger`` is the sentinel-visibility hook
that asks for the next page.

The cursor advances by the number of items actually merged from a page, not
by the page size, so upstream-side deduplication cannot desynchronise it.
"""

import logging
from enum import Enum
from typing import Callable, Protocol

from imagegrid.browse.client import (
    CONNECT_ERROR_MESSAGE,
    SearchGatewayError,
    SearchTransportError,
)
from imagegrid.browse.images import ImageResolver
from imagegrid.browse.session import MAX_START_OFFSET, Phase, SearchSession
from imagegrid.schemas.search import SearchPage

logger = logging.getLogger(__name__)

Listener = Callable[[SearchSession], None]


class PageSource(Protocol):
    async def fetch_page(self, query: str, start: int) -> SearchPage: ...


class FetchMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"


class EmptyQueryError(ValueError):
    """Raised when a search is started with a blank query."""


class SearchController:
    def __init__(self, gateway: PageSource, proxy_base_url: str = ""):
        self.gateway = gateway
        self.proxy_base_url = proxy_base_url
        self.session: SearchSession | None = None
        self.images = ImageResolver(proxy_base_url)
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every session change. Returns an unsubscribe."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self, session: SearchSession) -> None:
        # A superseded session's late updates are not published.
        if session is not self.session:
            return
        for listener in list(self._listeners):
            listener(session)

    async def start_search(self, query: str) -> SearchSession:
        query = (query or "").strip()
        if not query:
            raise EmptyQueryError("Search query must not be empty")

        session = SearchSession(query=query, phase=Phase.LOADING)
        self.session = session
        self.images = ImageResolver(self.proxy_base_url)
        logger.info("New search session for '%s'", query)
        self._notify(session)

        await self._fetch_page(session, 1, FetchMode.REPLACE)
        return session

    async def load_more(self) -> bool:
        """Fetch the next page if the session allows it.

        Returns False without any network call when a fetch is already in
        flight, pagination has ended, or there are no results yet.
        """
        session = self.session
        if session is None or not session.can_load_more():
            return False

        # Set synchronously, before the first await, so a second trigger
        # on the same loop sees the fetch as in flight.
        session.phase = Phase.LOADING_MORE
        self._notify(session)
        await self._fetch_page(session, session.next_offset, FetchMode.APPEND)
        return True

    async def _fetch_page(self, session: SearchSession, offset: int, mode: FetchMode) -> None:
        try:
            if offset > MAX_START_OFFSET:
                logger.info(
                    "Offset %d beyond %d for '%s'; ending pagination",
                    offset, MAX_START_OFFSET, session.query,
                )
                session.stop()
                session.phase = Phase.IDLE
                return

            try:
                page = await self.gateway.fetch_page(session.query, offset)
            except SearchGatewayError as e:
                self._fail(session, e.message)
                return
            except SearchTransportError:
                self._fail(session, CONNECT_ERROR_MESSAGE)
                return

            if mode is FetchMode.REPLACE:
                session.clear_items()
            merged = session.merge(page.items)

            session.next_offset = offset + merged
            if page.total_results is not None:
                session.total_estimate = page.total_results

            if merged == 0 or (
                session.total_estimate is not None
                and session.next_offset > session.total_estimate
            ):
                session.stop()

            session.phase = Phase.IDLE
            logger.info(
                "'%s' offset %d: %d received, %d new (total %d, next %d, more=%s)",
                session.query, offset, len(page.items), merged,
                len(session.items), session.next_offset, session.has_more,
            )
        finally:
            if session.in_flight:
                # Cancelled mid-fetch.
                session.phase = Phase.IDLE
            self._notify(session)

    def _fail(self, session: SearchSession, message: str) -> None:
        logger.warning("Search '%s' failed: %s", session.query, message)
        session.error = message
        session.stop()
        session.phase = Phase.ERROR


class ContinuationTrigger:
    """Single-consumer signal fired when the scroll sentinel becomes visible.

    Visibility events arriving while a page is loading are dropped, never
    queued.
    """

    def __init__(self, controller: SearchController):
        self.controller = controller
        self.fired = 0
        self.ignored = 0

    async def on_visible(self) -> bool:
        if await self.controller.load_more():
            self.fired += 1
            return True
        self.ignored += 1
        return False
