"""Client for ``GET /api/search`` as seen from the browser side."""

import logging

import httpx
from pydantic import ValidationError

from imagegrid.schemas.search import SearchPage

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
CONNECT_ERROR_MESSAGE = "Could not connect to the search service."


class SearchGatewayError(Exception):
    """The search endpoint answered non-2xx or with an unreadable body."""

    def __init__(self, message: str = UNKNOWN_ERROR_MESSAGE, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SearchTransportError(Exception):
    """The search endpoint could not be reached at all."""

    def __init__(self, message: str = CONNECT_ERROR_MESSAGE):
        self.message = message
        super().__init__(message)


def error_message(body) -> str:
    """Best available detail from an error body, in either shape.

    Accepts ``{"error": {"message", "details"}}`` as well as a flat
    ``{"error": "..."}``; anything else yields the generic message.
    """
    if not isinstance(body, dict):
        return UNKNOWN_ERROR_MESSAGE
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("details") or error.get("message") or UNKNOWN_ERROR_MESSAGE
    if isinstance(error, str) and error:
        return body.get("details") or error
    return UNKNOWN_ERROR_MESSAGE


class SearchApiClient:
    """Fetch one page of results from the search pass-through.

    No timeout is applied: a hung request holds the controller until the
    transport itself fails.
    """

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=None)
        self._owns_client = client is None

    async def fetch_page(self, query: str, start: int) -> SearchPage:
        try:
            resp = await self._client.get(
                f"{self.base_url}/api/search",
                params={"q": query, "start": start},
            )
        except httpx.HTTPError as e:
            logger.error("Search request to %s failed: %s", self.base_url, e)
            raise SearchTransportError() from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.is_success:
            raise SearchGatewayError(error_message(body), status_code=resp.status_code)
        if not isinstance(body, dict):
            raise SearchGatewayError(status_code=resp.status_code)

        try:
            return SearchPage.from_gateway(body)
        except (TypeError, ValueError, ValidationError) as e:
            logger.warning("Unreadable search page from %s: %s", self.base_url, e)
            raise SearchGatewayError(status_code=resp.status_code) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
