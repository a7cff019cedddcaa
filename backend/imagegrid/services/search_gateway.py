"""Google Custom Search image gateway.

Thin pass-through used by ``GET /api/search``: the raw upstream JSON is
returned untouched so the browser-side controller can read ``items`` and
``searchInformation.totalResults`` itself.
"""

import logging
from typing import Any

import httpx

from imagegrid.config import settings
from imagegrid.core.exceptions import AppError, GatewayError
from imagegrid.core.metrics import search_requests_total

logger = logging.getLogger(__name__)


def parse_start(raw: str | None) -> int:
    """Custom Search offsets are 1-based; anything unusable becomes 1."""
    try:
        start = int(raw or "1")
    except ValueError:
        return 1
    return start if start >= 1 else 1


class GoogleImageSearch:
    """Search images using Google Custom Search JSON API (BYOK)."""

    def __init__(
        self,
        api_key: str,
        cx: str,
        client: httpx.AsyncClient,
        base_url: str = settings.SEARCH_API_URL,
        page_size: int = settings.SEARCH_PAGE_SIZE,
        image_size: str = settings.SEARCH_IMAGE_SIZE,
    ):
        self.api_key = api_key
        self.cx = cx
        self.client = client
        self.base_url = base_url
        self.page_size = page_size
        self.image_size = image_size

    async def search(self, query: str, start: int = 1) -> dict[str, Any]:
        params = {
            "key": self.api_key,
            "cx": self.cx,
            "q": query,
            "searchType": "image",
            "imgSize": self.image_size,
            "num": min(self.page_size, 10),
            "start": start,
        }

        try:
            resp = await self.client.get(self.base_url, params=params)
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Search request failed for '%s' (start=%d): %s", query, start, e)
            search_requests_total.labels(status="error").inc()
            raise AppError() from e

        if not resp.is_success:
            upstream = data.get("error") if isinstance(data, dict) else None
            message = upstream.get("message") if isinstance(upstream, dict) else None
            logger.error("Google API error %d for '%s': %s", resp.status_code, query, message)
            search_requests_total.labels(status="upstream_error").inc()
            raise GatewayError(details=message, status_code=max(400, resp.status_code))

        if not isinstance(data, dict):
            search_requests_total.labels(status="error").inc()
            raise AppError()

        search_requests_total.labels(status="ok").inc()
        logger.info(
            "Search '%s' start=%d: %d items",
            query, start, len(data.get("items") or []),
        )
        return data
