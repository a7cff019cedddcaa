"""Streaming image proxy.

Fetches an image on behalf of the browser when the origin refuses direct
cross-origin or hot-linked loads. The wait for upstream headers is bounded by
a hard timeout enforced by cancelling the in-flight request; the body is then
streamed through unmodified.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator
from urllib.parse import urlparse

import httpx

from imagegrid.config import settings
from imagegrid.core.exceptions import (
    InvalidTargetError,
    ProxyFetchError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from imagegrid.core.metrics import image_proxy_requests_total, image_proxy_upstream_seconds

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def validate_target(url: str | None) -> str:
    """Return ``url`` if it is an absolute http(s) URL, else raise."""
    if not url:
        raise InvalidTargetError("Missing url parameter (u)")
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidTargetError() from e
    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidTargetError()
    return url


@dataclass
class ProxiedImage:
    """An open upstream response ready to be streamed to the caller."""

    response: httpx.Response
    content_type: str

    async def body(self) -> AsyncIterator[bytes]:
        """Yield the upstream body; the response is closed however iteration ends."""
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        await self.response.aclose()


class ImageProxy:
    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = settings.PROXY_TIMEOUT_SECONDS,
        user_agent: str = settings.PROXY_USER_AGENT,
    ):
        self.client = client
        self.timeout = timeout
        self.user_agent = user_agent

    async def open(self, url: str) -> ProxiedImage:
        """Validate ``url`` and open a streaming GET against it.

        The caller must either drain ``body()`` or ``aclose()`` the result.
        """
        target = validate_target(url)
        request = self.client.build_request(
            "GET", target, headers={"User-Agent": self.user_agent}
        )

        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.client.send(request, stream=True, follow_redirects=True),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("[ImageProxy] Timeout after %.1fs: %s", self.timeout, target[:80])
            image_proxy_requests_total.labels(outcome="timeout").inc()
            raise UpstreamTimeoutError() from e
        except httpx.HTTPError as e:
            logger.warning("[ImageProxy] Fetch error for %s: %s", target[:80], e)
            image_proxy_requests_total.labels(outcome="fetch_error").inc()
            raise ProxyFetchError() from e
        image_proxy_upstream_seconds.observe(time.perf_counter() - started)

        if not response.is_success:
            await response.aclose()
            logger.info("[ImageProxy] Upstream %d for %s", response.status_code, target[:80])
            image_proxy_requests_total.labels(outcome="upstream_error").inc()
            raise UpstreamStatusError(response.status_code, response.reason_phrase)

        image_proxy_requests_total.labels(outcome="ok").inc()
        return ProxiedImage(
            response=response,
            content_type=response.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        )
