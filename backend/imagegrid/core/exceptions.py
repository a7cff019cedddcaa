"""Application error hierarchy and the FastAPI handler that renders it.

Search errors render as ``{"error": {"message": ..., "details": ...}}``.
Proxy errors render flat (``{"error": "...", ...}``) and always carry the
proxy's CORS headers so a browser caller can read them cross-origin.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROXY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
}


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: str | None = None, status_code: int | None = None):
        self.message = message or self.message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None

    def to_payload(self) -> dict[str, Any]:
        error: dict[str, Any] = {"message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class BadRequestError(AppError):
    status_code = 400
    message = "Bad request"


class ConfigurationError(AppError):
    """Upstream credentials are missing; not retryable."""

    status_code = 500
    message = "API configuration missing"


class GatewayError(AppError):
    """The upstream search API answered with a non-success status."""

    status_code = 502
    message = "Search API error"


# ---------------------------------------------------------------------------
# Image proxy errors
# ---------------------------------------------------------------------------


class ProxyError(AppError):
    status_code = 502
    message = "Proxy fetch error"

    @property
    def headers(self) -> dict[str, str]:
        return dict(PROXY_CORS_HEADERS)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidTargetError(ProxyError):
    status_code = 400
    message = "Invalid url"


class UpstreamStatusError(ProxyError):
    """Upstream answered, but not with a 2xx. Never reported below 400."""

    message = "Upstream fetch failed"

    def __init__(self, upstream_status: int, status_text: str = ""):
        self.upstream_status = upstream_status
        self.status_text = status_text
        super().__init__(status_code=max(400, upstream_status))

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "status": self.upstream_status,
            "statusText": self.status_text,
        }


class UpstreamTimeoutError(ProxyError):
    status_code = 504
    message = "Upstream timeout"


class ProxyFetchError(ProxyError):
    status_code = 502
    message = "Proxy fetch error"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(
        content=exc.to_payload(),
        status_code=exc.status_code,
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
