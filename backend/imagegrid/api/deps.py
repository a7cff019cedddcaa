"""Shared FastAPI dependencies.

HTTP clients live on ``app.state`` (created in the lifespan) so tests can
swap them through ``app.dependency_overrides``.
"""

from fastapi import Request

from imagegrid.config import settings
from imagegrid.core.exceptions import ConfigurationError
from imagegrid.services.image_proxy import ImageProxy
from imagegrid.services.search_gateway import GoogleImageSearch


def get_search_gateway(request: Request) -> GoogleImageSearch:
    if not settings.search_configured:
        raise ConfigurationError()
    return GoogleImageSearch(
        api_key=settings.GOOGLE_API_KEY,
        cx=settings.GOOGLE_SEARCH_ENGINE_ID,
        client=request.app.state.search_client,
    )


def get_image_proxy(request: Request) -> ImageProxy:
    return request.app.state.image_proxy
