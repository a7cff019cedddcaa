"""Image proxy route.

  GET     /api/image-proxy?u=<urlencoded URL>   stream the target image
  OPTIONS /api/image-proxy                      CORS preflight
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response, StreamingResponse

from imagegrid.api.deps import get_image_proxy
from imagegrid.config import settings
from imagegrid.core.exceptions import PROXY_CORS_HEADERS
from imagegrid.services.image_proxy import ImageProxy

router = APIRouter()
logger = logging.getLogger(__name__)


@router.options("", include_in_schema=False)
async def preflight():
    return Response(status_code=204, headers=PROXY_CORS_HEADERS)


@router.get(
    "",
    summary="Proxy an external image",
    description=(
        "Fetch an http(s) image on behalf of the browser and stream it back with "
        "permissive CORS and long-lived cache headers. Upstream failures are "
        "returned as JSON with status >= 400; timeouts answer 504."
    ),
)
async def proxy_image(
    u: str | None = Query(None, description="Absolute http(s) URL of the image"),
    proxy: ImageProxy = Depends(get_image_proxy),
):
    image = await proxy.open(u)
    logger.debug("[ImageProxy] Streaming %s (%s)", u[:80], image.content_type)
    return StreamingResponse(
        image.body(),
        status_code=200,
        headers={
            "Content-Type": image.content_type,
            "Cache-Control": settings.PROXY_CACHE_CONTROL,
            **PROXY_CORS_HEADERS,
        },
    )
