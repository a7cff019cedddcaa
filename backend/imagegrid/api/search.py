import logging

from fastapi import APIRouter, Depends, Query

from imagegrid.api.deps import get_search_gateway
from imagegrid.core.exceptions import BadRequestError
from imagegrid.services.search_gateway import GoogleImageSearch, parse_start

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "",
    summary="Image search",
    description=(
        "Pass-through to the Google Custom Search image API. Returns the raw "
        "upstream JSON (items, searchInformation.totalResults). `start` is the "
        "1-based result offset; missing or invalid values are treated as 1."
    ),
)
async def search_images(
    q: str | None = Query(None, description="Search query"),
    start: str | None = Query(None, description="1-based result offset"),
    gateway: GoogleImageSearch = Depends(get_search_gateway),
):
    if not q or not q.strip():
        raise BadRequestError("Missing search query")
    return await gateway.search(q, parse_start(start))
