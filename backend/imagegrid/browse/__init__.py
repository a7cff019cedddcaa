"""Browser-side search aggregation and image fallback logic."""

from imagegrid.browse.client import (
    SearchApiClient,
    SearchGatewayError,
    SearchTransportError,
)
from imagegrid.browse.controller import (
    ContinuationTrigger,
    EmptyQueryError,
    FetchMode,
    SearchController,
)
from imagegrid.browse.images import (
    ImageLoadState,
    ImageResolver,
    ImageSource,
    ImageStage,
    View,
    proxy_url,
)
from imagegrid.browse.session import MAX_START_OFFSET, Phase, SearchSession

__all__ = [
    "ContinuationTrigger",
    "EmptyQueryError",
    "FetchMode",
    "ImageLoadState",
    "ImageResolver",
    "ImageSource",
    "ImageStage",
    "MAX_START_OFFSET",
    "Phase",
    "SearchApiClient",
    "SearchController",
    "SearchGatewayError",
    "SearchSession",
    "SearchTransportError",
    "View",
    "proxy_url",
]
