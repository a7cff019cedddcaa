"""Per-image fallback state machine.

Every distinct link moves one way through three stages::

    DIRECT  --load error-->  PROXY_RETRY  --load error-->  FAILED

In DIRECT the browser loads the image straight from its origin. In
PROXY_RETRY the same representation is requested through
``/api/image-proxy``. FAILED shows a placeholder naming the host and is
never retried. The grid and the expanded view share one state per link, so
a failure seen in either view is remembered by both.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, urlparse

from imagegrid.schemas.search import SearchItem

logger = logging.getLogger(__name__)

PROXY_PATH = "/api/image-proxy"


class ImageStage(str, Enum):
    DIRECT = "direct"
    PROXY_RETRY = "proxy_retry"
    FAILED = "failed"


class View(str, Enum):
    GRID = "grid"
    EXPANDED = "expanded"


@dataclass
class ImageLoadState:
    using_proxy: bool = False
    failed: bool = False

    @property
    def stage(self) -> ImageStage:
        if self.failed:
            return ImageStage.FAILED
        if self.using_proxy:
            return ImageStage.PROXY_RETRY
        return ImageStage.DIRECT

    def advance(self) -> ImageStage:
        """Record one load failure and return the new stage."""
        if self.failed:
            return ImageStage.FAILED
        if self.using_proxy:
            self.failed = True
            self.using_proxy = False
        else:
            self.using_proxy = True
        return self.stage


@dataclass(frozen=True)
class ImageSource:
    """What a view should render for an item: a URL, or a placeholder."""

    url: str | None
    stage: ImageStage
    host: str

    @property
    def is_placeholder(self) -> bool:
        return self.url is None


def proxy_url(target: str, base_url: str = "") -> str:
    return f"{base_url.rstrip('/')}{PROXY_PATH}?u={quote(target, safe='')}"


def representation(item: SearchItem, view: View) -> str:
    """Grid prefers the thumbnail; the expanded view always uses the original."""
    if view is View.GRID and item.thumbnail:
        return item.thumbnail
    return item.link


class ImageResolver:
    """Owns the ``ImageLoadState`` map for one search session."""

    def __init__(self, proxy_base_url: str = ""):
        self.proxy_base_url = proxy_base_url
        self._states: dict[str, ImageLoadState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def state(self, link: str) -> ImageLoadState:
        if link not in self._states:
            self._states[link] = ImageLoadState()
        return self._states[link]

    def stage(self, link: str) -> ImageStage:
        return self.state(link).stage

    def source(self, item: SearchItem, view: View = View.GRID) -> ImageSource:
        state = self.state(item.link)
        target = representation(item, view)
        host = urlparse(target).netloc or target
        if state.failed:
            return ImageSource(url=None, stage=ImageStage.FAILED, host=host)
        if state.using_proxy:
            return ImageSource(
                url=proxy_url(target, self.proxy_base_url),
                stage=ImageStage.PROXY_RETRY,
                host=host,
            )
        return ImageSource(url=target, stage=ImageStage.DIRECT, host=host)

    def on_error(self, item: SearchItem, view: View = View.GRID) -> ImageSource:
        """Load-failure callback: advance exactly one step, return what to show next."""
        before = self.stage(item.link)
        after = self.state(item.link).advance()
        if before is not after:
            logger.debug("Image %s: %s -> %s (%s view)", item.link[:80], before.value, after.value, view.value)
        return self.source(item, view)
