"""Search session state owned by ``SearchController``."""

from dataclasses import dataclass, field
from enum import Enum

from imagegrid.schemas.search import SearchItem

MAX_START_OFFSET = 100  # Custom Search rejects start beyond this


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    ERROR = "error"


IN_FLIGHT = (Phase.LOADING, Phase.LOADING_MORE)


@dataclass
class SearchSession:
    """Pagination and accumulated results for one query.

    A new session is created for every query; nothing carries over.
    """

    query: str
    items: list[SearchItem] = field(default_factory=list)
    next_offset: int = 1
    has_more: bool = True
    total_estimate: int | None = None
    phase: Phase = Phase.IDLE
    error: str | None = None
    _links: set[str] = field(default_factory=set, repr=False)

    @property
    def in_flight(self) -> bool:
        return self.phase in IN_FLIGHT

    def can_load_more(self) -> bool:
        return not self.in_flight and self.has_more and bool(self.items)

    def stop(self) -> None:
        """End pagination for this session. Terminal."""
        self.has_more = False

    def clear_items(self) -> None:
        self.items.clear()
        self._links.clear()

    def merge(self, page_items: list[SearchItem]) -> int:
        """Append items whose link has not been seen yet.

        Returns the number of items actually added.
        """
        added = 0
        for item in page_items:
            if item.link in self._links:
                continue
            self._links.add(item.link)
            self.items.append(item)
            added += 1
        return added
