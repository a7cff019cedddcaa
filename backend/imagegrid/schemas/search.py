from typing import Any

from pydantic import BaseModel, ConfigDict


class SearchItem(BaseModel):
    """One image result. ``link`` is the identity key across pages."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    link: str
    thumbnail: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "SearchItem | None":
        """Map a raw Custom Search item; items without a link are skipped."""
        link = raw.get("link")
        if not link or not isinstance(link, str):
            return None
        image = raw.get("image") or {}
        thumbnail = (image.get("thumbnailLink") if isinstance(image, dict) else None) or raw.get("thumbnail")
        return cls(
            title=raw.get("title") or "",
            link=link,
            thumbnail=thumbnail or None,
        )


class SearchPage(BaseModel):
    """A decoded page of gateway results."""

    items: list[SearchItem] = []
    total_results: int | None = None

    @classmethod
    def from_gateway(cls, data: dict[str, Any]) -> "SearchPage":
        raw_items = data.get("items") or []
        if not isinstance(raw_items, list):
            raise TypeError(f"items must be a list, got {type(raw_items).__name__}")
        items = [item for item in (SearchItem.from_raw(r) for r in raw_items if isinstance(r, dict)) if item]

        total = None
        info = data.get("searchInformation") or {}
        raw_total = info.get("totalResults") if isinstance(info, dict) else None
        if raw_total is not None:
            try:
                total = int(raw_total)
            except (TypeError, ValueError):
                total = None

        return cls(items=items, total_results=total)
