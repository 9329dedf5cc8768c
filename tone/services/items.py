"""Catalog lookups and on-demand item creation."""

from typing import List

from ..core.errors import InvalidInput, RemoteError
from ..core.logger import get_logger
from ..models.schemas import Item
from .remote import Filter, RemoteService

_logger = get_logger(__name__)

ITEMS_TABLE = "items"


def _like_literal(text: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# PUBLIC_INTERFACE
def search_items(remote: RemoteService, query: str, limit: int = 10) -> List[Item]:
    """Case-insensitive substring match on item titles. A blank query returns []."""
    q = (query or "").strip()
    if not q:
        return []
    try:
        rows = remote.select(
            ITEMS_TABLE,
            filters=[Filter(column="title", op="ilike", value=f"%{_like_literal(q)}%")],
            limit=limit,
        )
    except RemoteError as exc:
        raise exc.with_message("Search failed.") from exc
    return [Item(**row) for row in rows]


# PUBLIC_INTERFACE
def create_item(remote: RemoteService, title: str, category: str = "other") -> Item:
    """Add a catalog entry. Titles are not checked for duplicates."""
    title = (title or "").strip()
    if not title:
        raise InvalidInput("Enter a title.")
    try:
        row = remote.insert(ITEMS_TABLE, {"title": title, "category": category})
    except RemoteError as exc:
        raise exc.with_message("Failed to create the item.") from exc
    _logger.info("Item created", extra={"item_id": row.get("id"), "title": title})
    return Item(**row)
