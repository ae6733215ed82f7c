"""Offset/limit walker for the bookable-items endpoint.

The upstream caps each page, so a two-week window for a popular service
needs several requests.  Pages are fetched sequentially and concatenated
in arrival order; items are not deduplicated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from booking_proxy.errors import ProxyError
from booking_proxy.reshape import extract_availabilities

log = logging.getLogger("booking_proxy.pagination")

BOOKABLE_ITEMS_PATH = "/appointment/bookableitems"
PAGE_SIZE = 100
MAX_OFFSET = 1000


@dataclass
class BookableItemsPage:
    """Everything the walker collected."""

    items: list[dict] = field(default_factory=list)
    total_results: int | None = None
    pages_fetched: int = 0
    complete: bool = True
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "pagesFetched": self.pages_fetched,
            "totalResults": self.total_results,
            "fetched": len(self.items),
            "complete": self.complete,
            "error": self.error,
        }


def _total_results(data: dict) -> int | None:
    pagination = data.get("PaginationResponse") or {}
    total = pagination.get("TotalResults")
    try:
        return int(total) if total is not None else None
    except (TypeError, ValueError):
        return None


async def walk_bookable_items(
    upstream,
    params: dict[str, Any],
    user_token: str | None = None,
    page_size: int = PAGE_SIZE,
    max_offset: int = MAX_OFFSET,
) -> BookableItemsPage:
    """Fetch every page of bookable items for ``params``.

    Stops when the cumulative count reaches the declared ``TotalResults``,
    when the next offset would reach ``max_offset``, or when a page comes
    back empty.  Without a declared total only the first page is fetched.

    A failure on the first page propagates.  A failure on a later page ends
    the walk; the items gathered so far are returned with
    ``complete=False``.
    """
    result = BookableItemsPage()
    offset = 0

    while True:
        page_params = {**params, "limit": page_size, "offset": offset}
        try:
            data = await upstream.get(
                BOOKABLE_ITEMS_PATH, params=page_params, user_token=user_token
            )
            items = extract_availabilities(data)
        except ProxyError as exc:
            if result.pages_fetched == 0:
                raise
            log.warning(
                "Bookable items page at offset %d failed, returning %d items: %s",
                offset, len(result.items), exc.message,
            )
            result.complete = False
            result.error = exc.message
            break

        result.pages_fetched += 1
        result.items.extend(items)
        if result.total_results is None:
            result.total_results = _total_results(data)

        total = result.total_results
        offset += page_size
        if total is None or len(result.items) >= total:
            break
        if not items:
            result.complete = False
            break
        if offset >= max_offset:
            log.warning(
                "Bookable items stopped at offset ceiling %d (%d of %d)",
                max_offset, len(result.items), total,
            )
            result.complete = False
            break

    log.info(
        "Fetched %d bookable items in %d page(s)",
        len(result.items), result.pages_fetched,
    )
    return result
