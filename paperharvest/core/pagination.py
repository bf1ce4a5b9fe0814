"""
Pagination over the archive's full-text search
"""
from __future__ import annotations

import logging

from .fetcher import FetchError, Fetcher
from .listing import build_search_url, extract_listing
from .models import CrawlCursor, DiscoveryResult


logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://arxiv.org/search/"
DEFAULT_PAGE_SIZE = 50


def discover_all(
    fetcher: Fetcher,
    query: str,
    page_size: int = DEFAULT_PAGE_SIZE,
    search_url: str = DEFAULT_SEARCH_URL,
) -> DiscoveryResult:
    """
    Collect every identifier the search reports for a query

    The total reported by the first page bounds the run: no offset at or past
    it is requested. Pacing between pages comes from the fetcher's throttle.

    Args:
        fetcher: Fetcher used for every listing page
        query: Search term, normally a software name
        page_size: Results requested per page

    Returns:
        DiscoveryResult; on a fetch failure it carries the ids collected so
        far and the error

    Raises:
        ValueError: If page_size is less than 1
    """
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")

    cursor = CrawlCursor()
    result = DiscoveryResult(query=query)

    while True:
        url = build_search_url(search_url, query, offset=cursor.offset, page_size=page_size)
        try:
            html = fetcher.fetch(url)
        except FetchError as exc:
            logger.error(
                "Discovery for %r stopped at offset %d: %s", query, cursor.offset, exc
            )
            result.error = exc
            break

        result.pages_fetched += 1
        page = extract_listing(html)

        if cursor.total is None:
            cursor.total = page.total
            logger.info("Search for %r reports %d results", query, cursor.total)
            if cursor.total == 0:
                break

        added = cursor.add(page.ids)
        logger.debug(
            "Offset %d: %d ids on page, %d new, %d collected",
            cursor.offset,
            len(page.ids),
            added,
            len(cursor.ids),
        )

        if not page.ids or cursor.exhausted(page_size):
            break
        cursor.offset += page_size

    result.ids = list(cursor.ids)
    result.total = cursor.total or 0
    return result
