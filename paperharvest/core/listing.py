"""
Search-results page parsing
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlencode


RESULT_BLOCK_PATTERN = re.compile(
    r"<li[^>]*class=\"[^\"]*\barxiv-result\b[^\"]*\"[^>]*>(.*?)</li>",
    re.IGNORECASE | re.DOTALL,
)

# New-style identifiers only; the search listing never shows old-style ones.
LISTING_ID_PATTERN = re.compile(r"(?<![\d.])(?P<id>\d{4}\.\d{4,5})(?:v\d+)?(?!\d)")

TOTAL_PATTERN = re.compile(r"\bof\s+(?P<total>\d[\d,]*)\s+results\b", re.IGNORECASE)


@dataclass
class ListingPage:
    """Identifiers found on one search-results page"""
    ids: List[str] = field(default_factory=list)
    total: int = 0


def extract_listing(html: str) -> ListingPage:
    """
    Parse a search-results page

    Args:
        html: Raw page body

    Returns:
        ListingPage with page-unique ids in page order and the reported total
        (0 when the "of N results" phrase is missing)
    """
    return ListingPage(ids=extract_ids(html), total=extract_total(html))


def extract_ids(html: str) -> List[str]:
    ids: List[str] = []
    seen = set()
    for block in RESULT_BLOCK_PATTERN.findall(html or ""):
        match = LISTING_ID_PATTERN.search(block)
        if not match:
            continue
        identifier = match.group("id")
        if identifier in seen:
            continue
        seen.add(identifier)
        ids.append(identifier)
    return ids


def extract_total(html: str) -> int:
    match = TOTAL_PATTERN.search(html or "")
    if not match:
        return 0
    return int(match.group("total").replace(",", ""))


def build_search_url(base_url: str, query: str, offset: int = 0, page_size: int = 50) -> str:
    """Full-text search URL for one page of results, newest first"""
    params = {
        "query": query,
        "searchtype": "all",
        "abstracts": "show",
        "order": "-announced_date_first",
        "size": page_size,
        "start": offset,
    }
    return f"{base_url}?{urlencode(params)}"
