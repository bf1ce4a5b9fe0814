"""
Resolution of withdrawn papers to their last valid revision
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .detail import DetailExtractor
from .fetcher import FetchError, Fetcher
from .models import PaperDetail, Resolution, ResolutionState, Revision


logger = logging.getLogger(__name__)

DEFAULT_ABS_URL = "https://arxiv.org/abs/"


def abs_page_url(identifier: str, version: Optional[int] = None, base_url: str = DEFAULT_ABS_URL) -> str:
    if version is None:
        return f"{base_url}{identifier}"
    return f"{base_url}{identifier}v{version}"


def last_valid_revision(revisions: List[Revision]) -> Optional[Revision]:
    """Last history entry that is both dated and linked, i.e. not the current one"""
    for revision in reversed(revisions):
        if revision.submitted and revision.has_link:
            return revision
    return None


class WithdrawalResolver:
    """
    Two-state resolver: a page that is not withdrawn is used directly, a
    withdrawn one is replaced by its last valid revision.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: Optional[DetailExtractor] = None,
        abs_url: str = DEFAULT_ABS_URL,
    ):
        self.fetcher = fetcher
        self.extractor = extractor or DetailExtractor()
        self.abs_url = abs_url

    def fetch_and_resolve(self, identifier: str) -> Resolution:
        """
        Fetch the current abstract page of identifier and resolve it

        Raises:
            FetchError: If the current page cannot be fetched
        """
        html = self.fetcher.fetch(abs_page_url(identifier, base_url=self.abs_url))
        return self.resolve(identifier, html)

    def resolve(self, identifier: str, html: str) -> Resolution:
        detail = self.extractor.extract(html)
        if not detail.is_withdrawn:
            return Resolution(
                state=ResolutionState.DIRECT,
                detail=detail,
                url=abs_page_url(identifier, base_url=self.abs_url),
                published_at=detail.latest_submitted_at,
            )
        return self._resolve_withdrawn(identifier, detail)

    def _resolve_withdrawn(self, identifier: str, current: PaperDetail) -> Resolution:
        revision = last_valid_revision(current.revisions)
        if revision is None:
            return self._unresolvable(identifier, "no earlier dated revision in submission history")

        url = abs_page_url(identifier, version=revision.number, base_url=self.abs_url)
        logger.info("%s is withdrawn, falling back to %s", identifier, url)
        try:
            html = self.fetcher.fetch(url)
        except FetchError as exc:
            return self._unresolvable(identifier, f"revision v{revision.number} unavailable: {exc}")

        return Resolution(
            state=ResolutionState.RESOLVED,
            detail=self.extractor.extract(html),
            version=revision.number,
            url=url,
            published_at=revision.submitted_at,
        )

    @staticmethod
    def _unresolvable(identifier: str, reason: str) -> Resolution:
        logger.warning("Cannot resolve withdrawn paper %s: %s", identifier, reason)
        return Resolution(state=ResolutionState.UNRESOLVABLE, reason=reason)
