"""
Crawl orchestration: discovery, detail resolution and ingestion per software name
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional

from .config import HarvestSettings
from .fetcher import FetchError, Fetcher
from .mentions import MentionError, pdf_mentions
from .merger import IngestionMerger
from .models import CrawlReport, IngestOutcome, Paper
from .pagination import discover_all
from .store import PaperStore, StoreError
from .withdrawal import WithdrawalResolver


logger = logging.getLogger(__name__)


class Crawler:
    """Run crawls for software names against the archive search"""

    def __init__(
        self,
        settings: HarvestSettings,
        fetcher: Fetcher,
        store: PaperStore,
        resolver: Optional[WithdrawalResolver] = None,
    ):
        """
        Initialize crawler

        Args:
            settings: Crawl settings (page size, worker count, URLs)
            fetcher: Fetcher shared by every worker, and so is its throttle
            store: Paper store; its lifecycle belongs to the caller
        """
        self.settings = settings
        self.fetcher = fetcher
        self.store = store
        self.resolver = resolver or WithdrawalResolver(fetcher, abs_url=settings.abs_url)
        self.merger = IngestionMerger(store)

    def run_crawls(self, software_names: Iterable[str]) -> List[CrawlReport]:
        return [self.run_crawl(name) for name in software_names]

    def run_crawl(self, software_name: str) -> CrawlReport:
        """
        Discover and ingest every paper the search returns for software_name

        A partial discovery is still ingested; the rest is picked up by the
        next crawl. Failures of single identifiers never stop the crawl.

        Raises:
            ValueError: If software_name is blank
        """
        software_name = software_name.strip()
        if not software_name:
            raise ValueError("Software name cannot be empty.")
        report = CrawlReport(software_name=software_name)
        logger.info("Starting crawl for %r", software_name)

        discovery = discover_all(
            self.fetcher,
            software_name,
            page_size=self.settings.page_size,
            search_url=self.settings.search_url,
        )
        report.discovered = len(discovery.ids)
        if discovery.error is not None:
            report.discovery_error = str(discovery.error)

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            futures = {
                pool.submit(self.ingest_single, identifier, software_name): identifier
                for identifier in discovery.ids
            }
            for future in as_completed(futures):
                identifier = futures[future]
                try:
                    report.record(future.result())
                except (FetchError, StoreError) as exc:
                    logger.error("Failed to ingest %s for %r: %s", identifier, software_name, exc)
                    report.failed.append(identifier)

        logger.info("Finished crawl: %s", report)
        return report

    def ingest_single(self, identifier: str, software_name: str) -> IngestOutcome:
        """
        Ingest one identifier for software_name

        Raises:
            ValueError: If software_name is blank
            FetchError: If the paper's current abstract page cannot be fetched
            StoreError: If the store read or write fails
        """
        outcome = self.merger.ingest(
            identifier,
            software_name,
            lambda: self._load_paper(identifier, software_name),
        )
        logger.debug("%s -> %s", identifier, outcome.value)
        return outcome

    def _load_paper(self, identifier: str, software_name: str) -> Optional[Paper]:
        resolution = self.resolver.fetch_and_resolve(identifier)
        if not resolution.usable:
            logger.info("Skipping %s: %s", identifier, resolution.reason)
            return None

        detail = resolution.detail
        if not detail.title:
            logger.warning("Skipping %s: title not found on %s", identifier, resolution.url)
            return None

        paper = Paper(
            identifier=identifier,
            title=detail.title,
            authors=detail.authors,
            abstract=detail.abstract,
            url=resolution.url,
            pdf_url=detail.pdf_url,
            published_at=resolution.published_at,
        )
        if self.settings.verify_mentions and not self._mentions(paper, software_name):
            return None
        return paper

    def _mentions(self, paper: Paper, software_name: str) -> bool:
        if not paper.pdf_url:
            logger.info("Skipping %s: no PDF to check for %r", paper.identifier, software_name)
            return False
        try:
            found = pdf_mentions(self.fetcher.fetch_bytes(paper.pdf_url), [software_name])
        except (FetchError, MentionError) as exc:
            logger.warning("Skipping %s: PDF check failed: %s", paper.identifier, exc)
            return False
        if not found:
            logger.info("Skipping %s: PDF does not mention %r", paper.identifier, software_name)
        return bool(found)
