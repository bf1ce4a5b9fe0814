"""
Idempotent merge of discovered papers into the store
"""
from __future__ import annotations

import logging
import threading
import zlib
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional

from .models import IngestOutcome, Paper
from .store import PaperStore


logger = logging.getLogger(__name__)

DetailLoader = Callable[[], Optional[Paper]]

LOCK_STRIPES = 64


def merge_software_names(existing: List[str], software_name: str) -> List[str]:
    """Append software_name unless already present (exact match), keeping order"""
    merged = [name for name in existing if name]
    if software_name and software_name not in merged:
        merged.append(software_name)
    return merged


class IngestionMerger:
    """Insert new papers or extend the software list of known ones"""

    def __init__(self, store: PaperStore, stripes: int = LOCK_STRIPES):
        self.store = store
        # Fixed pool: one identifier always maps to the same lock.
        self._locks = [threading.Lock() for _ in range(max(1, stripes))]

    @contextmanager
    def _locked(self, identifier: str) -> Iterator[None]:
        index = zlib.crc32(identifier.encode("utf-8")) % len(self._locks)
        with self._locks[index]:
            yield

    def ingest(self, identifier: str, software_name: str, fetch_detail: DetailLoader) -> IngestOutcome:
        """
        Ingest one discovered identifier for software_name

        Args:
            identifier: Archive identifier of the paper
            software_name: Software whose crawl discovered it
            fetch_detail: Called only when the paper is not stored yet;
                returns a draft Paper or None to skip

        Returns:
            IngestOutcome for this identifier

        Raises:
            ValueError: If software_name is blank
            StoreError: If the store read or write fails
        """
        if not software_name or not software_name.strip():
            raise ValueError("Software name cannot be empty.")

        with self._locked(identifier):
            existing = self.store.find_by_identifier(identifier)
            if existing is None:
                return self._insert(identifier, software_name, fetch_detail)

            merged = merge_software_names(existing.software_names, software_name)
            if merged == existing.software_names:
                logger.debug("%s already lists %r", identifier, software_name)
                return IngestOutcome.UNCHANGED

            self.store.update_software_names(identifier, merged)
            logger.info("%s now lists %s", identifier, merged)
            return IngestOutcome.MERGED

    def _insert(self, identifier: str, software_name: str, fetch_detail: DetailLoader) -> IngestOutcome:
        draft = fetch_detail()
        if draft is None or not draft.title.strip():
            logger.info("Skipping %s: no usable metadata", identifier)
            return IngestOutcome.SKIPPED

        paper = Paper(
            identifier=identifier,
            title=draft.title,
            authors=list(draft.authors),
            abstract=draft.abstract,
            url=draft.url,
            pdf_url=draft.pdf_url,
            published_at=draft.published_at,
            software_names=[software_name],
            created_at=datetime.now(timezone.utc),
        )
        self.store.insert(paper)
        return IngestOutcome.INSERTED
