"""
Data models for paperharvest
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Iterable, List, Optional, Set


@dataclass
class Revision:
    """One entry of a paper's submission history"""
    number: int
    submitted: str = ""
    has_link: bool = False

    @property
    def submitted_at(self) -> Optional[datetime]:
        """Parse the raw 'Thu, 21 Aug 2025 12:00:00 UTC' timestamp"""
        text = " ".join(self.submitted.split())
        if not text:
            return None
        # RFC 2822 parsing uses fixed English day and month names, whatever the locale
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    def __str__(self):
        return f"v{self.number} ({self.submitted or 'no timestamp'})"


@dataclass
class PaperDetail:
    """Fields extracted from a single abstract page"""
    title: str = ""
    authors: List[str] = field(default_factory=list)
    abstract: str = ""
    pdf_url: str = ""
    is_withdrawn: bool = False
    revisions: List[Revision] = field(default_factory=list)

    @property
    def latest_submitted_at(self) -> Optional[datetime]:
        dated = [rev for rev in self.revisions if rev.submitted]
        if not dated:
            return None
        return dated[-1].submitted_at


@dataclass
class Paper:
    """A stored publication and the software names it is associated with"""
    identifier: str
    title: str
    authors: List[str] = field(default_factory=list)
    abstract: str = ""
    url: str = ""
    pdf_url: str = ""
    published_at: Optional[datetime] = None
    software_names: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    def __str__(self):
        return f"{self.identifier}: {self.title} [{', '.join(self.software_names)}]"


class ResolutionState(str, Enum):
    DIRECT = "direct"
    RESOLVED = "resolved"
    UNRESOLVABLE = "unresolvable"


@dataclass
class Resolution:
    """Terminal state of withdrawal resolution for one identifier"""
    state: ResolutionState
    detail: Optional[PaperDetail] = None
    version: Optional[int] = None
    url: str = ""
    published_at: Optional[datetime] = None
    reason: str = ""

    @property
    def usable(self) -> bool:
        return self.state is not ResolutionState.UNRESOLVABLE and self.detail is not None


@dataclass
class CrawlCursor:
    """Pagination state for one discovery run; never persisted"""
    offset: int = 0
    total: Optional[int] = None
    ids: List[str] = field(default_factory=list)
    _seen: Set[str] = field(default_factory=set, repr=False)

    def add(self, identifiers: Iterable[str]) -> int:
        """Merge identifiers, keeping first-seen order. Returns how many were new."""
        added = 0
        for identifier in identifiers:
            if identifier in self._seen:
                continue
            self._seen.add(identifier)
            self.ids.append(identifier)
            added += 1
        return added

    def exhausted(self, page_size: int) -> bool:
        return self.total is None or self.offset + page_size >= self.total


@dataclass
class DiscoveryResult:
    """Identifiers discovered for one query, possibly partial"""
    query: str
    ids: List[str] = field(default_factory=list)
    total: int = 0
    pages_fetched: int = 0
    error: Optional[Exception] = None

    @property
    def complete(self) -> bool:
        return self.error is None


class IngestOutcome(str, Enum):
    INSERTED = "inserted"
    MERGED = "merged"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass
class CrawlReport:
    """Summary of one crawl for a single software name"""
    software_name: str
    discovered: int = 0
    outcomes: Counter = field(default_factory=Counter)
    failed: List[str] = field(default_factory=list)
    discovery_error: Optional[str] = None

    def record(self, outcome: IngestOutcome) -> None:
        self.outcomes[outcome] += 1

    def count(self, outcome: IngestOutcome) -> int:
        return self.outcomes.get(outcome, 0)

    def __str__(self):
        parts = [f"{outcome.value}={self.count(outcome)}" for outcome in IngestOutcome]
        parts.append(f"failed={len(self.failed)}")
        summary = f"{self.software_name}: discovered={self.discovered} " + " ".join(parts)
        if self.discovery_error:
            summary += f" (partial discovery: {self.discovery_error})"
        return summary
