"""
Tests for withdrawn paper resolution
"""
from datetime import datetime, timezone

from paperharvest.core.fetcher import FetchError
from paperharvest.core.models import ResolutionState, Revision
from paperharvest.core.withdrawal import WithdrawalResolver, abs_page_url, last_valid_revision

from pages import FakeFetcher, abs_page


WITHDRAWN_HISTORY = [
    (1, True, "Thu, 21 Aug 2025 12:34:56 UTC"),
    (2, True, "Mon, 1 Sep 2025 08:00:00 UTC"),
    (3, False, "Tue, 2 Sep 2025 09:30:00 UTC"),
]


class TestLastValidRevision:
    """Test last_valid_revision"""

    def test_picks_last_linked_dated_entry(self):
        revisions = [
            Revision(1, "Thu, 21 Aug 2025 12:34:56 UTC", True),
            Revision(2, "Mon, 1 Sep 2025 08:00:00 UTC", True),
            Revision(3, "Tue, 2 Sep 2025 09:30:00 UTC", False),
        ]
        assert last_valid_revision(revisions).number == 2

    def test_empty_history(self):
        assert last_valid_revision([]) is None

    def test_entries_without_timestamp_are_ignored(self):
        assert last_valid_revision([Revision(1, "", True), Revision(2, "x UTC", False)]) is None


class TestWithdrawalResolver:
    """Test WithdrawalResolver"""

    def test_direct(self):
        """A live paper resolves to its own page without extra fetches"""
        fetcher = FakeFetcher()
        resolution = WithdrawalResolver(fetcher).resolve("2508.15522", abs_page())
        assert resolution.state is ResolutionState.DIRECT
        assert resolution.url == "https://arxiv.org/abs/2508.15522"
        assert resolution.published_at == datetime(2025, 8, 21, 12, 34, 56, tzinfo=timezone.utc)
        assert fetcher.requested == []

    def test_withdrawn_fetches_versioned_page(self):
        """A withdrawn paper is re-read at its last valid revision"""
        versioned = abs_page(title="Original Title v2", history=WITHDRAWN_HISTORY)
        fetcher = FakeFetcher({"https://arxiv.org/abs/2508.15522v2": versioned})
        current = abs_page(title="Withdrawn", withdrawn=True, history=WITHDRAWN_HISTORY)

        resolution = WithdrawalResolver(fetcher).resolve("2508.15522", current)

        assert fetcher.requested == ["https://arxiv.org/abs/2508.15522v2"]
        assert resolution.state is ResolutionState.RESOLVED
        assert resolution.version == 2
        assert resolution.url == "https://arxiv.org/abs/2508.15522v2"
        assert resolution.detail.title == "Original Title v2"
        assert resolution.published_at == datetime(2025, 9, 1, 8, 0, tzinfo=timezone.utc)

    def test_withdrawn_without_history(self):
        """No usable revision entry is unresolvable rather than an index error"""
        fetcher = FakeFetcher()
        current = abs_page(withdrawn=True, history=[])
        resolution = WithdrawalResolver(fetcher).resolve("2508.15522", current)
        assert resolution.state is ResolutionState.UNRESOLVABLE
        assert not resolution.usable
        assert fetcher.requested == []

    def test_withdrawn_only_current_revision(self):
        """A single unlinked revision cannot be walked back"""
        current = abs_page(withdrawn=True, history=[(1, False, "Thu, 21 Aug 2025 12:34:56 UTC")])
        resolution = WithdrawalResolver(FakeFetcher()).resolve("2508.15522", current)
        assert resolution.state is ResolutionState.UNRESOLVABLE

    def test_refetch_failure(self):
        """A failing revision fetch is unresolvable, not raised"""
        url = "https://arxiv.org/abs/2508.15522v2"
        fetcher = FakeFetcher({url: FetchError(url, "503")})
        current = abs_page(withdrawn=True, history=WITHDRAWN_HISTORY)
        resolution = WithdrawalResolver(fetcher).resolve("2508.15522", current)
        assert resolution.state is ResolutionState.UNRESOLVABLE
        assert "v2" in resolution.reason

    def test_fetch_and_resolve(self):
        """The current page is fetched from the unversioned URL"""
        fetcher = FakeFetcher({"https://arxiv.org/abs/2508.15522": abs_page()})
        resolution = WithdrawalResolver(fetcher).fetch_and_resolve("2508.15522")
        assert resolution.usable
        assert fetcher.requested == ["https://arxiv.org/abs/2508.15522"]

    def test_abs_page_url(self):
        assert abs_page_url("2508.15522") == "https://arxiv.org/abs/2508.15522"
        assert abs_page_url("2508.15522", version=3) == "https://arxiv.org/abs/2508.15522v3"
