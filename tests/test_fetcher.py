"""
Tests for the fetcher and request throttle
"""
import pytest
import requests

from paperharvest.core.fetcher import Fetcher, FetchError, RequestThrottle


class _FakeResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class _FakeSession:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.headers = {}
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestFetcher:
    """Test Fetcher"""

    def test_success(self):
        """A successful response body is returned as text"""
        session = _FakeSession([_FakeResponse(text="<html>ok</html>")])
        fetcher = Fetcher(session=session, retry_delay=0)
        assert fetcher.fetch("https://arxiv.org/abs/1") == "<html>ok</html>"
        assert len(session.calls) == 1

    def test_user_agent(self):
        """Requests identify with the configured client header"""
        session = _FakeSession([])
        Fetcher(session=session, user_agent="paperharvest-test")
        assert session.headers["User-Agent"] == "paperharvest-test"

    def test_retries_transport_error(self):
        """A transport error is retried until a response arrives"""
        sleeps = []
        session = _FakeSession([
            requests.ConnectionError("reset"),
            _FakeResponse(text="second"),
        ])
        fetcher = Fetcher(session=session, retry_delay=1.5, sleep=sleeps.append)
        assert fetcher.fetch("https://arxiv.org/abs/1") == "second"
        assert sleeps == [1.5]

    def test_retries_bad_status(self):
        """Non-success statuses count as failed attempts"""
        session = _FakeSession([_FakeResponse(503), _FakeResponse(500), _FakeResponse(text="ok")])
        fetcher = Fetcher(session=session, retry_delay=0)
        assert fetcher.fetch("https://arxiv.org/abs/1") == "ok"
        assert len(session.calls) == 3

    def test_gives_up_after_three_attempts(self):
        """The attempt budget is three and the error names the URL"""
        session = _FakeSession([_FakeResponse(503)] * 5)
        fetcher = Fetcher(session=session, retry_delay=0)
        with pytest.raises(FetchError) as excinfo:
            fetcher.fetch("https://arxiv.org/abs/2508.15522")
        assert len(session.calls) == 3
        assert excinfo.value.url == "https://arxiv.org/abs/2508.15522"
        assert "https://arxiv.org/abs/2508.15522" in str(excinfo.value)

    def test_fetch_bytes(self):
        """Binary bodies are returned untouched"""
        session = _FakeSession([_FakeResponse(text="%PDF-1.4")])
        fetcher = Fetcher(session=session)
        assert fetcher.fetch_bytes("https://arxiv.org/pdf/1") == b"%PDF-1.4"


class TestRequestThrottle:
    """Test RequestThrottle"""

    def test_spaces_requests(self):
        """Back-to-back requests wait out the minimum interval"""
        now = [100.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            now[0] += seconds

        throttle = RequestThrottle(interval=2.0, clock=lambda: now[0], sleep=sleep)
        throttle.wait()
        throttle.wait()
        now[0] += 0.5
        throttle.wait()
        assert sleeps == [2.0, 1.5]

    def test_no_wait_after_interval(self):
        """A request after the interval has passed goes straight out"""
        now = [0.0]
        sleeps = []
        throttle = RequestThrottle(interval=1.0, clock=lambda: now[0], sleep=sleeps.append)
        throttle.wait()
        now[0] = 5.0
        throttle.wait()
        assert sleeps == []

    def test_disabled(self):
        """A zero interval never sleeps"""
        sleeps = []
        throttle = RequestThrottle(interval=0, sleep=sleeps.append)
        for _ in range(3):
            throttle.wait()
        assert sleeps == []
