"""
HTTP fetching with bounded retries and a shared request throttle
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import requests

from .config import DEFAULT_USER_AGENT


logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a URL could not be fetched within the attempt budget."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Request failed: {url}: {message}")
        self.url = url


class RequestThrottle:
    """Global minimum interval between request starts, shared by all workers"""

    def __init__(
        self,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_slot: Optional[float] = None

    def wait(self) -> None:
        if self.interval <= 0:
            return
        with self._lock:
            now = self._clock()
            if self._next_slot is not None and now < self._next_slot:
                self._sleep(self._next_slot - now)
                now = self._next_slot
            self._next_slot = now + self.interval


class Fetcher:
    """Fetch pages from the archive, one bounded-retry GET per call"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        throttle: Optional[RequestThrottle] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize fetcher

        Args:
            session: Shared requests session (one is created when omitted)
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per URL before giving up
            retry_delay: Fixed pause between attempts in seconds
            throttle: Rate limit shared across every caller of this fetcher
            user_agent: Client identifier sent with every request
        """
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.throttle = throttle or RequestThrottle(interval=0)
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "Fetcher":
        return cls(
            session=session,
            timeout=settings.request_timeout,
            max_attempts=settings.max_attempts,
            retry_delay=settings.retry_delay,
            throttle=RequestThrottle(interval=settings.request_interval),
            user_agent=settings.user_agent,
        )

    def fetch(self, url: str) -> str:
        """
        Fetch a page and return its decoded body

        Raises:
            FetchError: If every attempt failed
        """
        response = self._get(url)
        return response.text

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch a binary resource such as a PDF"""
        response = self._get(url)
        return response.content

    def _get(self, url: str) -> requests.Response:
        last_error = "no attempt made"
        for attempt in range(1, self.max_attempts + 1):
            self.throttle.wait()
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response
            except requests.RequestException as exc:
                last_error = str(exc) or exc.__class__.__name__
                logger.warning(
                    "GET %s failed (attempt %d/%d): %s",
                    url,
                    attempt,
                    self.max_attempts,
                    last_error,
                )
            if attempt < self.max_attempts and self.retry_delay > 0:
                self._sleep(self.retry_delay)

        raise FetchError(url, f"gave up after {self.max_attempts} attempts: {last_error}")
