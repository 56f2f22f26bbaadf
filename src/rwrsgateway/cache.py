"""Rate-limited, single-slot TTL cache for upstream HTTP responses.

Shields a slow, rate-sensitive upstream (the RWR server list and player
stats pages) from the traffic hitting the gateway.

- Holds exactly one response per cache instance, whichever URL produced it
- Fresh responses (age <= TTL) are served without touching the network
- Upstream attempts are spaced at least ``rate_limit_window`` apart; inside
  the window the last response is replayed, even if stale
- Failed attempts still consume the rate-limit window and leave the cached
  response untouched
- State is process-scoped (resets on restart)

The slot and the last-attempt timestamp are guarded by two separate locks
that are never held across the network call.  The check-then-admit sequence
is therefore not atomic: under concurrent load two callers may both be
admitted within one window and the last one to finish owns the slot.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import TYPE_CHECKING

import httpx

from rwrsgateway.models import CachedResponse

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 10.0
_HTTP_INTERNAL_SERVER_ERROR = 500


# ---------------------------------------------------------------------------
# Error types
# ---------------------------------------------------------------------------


class GatewayError(Exception):
    """Raised when the gateway cannot produce an upstream response."""

    def __init__(self, message: str, status_code: int = _HTTP_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitedNoCacheError(GatewayError):
    """Raised when the rate limit blocks a fetch and nothing is cached yet."""

    def __init__(self) -> None:
        super().__init__("Rate limit exceeded and no cache available")


class UpstreamError(GatewayError):
    """Raised when the upstream request fails or its body cannot be read."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"Request to {url} failed: {type(cause).__name__}: {cause}")
        self.url = url


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class RateLimitedCache:
    """Single-slot response cache with an upstream rate limit.

    Args:
        rate_limit_window: Minimum seconds between upstream attempts.
        cache_ttl: Maximum age in seconds at which a response is served as fresh.
        timeout: Upstream request timeout in seconds.
        clock: Monotonic clock returning seconds; overridable for tests.
    """

    def __init__(
        self,
        rate_limit_window: float,
        cache_ttl: float,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rate_limit_window = rate_limit_window
        self.cache_ttl = cache_ttl
        self._timeout = timeout
        self._clock = clock

        self._cached: CachedResponse | None = None
        self._cached_lock = threading.Lock()

        # Start one window in the past so the very first fetch is admitted.
        self._last_request_at: float = clock() - rate_limit_window
        self._last_request_lock = threading.Lock()

    @property
    def cached(self) -> CachedResponse | None:
        """The response currently held in the slot, fresh or stale."""
        with self._cached_lock:
            return self._cached

    @property
    def last_request_at(self) -> float:
        """Clock reading of the most recent upstream attempt."""
        with self._last_request_lock:
            return self._last_request_at

    async def fetch(self, url: str) -> tuple[str, int]:
        """Return ``(body, status_code)`` for *url*, from the slot or the upstream.

        Raises:
            RateLimitedNoCacheError: The rate limit is active and nothing is cached.
            UpstreamError: The upstream call failed; the slot is left unchanged.
        """
        now = self._clock()

        cached = self.cached
        if cached is not None:
            if not cached.is_expired(self.cache_ttl, now):
                logger.debug("Cache hit, age %.3fs", cached.age(now))
                return cached.body, cached.status_code
            logger.info("Cache expired (age %.3fs), refresh required", cached.age(now))
        else:
            logger.info("No cached response, fetching from upstream")

        if now - self.last_request_at < self.rate_limit_window:
            # Re-read: another caller may have filled the slot meanwhile.
            cached = self.cached
            if cached is None:
                logger.warning("Rate limit exceeded and no cached response available")
                raise RateLimitedNoCacheError
            logger.warning("Rate limit exceeded, serving cached response")
            return cached.body, cached.status_code

        with self._last_request_lock:
            self._last_request_at = now

        return await self._fetch_upstream(url)

    async def _fetch_upstream(self, url: str) -> tuple[str, int]:
        logger.info("Requesting upstream: %s", url)
        try:
            # httpx timeouts are per phase; bound the whole call as well.
            async with asyncio.timeout(self._timeout), httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url)
                body = response.text
        except (httpx.HTTPError, TimeoutError) as exc:
            logger.error("Upstream request to %s failed: %s", url, exc)
            raise UpstreamError(url, exc) from exc

        status_code = response.status_code
        logger.info("Upstream returned %d (%d bytes)", status_code, len(body))
        self._store(body, status_code)
        return body, status_code

    def _store(self, body: str, status_code: int) -> None:
        entry = CachedResponse(body=body, status_code=status_code, fetched_at=self._clock())
        with self._cached_lock:
            self._cached = entry
