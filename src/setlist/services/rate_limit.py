"""Login throttles.

Two sliding windows guard the magic link flow: one per client address across
the auth endpoints, and one per target email address so a single inbox cannot
be flooded from many addresses. Counters live in process memory, so each
worker process enforces its own limits.
"""

import math
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request

from setlist.config import settings


@dataclass(frozen=True)
class Throttle:
    """At most ``limit`` hits per key within ``window_seconds``."""

    name: str
    limit: int
    window_seconds: float


CLIENT_THROTTLE = Throttle("client", limit=10, window_seconds=60)


def email_throttle() -> Throttle:
    return Throttle(
        "email",
        limit=settings.magic_link_requests_per_email,
        window_seconds=settings.magic_link_throttle_minutes * 60,
    )


@dataclass(frozen=True)
class ThrottleDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class SlidingWindowThrottler:
    """Counts hits per key inside a trailing window.

    A key is forgotten once its window holds no hits. Stale keys are swept
    every ``sweep_interval`` seconds, so addresses seen once do not pile up.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 300.0,
    ) -> None:
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._hits: dict[str, deque[float]] = {}
        self._windows: dict[str, float] = {}
        self._next_sweep = clock() + sweep_interval

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, throttle: Throttle, identifier: str) -> ThrottleDecision:
        """Record a hit for ``identifier`` unless the throttle is exhausted."""
        now = self.clock()
        if now >= self._next_sweep:
            self.sweep(now)

        key = f"{throttle.name}:{identifier}"
        hits = self._hits.pop(key, None) or deque()
        _drop_before(hits, now - throttle.window_seconds)

        if len(hits) >= throttle.limit:
            oldest = hits[0] if hits else now
            if hits:
                self._hits[key] = hits
            else:
                self._windows.pop(key, None)
            return ThrottleDecision(
                allowed=False,
                limit=throttle.limit,
                remaining=0,
                retry_after=max(1, math.ceil(oldest + throttle.window_seconds - now)),
            )

        hits.append(now)
        self._hits[key] = hits
        self._windows[key] = throttle.window_seconds
        return ThrottleDecision(allowed=True, limit=throttle.limit, remaining=throttle.limit - len(hits))

    def sweep(self, now: float | None = None) -> int:
        """Forget keys with no hits left in their window. Returns how many were dropped."""
        if now is None:
            now = self.clock()

        dropped = 0
        for key in list(self._hits):
            hits = self._hits[key]
            _drop_before(hits, now - self._windows[key])
            if not hits:
                del self._hits[key]
                del self._windows[key]
                dropped += 1

        self._next_sweep = now + self.sweep_interval
        return dropped

    def reset(self) -> None:
        self._hits.clear()
        self._windows.clear()
        self._next_sweep = self.clock() + self.sweep_interval


def _drop_before(hits: deque[float], cutoff: float) -> None:
    while hits and hits[0] <= cutoff:
        hits.popleft()


_throttler = SlidingWindowThrottler()


def get_throttler() -> SlidingWindowThrottler:
    return _throttler


def client_address(request: Request) -> str:
    """Address the client throttle is keyed on.

    ``X-Forwarded-For`` is only honoured when ``trust_proxy_headers`` is set.
    """
    if settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host
    return "unknown"


def throttle_client(request: Request) -> ThrottleDecision:
    return get_throttler().hit(CLIENT_THROTTLE, client_address(request))


def throttle_email(email: str) -> ThrottleDecision:
    return get_throttler().hit(email_throttle(), email.strip().lower())
