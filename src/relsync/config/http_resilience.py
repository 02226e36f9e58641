"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retries for network failures and server errors.

    Throttling responses (429/403) are not listed here; they go through
    :class:`ThrottlePolicy` instead. Only idempotent methods are retried so an
    asset upload is never sent twice by the transport.
    """

    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = field(
        default_factory=lambda: frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PUT"})
    )
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({500, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


class ThrottleSignal(StrEnum):
    RATE_LIMITED = "rate_limited"
    ABUSE_DETECTED = "abuse_detected"


class ThrottleDecision(StrEnum):
    RETRY = "retry"
    ABORT = "abort"


@dataclass(slots=True, frozen=True)
class ThrottlePolicy:
    """Pure retry decision for throttling signals raised by the server.

    ``attempt`` counts retries already made for the triggering request, so the
    first throttled response is seen with ``attempt == 0``.
    """

    max_rate_limit_retries: int = 1
    retry_on_abuse: bool = False
    max_wait_seconds: float = 120.0
    default_wait_seconds: float = 60.0

    def decide(self, attempt: int, signal: ThrottleSignal) -> ThrottleDecision:
        if signal is ThrottleSignal.ABUSE_DETECTED and not self.retry_on_abuse:
            return ThrottleDecision.ABORT
        if attempt < self.max_rate_limit_retries:
            return ThrottleDecision.RETRY
        return ThrottleDecision.ABORT

    def wait_seconds(self, suggested: float | None) -> float:
        if suggested is None or suggested < 0:
            suggested = self.default_wait_seconds
        return min(suggested, self.max_wait_seconds)


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    throttle: ThrottlePolicy = field(default_factory=ThrottlePolicy)
    ratelimit: RateLimit | None = None
    response_hooks: tuple[ResponseHook, ...] = field(default_factory=tuple)
    default_headers: Mapping[str, str] | None = None
