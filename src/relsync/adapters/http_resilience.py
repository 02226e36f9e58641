from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import (
    TYPE_CHECKING,
    TypedDict,
    Unpack,
)

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

from relsync.config.http_resilience import (
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ThrottleDecision,
    ThrottlePolicy,
    ThrottleSignal,
)

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        AuthTypes,
        CookieTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestData,
        RequestExtensions,
        RequestFiles,
        TimeoutTypes,
        URLTypes,
    )

log = getLogger(__name__)

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]
Sleeper = Callable[[float], Awaitable[None]]

_ABUSE_MARKERS = ("secondary rate limit", "abuse")

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "ThrottlePolicy",
    "ThrottleSignal",
    "build_retry",
    "classify_throttle",
    "suggested_wait_seconds",
]


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def classify_throttle(response: httpx.Response) -> ThrottleSignal | None:
    """Map a response to the throttling signal it carries, if any."""

    if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
        return ThrottleSignal.RATE_LIMITED
    if response.status_code != httpx.codes.FORBIDDEN:
        return None
    if response.headers.get("x-ratelimit-remaining") == "0":
        return ThrottleSignal.RATE_LIMITED
    body = response.text.lower()
    if any(marker in body for marker in _ABUSE_MARKERS):
        return ThrottleSignal.ABUSE_DETECTED
    return None


def suggested_wait_seconds(
    response: httpx.Response,
    *,
    now: Callable[[], float] = time.time,
) -> float | None:
    """Delay the server asks for before retrying, from ``Retry-After`` or the reset epoch."""

    retry_after = response.headers.get("retry-after")
    if retry_after is not None:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            return None
    reset = response.headers.get("x-ratelimit-reset")
    if reset is not None:
        try:
            return max(float(reset) - now(), 0.0)
        except ValueError:
            return None
    return None


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    data: RequestData | None
    files: RequestFiles | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    cookies: CookieTypes | None
    auth: AuthTypes | UseClientDefault | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    event_hooks: dict[str, list[ResponseHook]]
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    def __init__(self, config: ResilienceConfig, *, sleep: Sleeper | None = None) -> None:
        self.config = config
        self._sleep = sleep or asyncio.sleep
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        retry_transport = RetryTransport(retry=build_retry(config.retry))

        headers = dict(config.default_headers) if config.default_headers else None
        event_hooks = {"response": list(config.response_hooks)} if config.response_hooks else None

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": retry_transport,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if headers is not None:
            client_kwargs["headers"] = headers
        if event_hooks is not None:
            client_kwargs["event_hooks"] = event_hooks

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        return await self._send(do_request, method=method, url=url)

    async def get(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def _send(
        self,
        func: Callable[[], Awaitable[httpx.Response]],
        *,
        method: str,
        url: URLTypes,
    ) -> httpx.Response:
        policy = self.config.throttle
        attempt = 0
        while True:
            response = await self._dispatch(func)
            signal = classify_throttle(response)
            if signal is None:
                return response

            if signal is ThrottleSignal.ABUSE_DETECTED:
                log.warning("Abuse detected for request %s %s", method, url)
            else:
                log.warning("Request quota exhausted for request %s %s", method, url)

            if policy.decide(attempt, signal) is ThrottleDecision.ABORT:
                return response

            wait = policy.wait_seconds(suggested_wait_seconds(response))
            log.info("Retrying after %s seconds!", wait)
            await self._sleep(wait)
            attempt += 1

    async def _dispatch(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()
