"""Provider list-events client over httpx. Bounded per-call timeout, exponential backoff on transient errors."""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx
from pydantic import ValidationError

from usersync.application.exceptions import ProviderApiError, ProviderAuthenticationError
from usersync.domain.models.event import EventPage
from usersync.domain.schemas.event import EventListPayload

logger = logging.getLogger(__name__)

# HTTP status codes that trigger a retry
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
AUTH_STATUS_CODES = {401, 403}


def _compute_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: float,
    response: httpx.Response | None = None,
) -> float:
    """Compute delay with exponential backoff + jitter, respecting Retry-After."""
    if response is not None:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(float(retry_after), max_delay)
            except ValueError:
                pass

    delay = min(base_delay * (2**attempt), max_delay)
    jitter_amount = delay * jitter
    delay += random.uniform(-jitter_amount, jitter_amount)
    return max(0.1, delay)


class WorkOSEventClient:
    """Implements EventProvider against `GET /events`."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.workos.com",
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
        page_limit: int = 100,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 0.3,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}", "Accept": "application/json"},
            transport=transport,
        )
        self._max_retries = max_retries
        self._page_limit = page_limit
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._jitter = jitter
        self._sleep = sleep

    async def close(self) -> None:
        await self._client.aclose()

    async def list_events(
        self,
        types: Sequence[str],
        after: Optional[str] = None,
        range_start: Optional[datetime] = None,
    ) -> EventPage:
        params: list[tuple[str, str]] = [("events", t) for t in types]
        params.append(("limit", str(self._page_limit)))
        if after:
            params.append(("after", after))
        if range_start is not None:
            params.append(("range_start", range_start.isoformat()))

        response = await self._get_with_retries("/events", params)
        try:
            body = EventListPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderApiError(f"Unexpected list-events response: {e}", response.status_code) from e

        page = EventPage(
            data=[item.to_domain() for item in body.data],
            next_cursor=body.list_metadata.after,
        )
        logger.debug(
            "provider_events_listed",
            extra={"count": len(page.data), "after": after, "next_cursor": page.next_cursor},
        )
        return page

    async def _get_with_retries(self, path: str, params: list[tuple[str, str]]) -> httpx.Response:
        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.get(path, params=params)
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt == self._max_retries:
                    raise ProviderApiError(f"Provider unreachable: {type(e).__name__}: {e}") from e
                delay = _compute_delay(attempt, self._base_delay, self._max_delay, self._jitter)
                logger.warning(
                    "provider_retry",
                    extra={"attempt": attempt + 1, "max_retries": self._max_retries, "error": type(e).__name__, "delay_seconds": round(delay, 2)},
                )
                await self._sleep(delay)
                continue

            status = response.status_code
            if status in AUTH_STATUS_CODES:
                raise ProviderAuthenticationError(f"Provider rejected credentials (HTTP {status})", status)
            if status in RETRYABLE_STATUS_CODES:
                if attempt == self._max_retries:
                    raise ProviderApiError(f"Provider error (HTTP {status})", status)
                delay = _compute_delay(attempt, self._base_delay, self._max_delay, self._jitter, response)
                logger.warning(
                    "provider_retry",
                    extra={"attempt": attempt + 1, "max_retries": self._max_retries, "status_code": status, "delay_seconds": round(delay, 2)},
                )
                await self._sleep(delay)
                continue
            if status >= 400:
                raise ProviderApiError(f"Provider error (HTTP {status}): {response.text[:200]}", status)
            return response

        raise ProviderApiError("Provider retries exhausted")
