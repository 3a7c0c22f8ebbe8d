"""Rate-limited, retrying HTTP GET behind a bounded concurrency gate."""

from __future__ import annotations

import asyncio
import logging
import random

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_DELAY_RANGE = (0.01, 0.02)  # seconds of jitter before each attempt
DEFAULT_CONCURRENCY = 20


def create_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the shared ``AsyncClient`` for one sync batch."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        follow_redirects=True,
        verify=settings.verify_ssl,
        headers={"User-Agent": settings.user_agent},
        transport=transport,
    )


class Fetcher:
    """GET pages politely: random pacing delay, bounded retries, shared gate.

    The gate (an ``asyncio.Semaphore``) is held for the pacing delay and the
    request itself, so at most ``gate`` width requests are ever in flight.
    Failures never raise: after the last attempt the page is reported as
    unavailable by returning ``None``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        gate: asyncio.Semaphore | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delay_range: tuple[float, float] = DEFAULT_DELAY_RANGE,
    ) -> None:
        self.client = client
        self.gate = gate if gate is not None else asyncio.Semaphore(DEFAULT_CONCURRENCY)
        self.max_retries = max_retries
        self.delay_range = delay_range

    @classmethod
    def from_settings(
        cls, client: httpx.AsyncClient, settings: Settings
    ) -> Fetcher:
        """One fetcher (and one fresh gate) per batch."""
        return cls(
            client,
            asyncio.Semaphore(settings.max_concurrent_requests),
            max_retries=settings.max_retries,
            delay_range=settings.fetch_delay_range,
        )

    async def fetch_text(
        self,
        url: str,
        max_retries: int | None = None,
        delay_range: tuple[float, float] | None = None,
    ) -> str | None:
        """Return the body of *url*, or ``None`` once retries are exhausted."""
        resp = await self._get(url, max_retries, delay_range)
        return resp.text if resp is not None else None

    async def fetch_bytes(
        self,
        url: str,
        max_retries: int = 1,
        delay_range: tuple[float, float] | None = None,
    ) -> bytes | None:
        """Return the raw content of *url* (images), or ``None`` on failure."""
        resp = await self._get(url, max_retries, delay_range)
        return resp.content if resp is not None else None

    async def _get(
        self,
        url: str,
        max_retries: int | None,
        delay_range: tuple[float, float] | None,
    ) -> httpx.Response | None:
        retries = max_retries if max_retries is not None else self.max_retries
        low, high = delay_range if delay_range is not None else self.delay_range

        for attempt in range(1, retries + 1):
            async with self.gate:
                await asyncio.sleep(random.uniform(low, high))
                try:
                    resp = await self.client.get(url)
                except httpx.InvalidURL as exc:
                    # Not retryable
                    logger.error("Invalid URL %r: %s", url, exc)
                    return None
                except httpx.HTTPError as exc:
                    logger.warning(
                        "Request to %s failed: %r (attempt %d/%d)",
                        url,
                        exc,
                        attempt,
                        retries,
                    )
                    continue

            if resp.status_code == 200:
                return resp
            logger.warning(
                "HTTP %d from %s (attempt %d/%d)",
                resp.status_code,
                url,
                attempt,
                retries,
            )

        logger.error("Giving up on %s after %d attempt(s)", url, retries)
        return None
