"""HTTP access to share pages and their structured endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from share_export.core.exceptions import ExtractionFailedException

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "no-cache",
}


class PageFetcher:
    """Thin async wrapper around :class:`httpx.AsyncClient`.

    Transport errors are retried with jittered backoff; any HTTP status
    of 400 or above becomes :class:`ExtractionFailedException` so the
    orchestrator can move on to the next strategy.
    """

    def __init__(
        self,
        *,
        timeout: float = 20.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent, **BROWSER_HEADERS},
            transport=self._transport,
        )

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=0.5, max=5),
        reraise=True,
    )
    async def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        async with self._client() as client:
            return await client.get(url, headers=headers)

    async def _request(self, url: str, headers: dict[str, str]) -> httpx.Response:
        try:
            response = await self._get(url, headers)
        except httpx.TransportError as exc:
            raise ExtractionFailedException(
                f"network error: {type(exc).__name__}"
            ) from exc

        if response.status_code >= 400:
            raise ExtractionFailedException(
                f"HTTP {response.status_code} {response.reason_phrase}".strip()
            )
        return response

    async def fetch_html(self, url: str) -> str:
        response = await self._request(url, {})
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text

    async def fetch_json(self, url: str) -> Any | None:
        """GET *url* expecting JSON.  Returns ``None`` for non-JSON bodies."""
        response = await self._request(url, {"Accept": "application/json"})
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type.lower():
            logger.debug("Skipping non-JSON response from %s (%s)", url, content_type)
            return None
        try:
            return response.json()
        except json.JSONDecodeError:
            logger.debug("Malformed JSON from %s", url)
            return None
