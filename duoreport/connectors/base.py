"""DuoReport — Source Adapter Contract & Shared HTTP Client.

Every platform connector exposes `fetch(start, end)` returning a sparse
day → BaseMetrics mapping. The HTTP client below owns retry, backoff and
error translation so platform clients only describe their payloads.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from duoreport.config import Settings
from duoreport.core.errors import UpstreamFetchError
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import BaseMetrics, Platform

logger = get_logger("connectors")


class UpstreamClient:
    """Async HTTP client with retry + rate-limit handling for one platform."""

    platform: Platform

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = settings.http_timeout
        self.max_retries = max(settings.upstream_max_retries, 1)
        self.retry_base_delay = settings.upstream_retry_base_delay
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    def _error_message(self, body: Any) -> tuple[str, int]:
        """Pull (message, code) out of an error response body."""
        return "", 0

    def _fail(self, message: str, status_code: int = 0, error_code: int = 0):
        return UpstreamFetchError(
            self.platform.value, message, status_code=status_code, error_code=error_code
        )

    async def _backoff(self, attempt: int, reason: str) -> None:
        wait = self.retry_base_delay * (2 ** (attempt - 1))
        logger.warning(
            f"{reason}. Retrying in {wait}s (attempt {attempt}/{self.max_retries})",
            extra={"platform": self.platform.value},
        )
        await asyncio.sleep(wait)

    async def _request(
        self,
        method: str,
        url: str,
        params: Dict[str, Any] | None = None,
        json_body: Dict[str, Any] | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Any:
        """Make a request and return the decoded JSON body."""
        client = await self._get_client()
        # Strip the query string: it may carry an access token.
        endpoint = url.split("?", 1)[0]

        for attempt in range(1, self.max_retries + 1):
            started = time.perf_counter()
            try:
                resp = await client.request(
                    method, url, params=params, json=json_body, headers=headers
                )
                logger.debug(
                    f"{method} {endpoint} -> {resp.status_code}",
                    extra={
                        "platform": self.platform.value,
                        "endpoint": endpoint,
                        "status_code": resp.status_code,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    },
                )

                # Rate limited
                if resp.status_code == 429 and attempt < self.max_retries:
                    await self._backoff(attempt, "Rate limited (429)")
                    continue

                resp.raise_for_status()
                return resp.json()

            except httpx.HTTPStatusError as e:
                try:
                    body = e.response.json()
                except ValueError:
                    body = {}
                message, error_code = self._error_message(body)
                status = e.response.status_code

                if attempt < self.max_retries and status >= 500:
                    await self._backoff(attempt, f"Server error {status}")
                    continue

                raise self._fail(
                    message or f"HTTP {status} from {endpoint}", status, error_code
                ) from e

            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    await self._backoff(attempt, f"Request error: {e!r}")
                    continue
                raise self._fail(
                    f"Connection failed after {self.max_retries} attempts: {e!r}"
                ) from e

            except ValueError as e:
                raise self._fail(f"Malformed response body from {endpoint}") from e

        raise self._fail("Max retries exhausted")


class SourceAdapter(ABC):
    """Fetches one platform's daily aggregates for a date range."""

    platform: Platform

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for this platform are present."""
        ...

    @abstractmethod
    async def fetch(self, start: str, end: str) -> Dict[str, BaseMetrics]:
        """Return day → BaseMetrics for the days the upstream reported.

        Returns an empty mapping without calling the upstream when the
        platform is not configured. Raises UpstreamFetchError on failure.
        """
        ...
