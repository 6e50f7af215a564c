"""Shared fixtures: settings, fake sources and a mock-transport HTTP client."""

import asyncio
from datetime import date
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from duoreport.config import Settings
from duoreport.connectors.base import SourceAdapter
from duoreport.core.errors import UpstreamFetchError
from duoreport.models.metrics_models import BaseMetrics, Platform


def build_settings(**overrides) -> Settings:
    values = dict(
        meta_access_token="meta-token",
        meta_ad_account_id="1234567890",
        tiktok_access_token="tiktok-token",
        tiktok_advertiser_id="7000000000",
        upstream_retry_base_delay=0,
        upstream_max_retries=3,
        anthropic_api_key=None,
        openai_api_key=None,
        sarvam_api_key=None,
        default_ai_provider="claude",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return build_settings()


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests go to `handler` instead of the network."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeSource(SourceAdapter):
    """In-memory source returning canned data or raising."""

    def __init__(
        self,
        platform: Platform,
        data: Optional[Dict[str, BaseMetrics]] = None,
        error: Optional[Exception] = None,
        configured: bool = True,
        delay: float = 0,
    ):
        self.platform = platform
        self.data = data or {}
        self.error = error
        self.configured = configured
        self.delay = delay
        self.calls: List[tuple] = []

    def is_configured(self) -> bool:
        return self.configured

    async def fetch(self, start: str, end: str) -> Dict[str, BaseMetrics]:
        self.calls.append((start, end))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return dict(self.data)


def upstream_error(platform: Platform, message: str = "boom") -> UpstreamFetchError:
    return UpstreamFetchError(platform.value, message, status_code=500)


FIXED_TODAY = date(2024, 3, 30)


def fixed_today() -> date:
    return FIXED_TODAY
