"""DuoReport — TikTok Source Adapter."""

from typing import Dict, Optional

import httpx

from duoreport.config import Settings
from duoreport.connectors.base import SourceAdapter
from duoreport.connectors.tiktok.client import TikTokClient
from duoreport.connectors.tiktok.endpoints import TikTokEndpoints
from duoreport.connectors.tiktok.transformer import transform_report
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import BaseMetrics, Platform

logger = get_logger("tiktok.source")


class TikTokSource(SourceAdapter):
    """Daily advertiser totals from TikTok ads."""

    platform = Platform.TIKTOK

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.conversion_metric = settings.tiktok_conversion_metric
        self._http_client = http_client

    def is_configured(self) -> bool:
        return self.settings.tiktok_configured

    async def fetch(self, start: str, end: str) -> Dict[str, BaseMetrics]:
        if not self.is_configured():
            logger.warning(
                "TikTok access token or advertiser id is missing; skipping fetch",
                extra={"platform": self.platform.value},
            )
            return {}

        client = TikTokClient(self.settings, http_client=self._http_client)
        try:
            rows = await TikTokEndpoints(client).fetch_daily_report(
                start, end, self.conversion_metric
            )
        finally:
            await client.close()
        return transform_report(rows, self.conversion_metric)
