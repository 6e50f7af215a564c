"""DuoReport — Meta Source Adapter."""

from typing import Dict, Optional

import httpx

from duoreport.config import Settings
from duoreport.connectors.base import SourceAdapter
from duoreport.connectors.meta.client import MetaClient
from duoreport.connectors.meta.endpoints import MetaEndpoints
from duoreport.connectors.meta.transformer import transform_insights
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import BaseMetrics, Platform

logger = get_logger("meta.source")


class MetaSource(SourceAdapter):
    """Daily account totals from Meta (Facebook / Instagram) ads."""

    platform = Platform.META

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.conversion_action = settings.meta_conversion_action
        self._http_client = http_client

    def is_configured(self) -> bool:
        return self.settings.meta_configured

    async def fetch(self, start: str, end: str) -> Dict[str, BaseMetrics]:
        if not self.is_configured():
            logger.warning(
                "Meta access token or ad account id is missing; skipping fetch",
                extra={"platform": self.platform.value},
            )
            return {}

        client = MetaClient(self.settings, http_client=self._http_client)
        try:
            rows = await MetaEndpoints(client).fetch_account_insights(start, end)
        finally:
            await client.close()
        return transform_insights(rows, self.conversion_action)
