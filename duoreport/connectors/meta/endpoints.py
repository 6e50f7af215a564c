"""DuoReport — Meta API Endpoints."""

import json
from typing import List

from duoreport.connectors.meta.client import MetaClient
from duoreport.core.dates import enumerate_days
from duoreport.core.logging import get_logger
from duoreport.models.raw_models import MetaInsightRow

logger = get_logger("meta.endpoints")

# Fields requested from Meta; `actions` holds the conversion events
INSIGHT_FIELDS = "spend,clicks,impressions,actions"


class MetaEndpoints:
    """Fetch raw insight rows from Meta."""

    def __init__(self, client: MetaClient):
        self.client = client
        self.ad_account_id = client.ad_account_id

    async def fetch_account_insights(
        self,
        date_start: str,
        date_stop: str,
        time_increment: str = "1",
    ) -> List[MetaInsightRow]:
        """Fetch account-level insights broken down by day."""
        url = f"{self.client.base_url}/{self.ad_account_id}/insights"
        params = {
            "fields": INSIGHT_FIELDS,
            "time_range": json.dumps({"since": date_start, "until": date_stop}),
            "time_increment": time_increment,
            "level": "account",
            "limit": max(len(enumerate_days(date_start, date_stop)), 1),
        }
        rows = await self.client._paginated_get(url, params)
        logger.info(f"Fetched {len(rows)} account insight records")
        return rows
