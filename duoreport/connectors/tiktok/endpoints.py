"""DuoReport — TikTok API Endpoints."""

from typing import List

from duoreport.connectors.tiktok.client import TikTokClient
from duoreport.core.logging import get_logger
from duoreport.models.raw_models import TikTokReportRow

logger = get_logger("tiktok.endpoints")

BASE_REPORT_METRICS = ["spend", "clicks", "impressions"]
# Upper bound on rows per page; a year of days plus one
REPORT_PAGE_SIZE = 366


class TikTokEndpoints:
    """Fetch raw report rows from TikTok."""

    def __init__(self, client: TikTokClient):
        self.client = client
        self.advertiser_id = client.advertiser_id

    async def fetch_daily_report(
        self,
        date_start: str,
        date_stop: str,
        conversion_metric: str,
    ) -> List[TikTokReportRow]:
        """Fetch the advertiser-level BASIC report broken down by day."""
        url = f"{self.client.base_url}/report/integrated/get/"
        metrics = list(BASE_REPORT_METRICS)
        if conversion_metric and conversion_metric not in metrics:
            metrics.append(conversion_metric)
        body = {
            "advertiser_id": self.advertiser_id,
            "report_type": "BASIC",
            "data_level": "AUCTION_ADVERTISER",
            "dimensions": ["stat_time_day"],
            "metrics": metrics,
            "start_date": date_start,
            "end_date": date_stop,
            "page_size": REPORT_PAGE_SIZE,
            "order_field": "stat_time_day",
            "order_type": "ASC",
        }
        rows = await self.client._paginated_post(url, body)
        logger.info(f"Fetched {len(rows)} advertiser report records")
        return rows
