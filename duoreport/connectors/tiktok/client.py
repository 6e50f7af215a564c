"""DuoReport — TikTok Business API Client."""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from duoreport.config import Settings
from duoreport.connectors.base import UpstreamClient
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import Platform
from duoreport.models.raw_models import TikTokReportResponse, TikTokReportRow

logger = get_logger("tiktok.client")


class TikTokClient(UpstreamClient):
    """Async HTTP client for the TikTok Marketing API."""

    platform = Platform.TIKTOK

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(settings, http_client)
        self.access_token = settings.tiktok_access_token
        self.advertiser_id = settings.tiktok_advertiser_id
        self.base_url = f"{settings.tiktok_base_url.rstrip('/')}/{settings.tiktok_api_version}"
        self.max_pages = settings.upstream_max_pages

    @property
    def headers(self) -> Dict[str, str]:
        return {"Access-Token": self.access_token, "Content-Type": "application/json"}

    def _error_message(self, body: Any) -> tuple[str, int]:
        if not isinstance(body, dict):
            return "", 0
        code = body.get("code", 0)
        return str(body.get("message", "")), code if isinstance(code, int) else 0

    def _parse_page(self, body: Any) -> TikTokReportResponse:
        if not isinstance(body, dict):
            raise self._fail("Malformed response body: expected a JSON object")
        try:
            page = TikTokReportResponse.model_validate(body)
        except ValidationError as e:
            raise self._fail(f"Malformed report response: {e.error_count()} invalid field(s)") from e
        if page.code != 0:
            raise self._fail(
                f"{page.message or 'TikTok API error'} "
                f"(Code: {page.code}, Request ID: {page.request_id or 'n/a'})",
                error_code=page.code,
            )
        return page

    async def _paginated_post(self, url: str, body: Dict[str, Any]) -> List[TikTokReportRow]:
        """POST a report query and collect rows from every page."""
        all_rows: List[TikTokReportRow] = []
        page_number = 1

        while True:
            payload = {**body, "page": page_number}
            result = self._parse_page(
                await self._request("POST", url, json_body=payload, headers=self.headers)
            )
            all_rows.extend(result.data.rows)

            total_pages = result.data.page_info.total_page
            if page_number >= total_pages or not result.data.rows:
                break
            if page_number >= self.max_pages:
                logger.warning(
                    f"Stopped after {self.max_pages} of {total_pages} pages",
                    extra={"platform": self.platform.value},
                )
                break
            page_number += 1

        logger.info(
            f"Fetched {len(all_rows)} report rows",
            extra={"platform": self.platform.value},
        )
        return all_rows
