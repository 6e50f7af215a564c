"""DuoReport — Meta API Client.

Handles authentication, retry logic, rate limiting, and pagination.
"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from duoreport.config import Settings
from duoreport.connectors.base import UpstreamClient
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import Platform
from duoreport.models.raw_models import MetaInsightRow, MetaInsightsResponse

logger = get_logger("meta.client")


class MetaClient(UpstreamClient):
    """Async HTTP client for the Meta Marketing API."""

    platform = Platform.META

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(settings, http_client)
        self.access_token = settings.meta_access_token
        account = settings.meta_ad_account_id.strip()
        self.ad_account_id = account if account.startswith("act_") else f"act_{account}"
        self.base_url = f"{settings.meta_base_url.rstrip('/')}/{settings.meta_api_version}"
        self.max_pages = settings.upstream_max_pages

    def _error_message(self, body: Any) -> tuple[str, int]:
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return "", 0
        code = error.get("code", 0)
        return str(error.get("message", "")), code if isinstance(code, int) else 0

    def _parse_page(self, body: Any) -> MetaInsightsResponse:
        if not isinstance(body, dict):
            raise self._fail("Malformed response body: expected a JSON object")
        try:
            page = MetaInsightsResponse.model_validate(body)
        except ValidationError as e:
            raise self._fail(f"Malformed insights response: {e.error_count()} invalid field(s)") from e
        if page.error is not None:
            raise self._fail(page.error.message, error_code=page.error.code)
        return page

    # ── Pagination ──

    async def _paginated_get(
        self,
        url: str,
        params: Dict[str, Any] | None = None,
    ) -> List[MetaInsightRow]:
        """Fetch all pages of a paginated insights endpoint."""
        all_rows: List[MetaInsightRow] = []
        params = dict(params or {})
        params["access_token"] = self.access_token
        current_url = url

        for page in range(self.max_pages):
            # `paging.next` already carries the query string, token included.
            body = await self._request(
                "GET", current_url, params=params if page == 0 else None
            )
            result = self._parse_page(body)
            all_rows.extend(result.data)

            next_url = result.paging.next if result.paging else None
            if not next_url:
                break
            current_url = next_url
        else:
            logger.warning(
                f"Stopped after {self.max_pages} pages; later rows were not fetched",
                extra={"platform": self.platform.value},
            )

        logger.info(
            f"Fetched {len(all_rows)} insight rows",
            extra={"platform": self.platform.value},
        )
        return all_rows
