"""DuoReport — Upstream Payload Schemas.

Explicit shapes for what the Meta and TikTok reporting APIs return.
Envelope problems (body is not an object, `data` is the wrong type) fail
validation and become an UpstreamFetchError. Individual numeric fields
never fail: anything missing or non-numeric is read as 0.
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def safe_float(value: Any) -> float:
    """Safely convert a value to a finite, non-negative float."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def safe_count(value: Any) -> int:
    """Safely convert a value to a non-negative integer count (truncated)."""
    return int(safe_float(value))


def _dict_rows(value: Any) -> Any:
    # Drop non-object entries; leave non-list values for the type check.
    if isinstance(value, list):
        return [row for row in value if isinstance(row, dict)]
    return value


# ─────────────────────────────────────────────
# META — Graph API /insights
# ─────────────────────────────────────────────


class MetaAction(BaseModel):
    """One entry of an insight row's `actions` list."""

    action_type: str = ""
    value: float = 0.0

    @field_validator("action_type", mode="before")
    @classmethod
    def _action_type(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, v: Any) -> float:
        return safe_float(v)


class MetaInsightRow(BaseModel):
    """A single day of account-level insights."""

    date_start: Optional[str] = None
    spend: float = 0.0
    clicks: int = 0
    impressions: int = 0
    actions: List[MetaAction] = []

    @field_validator("date_start", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("spend", mode="before")
    @classmethod
    def _spend(cls, v: Any) -> float:
        return safe_float(v)

    @field_validator("clicks", "impressions", mode="before")
    @classmethod
    def _counts(cls, v: Any) -> int:
        return safe_count(v)

    @field_validator("actions", mode="before")
    @classmethod
    def _actions(cls, v: Any) -> list:
        return _dict_rows(v) if isinstance(v, list) else []


class MetaPaging(BaseModel):
    next: Optional[str] = None


class MetaError(BaseModel):
    message: str = "Unknown Meta API error"
    code: int = 0


class MetaInsightsResponse(BaseModel):
    """Envelope of a /insights page."""

    data: List[MetaInsightRow] = []
    paging: Optional[MetaPaging] = None
    error: Optional[MetaError] = None

    @field_validator("data", mode="before")
    @classmethod
    def _data(cls, v: Any) -> Any:
        return [] if v is None else _dict_rows(v)

    @field_validator("paging", mode="before")
    @classmethod
    def _paging(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


# ─────────────────────────────────────────────
# TIKTOK — Business API /report/integrated/get/
# ─────────────────────────────────────────────


class TikTokReportRow(BaseModel):
    """A single day of the BASIC advertiser report."""

    dimensions: Dict[str, Any] = {}
    metrics: Dict[str, Any] = {}

    @field_validator("dimensions", "metrics", mode="before")
    @classmethod
    def _mapping(cls, v: Any) -> dict:
        return v if isinstance(v, dict) else {}

    def metric(self, name: str) -> float:
        return safe_float(self.metrics.get(name))

    def count(self, name: str) -> int:
        return safe_count(self.metrics.get(name))


class TikTokPageInfo(BaseModel):
    page: int = 1
    page_size: int = 0
    total_number: int = 0
    total_page: int = 1

    @field_validator("page", "total_page", mode="before")
    @classmethod
    def _page(cls, v: Any) -> int:
        return safe_count(v) or 1

    @field_validator("page_size", "total_number", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return safe_count(v)


class TikTokReportData(BaseModel):
    rows: List[TikTokReportRow] = Field(default=[], alias="list")
    page_info: TikTokPageInfo = TikTokPageInfo()

    @field_validator("rows", mode="before")
    @classmethod
    def _rows(cls, v: Any) -> Any:
        return [] if v is None else _dict_rows(v)

    @field_validator("page_info", mode="before")
    @classmethod
    def _page_info(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}


class TikTokReportResponse(BaseModel):
    """Envelope of a report page. `code` other than 0 is an upstream error."""

    code: int = -1
    message: str = ""
    request_id: str = ""
    data: TikTokReportData = TikTokReportData()

    @field_validator("message", "request_id", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("data", mode="before")
    @classmethod
    def _data(cls, v: Any) -> Any:
        # Error responses carry an empty or null data object.
        return v if isinstance(v, dict) else {}
