"""DuoReport — Unified Daily Metric Models.

Every record is frozen once built: a ResultTable belongs to exactly one
reconciliation run and is discarded after the response is sent.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from duoreport.core.metric_registry import BASE_METRICS, DERIVED_METRICS


class Platform(str, Enum):
    """Upstream ad platforms and their column prefixes."""

    META = "meta"
    TIKTOK = "tiktok"

    @property
    def prefix(self) -> str:
        return "fb" if self is Platform.META else "tt"


class BaseMetrics(BaseModel):
    """Raw counters for one platform on one day."""

    model_config = ConfigDict(frozen=True)

    clicks: int = Field(default=0, ge=0)
    impressions: int = Field(default=0, ge=0)
    cost: float = Field(default=0.0, ge=0)
    conversions: int = Field(default=0, ge=0)

    def __add__(self, other: "BaseMetrics") -> "BaseMetrics":
        return BaseMetrics(
            clicks=self.clicks + other.clicks,
            impressions=self.impressions + other.impressions,
            cost=self.cost + other.cost,
            conversions=self.conversions + other.conversions,
        )


ZERO_METRICS = BaseMetrics()


class DerivedMetrics(BaseModel):
    """Efficiency ratios computed from a BaseMetrics."""

    model_config = ConfigDict(frozen=True)

    ctr: float = 0.0
    cpm: float = 0.0
    cpc: float = 0.0
    cpa: float = 0.0
    cvr: float = 0.0


class PlatformDay(BaseModel):
    """Base counters plus derived ratios for one platform on one day."""

    model_config = ConfigDict(frozen=True)

    base: BaseMetrics = ZERO_METRICS
    derived: DerivedMetrics = DerivedMetrics()


class FlatDailyRecord(BaseModel):
    """Serialized shape of a DailyRecord: one date plus 18 numeric columns."""

    model_config = ConfigDict(frozen=True)

    date: str
    fb_clicks: int
    fb_impressions: int
    fb_cost: float
    fb_conversions: int
    tt_clicks: int
    tt_impressions: int
    tt_cost: float
    tt_conversions: int
    fb_ctr: float
    fb_cpm: float
    fb_cpc: float
    fb_cpa: float
    fb_cvr: float
    tt_ctr: float
    tt_cpm: float
    tt_cpc: float
    tt_cpa: float
    tt_cvr: float


class DailyRecord(BaseModel):
    """One row of the output table."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(description="YYYY-MM-DD (UTC)")
    meta: PlatformDay
    tiktok: PlatformDay

    def flatten(self) -> FlatDailyRecord:
        """Flatten into prefixed columns, base counters first."""
        row: dict = {"date": self.date}
        for platform, day in ((Platform.META, self.meta), (Platform.TIKTOK, self.tiktok)):
            for name in BASE_METRICS:
                row[f"{platform.prefix}_{name}"] = getattr(day.base, name)
        for platform, day in ((Platform.META, self.meta), (Platform.TIKTOK, self.tiktok)):
            for name in DERIVED_METRICS:
                row[f"{platform.prefix}_{name}"] = getattr(day.derived, name)
        return FlatDailyRecord(**row)


class SourceState(str, Enum):
    """Outcome of one platform's fetch within a run."""

    OK = "ok"
    FAILED = "failed"
    UNCONFIGURED = "unconfigured"


class SourceStatus(BaseModel):
    """Observable result of one source adapter call."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    status: SourceState
    days_returned: int = 0
    error: Optional[str] = None


class ResultTable(BaseModel):
    """Dense, newest-first table produced by one reconciliation run."""

    model_config = ConfigDict(frozen=True)

    lookback_days: int
    date_range_start: str
    date_range_end: str
    records: List[DailyRecord] = []
    sources: List[SourceStatus] = []

    def rows(self) -> List[FlatDailyRecord]:
        return [record.flatten() for record in self.records]
