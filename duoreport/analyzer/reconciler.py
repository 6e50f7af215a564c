"""DuoReport — Reconciler.

Runs the full data flow for one request:
  lookback → canonical day range → fetch both platforms concurrently →
  zero-fill missing days → derive ratios → newest-first ResultTable

A platform that fails or is not configured contributes zeros for every
day; the table is always complete. Only an invalid lookback is fatal.
"""

import asyncio
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from duoreport.analyzer.metrics import derive
from duoreport.connectors.base import SourceAdapter
from duoreport.core.dates import enumerate_days, lookback_window, utc_today
from duoreport.core.errors import RangeError
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import (
    ZERO_METRICS,
    BaseMetrics,
    DailyRecord,
    PlatformDay,
    ResultTable,
    SourceState,
    SourceStatus,
)

logger = get_logger("analyzer.reconciler")

DailyMetrics = Dict[str, BaseMetrics]


def _platform_day(base: BaseMetrics) -> PlatformDay:
    return PlatformDay(base=base, derived=derive(base))


def build_records(
    days: Iterable[str],
    meta: DailyMetrics,
    tiktok: DailyMetrics,
) -> List[DailyRecord]:
    """One DailyRecord per day, newest first, zero-filled where absent."""
    records = [
        DailyRecord(
            date=day,
            meta=_platform_day(meta.get(day, ZERO_METRICS)),
            tiktok=_platform_day(tiktok.get(day, ZERO_METRICS)),
        )
        for day in days
    ]
    return sorted(records, key=lambda r: r.date, reverse=True)


class Reconciler:
    """Merges the Meta and TikTok sources into one dense daily table."""

    def __init__(
        self,
        meta_source: SourceAdapter,
        tiktok_source: SourceAdapter,
        allowed_lookbacks: Iterable[int] = (90, 365),
        today: Optional[Callable[[], date]] = None,
    ):
        self.meta_source = meta_source
        self.tiktok_source = tiktok_source
        self.allowed_lookbacks = tuple(sorted(set(allowed_lookbacks)))
        self._today = today or utc_today

    async def _settle(
        self, source: SourceAdapter, start: str, end: str
    ) -> Tuple[DailyMetrics, SourceStatus]:
        """Run one source to completion, turning any failure into zeros."""
        platform = source.platform
        if not source.is_configured():
            logger.warning(
                f"{platform.value} is not configured; filling with zeros",
                extra={"platform": platform.value},
            )
            return {}, SourceStatus(platform=platform, status=SourceState.UNCONFIGURED)

        try:
            daily = await source.fetch(start, end)
        except Exception as e:
            logger.error(
                f"{platform.value} fetch failed; filling with zeros: {e}",
                extra={"platform": platform.value},
            )
            return {}, SourceStatus(
                platform=platform, status=SourceState.FAILED, error=str(e)
            )

        # Days outside the requested window are ignored by the dense merge
        in_range = sum(1 for day in daily if start <= day <= end)
        return daily, SourceStatus(
            platform=platform, status=SourceState.OK, days_returned=in_range
        )

    async def reconcile(self, lookback_days: int) -> ResultTable:
        """Build the ResultTable for the last `lookback_days` days (UTC)."""
        if lookback_days not in self.allowed_lookbacks:
            raise RangeError(
                f"Unsupported lookback {lookback_days!r}; "
                f"expected one of {list(self.allowed_lookbacks)}"
            )
        start, end = lookback_window(lookback_days, self._today())
        days = enumerate_days(start, end)
        if len(days) != lookback_days:
            raise RangeError(f"Could not build a {lookback_days}-day range ending {end}")

        logger.info(
            f"Reconciling {start} → {end}",
            extra={"lookback_days": lookback_days},
        )

        (meta, meta_status), (tiktok, tiktok_status) = await asyncio.gather(
            self._settle(self.meta_source, start, end),
            self._settle(self.tiktok_source, start, end),
        )

        table = ResultTable(
            lookback_days=lookback_days,
            date_range_start=start,
            date_range_end=end,
            records=build_records(days, meta, tiktok),
            sources=[meta_status, tiktok_status],
        )
        logger.info(
            f"Reconciled {len(table.records)} days "
            f"(meta={meta_status.status.value}, tiktok={tiktok_status.status.value})",
            extra={"lookback_days": lookback_days},
        )
        return table
