"""DuoReport — TikTok Raw → BaseMetrics Transformer."""

from typing import Dict, List

from duoreport.core.dates import coerce_day
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import BaseMetrics
from duoreport.models.raw_models import TikTokReportRow

logger = get_logger("tiktok.transformer")


def transform_report(
    rows: List[TikTokReportRow],
    conversion_metric: str,
) -> Dict[str, BaseMetrics]:
    """Key report rows by CalendarDay (stat_time_day truncated to the date)."""
    daily: Dict[str, BaseMetrics] = {}
    skipped = 0

    for row in rows:
        day = coerce_day(row.dimensions.get("stat_time_day"))
        if day is None:
            skipped += 1
            continue
        metrics = BaseMetrics(
            clicks=row.count("clicks"),
            impressions=row.count("impressions"),
            cost=row.metric("spend"),
            conversions=row.count(conversion_metric) if conversion_metric else 0,
        )
        daily[day] = daily[day] + metrics if day in daily else metrics

    if skipped:
        logger.warning(f"Skipped {skipped} TikTok rows without a valid stat_time_day")
    logger.info(f"Normalized {len(rows)} TikTok rows into {len(daily)} days")
    return daily
