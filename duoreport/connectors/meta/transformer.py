"""DuoReport — Meta Raw → BaseMetrics Transformer."""

from typing import Dict, List

from duoreport.core.dates import coerce_day
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import BaseMetrics
from duoreport.models.raw_models import MetaInsightRow, safe_count

logger = get_logger("meta.transformer")


def _extract_conversions(row: MetaInsightRow, conversion_action: str) -> int:
    """Value of the first action matching the configured conversion event."""
    for action in row.actions:
        if action.action_type == conversion_action:
            return safe_count(action.value)
    return 0


def transform_insights(
    rows: List[MetaInsightRow],
    conversion_action: str,
) -> Dict[str, BaseMetrics]:
    """Key daily insight rows by CalendarDay.

    Rows without a usable `date_start` are skipped; a day reported more
    than once is summed.
    """
    daily: Dict[str, BaseMetrics] = {}
    skipped = 0

    for row in rows:
        day = coerce_day(row.date_start)
        if day is None:
            skipped += 1
            continue
        metrics = BaseMetrics(
            clicks=row.clicks,
            impressions=row.impressions,
            cost=row.spend,
            conversions=_extract_conversions(row, conversion_action),
        )
        daily[day] = daily[day] + metrics if day in daily else metrics

    if skipped:
        logger.warning(f"Skipped {skipped} Meta rows without a valid date_start")
    logger.info(f"Normalized {len(rows)} Meta rows into {len(daily)} days")
    return daily
