"""DuoReport — Metric Deriver.

Computes the efficiency ratios in DERIVED_METRICS from one platform's
base counters for one day. No rounding: formatting belongs to whoever
renders the table.
"""

import math
from typing import Any

from duoreport.core.metric_registry import DERIVED_METRICS
from duoreport.models.metrics_models import BaseMetrics, DerivedMetrics


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def safe_ratio(numerator: Any, denominator: Any, multiplier: float = 1) -> float:
    """(numerator / denominator) * multiplier, or 0 when undefined."""
    if not _is_number(numerator) or not _is_number(denominator) or denominator == 0:
        return 0.0
    result = (numerator / denominator) * multiplier
    return float(result) if math.isfinite(result) else 0.0


def derive(base: BaseMetrics) -> DerivedMetrics:
    """Compute every registered ratio for a single day's counters."""
    values = base.model_dump()
    return DerivedMetrics(
        **{
            name: safe_ratio(
                values.get(ratio.numerator),
                values.get(ratio.denominator),
                ratio.multiplier,
            )
            for name, ratio in DERIVED_METRICS.items()
        }
    )
