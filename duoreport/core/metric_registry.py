"""DuoReport — Unified Metric Registry.

Defines the canonical base counters every platform is normalized into,
and the ratio formulas used to derive efficiency metrics from them.
Adding a ratio here is enough for the deriver to compute it.
"""

from enum import Enum
from typing import Dict, Iterable, List


class MetricType(str, Enum):
    """How a metric is categorised."""

    VOLUME = "volume"  # Raw counts: impressions, clicks
    COST = "cost"  # Monetary: spend
    CONVERSION = "conversion"  # Platform conversion events
    DERIVED = "derived"  # Computed ratios: ctr, cpa


class MetricDefinition:
    """Describes a single metric."""

    def __init__(
        self, name: str, metric_type: MetricType, unit: str = "", description: str = ""
    ):
        self.name = name
        self.metric_type = metric_type
        self.unit = unit
        self.description = description

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.metric_type.value})>"


class RatioDefinition(MetricDefinition):
    """A derived metric: (numerator / denominator) * multiplier."""

    def __init__(
        self,
        name: str,
        numerator: str,
        denominator: str,
        multiplier: float = 1,
        unit: str = "",
        description: str = "",
    ):
        super().__init__(name, MetricType.DERIVED, unit, description)
        self.numerator = numerator
        self.denominator = denominator
        self.multiplier = multiplier


# ─────────────────────────────────────────────
# BASE METRICS — One set per platform per day
# ─────────────────────────────────────────────

BASE_METRICS: Dict[str, MetricDefinition] = {
    "clicks": MetricDefinition("clicks", MetricType.VOLUME, "count", "Total clicks"),
    "impressions": MetricDefinition(
        "impressions", MetricType.VOLUME, "count", "Number of times ad was shown"
    ),
    "cost": MetricDefinition(
        "cost", MetricType.COST, "currency", "Total amount spent"
    ),
    "conversions": MetricDefinition(
        "conversions",
        MetricType.CONVERSION,
        "count",
        "Configured conversion event count",
    ),
}


# ─────────────────────────────────────────────
# DERIVED METRICS — Ratio formulas
# ─────────────────────────────────────────────

DERIVED_METRICS: Dict[str, RatioDefinition] = {
    "ctr": RatioDefinition(
        "ctr", "clicks", "impressions", 100, "%", "Click-through rate"
    ),
    "cpm": RatioDefinition(
        "cpm", "cost", "impressions", 1000, "currency", "Cost per 1000 impressions"
    ),
    "cpc": RatioDefinition("cpc", "cost", "clicks", 1, "currency", "Cost per click"),
    "cpa": RatioDefinition(
        "cpa", "cost", "conversions", 1, "currency", "Cost per acquisition"
    ),
    "cvr": RatioDefinition(
        "cvr", "conversions", "clicks", 100, "%", "Conversion rate"
    ),
}


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

ALL_METRICS: Dict[str, MetricDefinition] = {**BASE_METRICS, **DERIVED_METRICS}


def column_glossary(prefixes: Iterable[str], currency: str) -> List[str]:
    """One line per metric naming its prefixed columns, meaning and unit."""
    prefixes = list(prefixes)
    lines = []
    for metric in ALL_METRICS.values():
        columns = "/".join(f"{prefix}_{metric.name}" for prefix in prefixes)
        unit = currency if metric.unit == "currency" else metric.unit
        lines.append(f"- {columns}: {metric.description} ({unit})")
    return lines
