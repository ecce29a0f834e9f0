"""Derived metrics computed from an indicator catalog."""

from macrodash.analytics.comparison import (
    align_for_comparison,
    change_percent,
    format_value,
    percent_change,
)
from macrodash.analytics.correlation import correlation_matrix, pseudo_correlation
from macrodash.analytics.forecast import ForecastResult, forecast
from macrodash.analytics.normalization import normalize, radar_datasets

__all__ = [
    "ForecastResult",
    "align_for_comparison",
    "change_percent",
    "correlation_matrix",
    "forecast",
    "format_value",
    "normalize",
    "percent_change",
    "pseudo_correlation",
    "radar_datasets",
]
