"""Naive trend forecast for an indicator.

Model:

    window     = min(6, n // 2), at least 2
    deltas     = period-over-period changes inside the trailing window
    avg_change = mean(deltas)
    forecast_i = last_value + avg_change * (i + 1)
    std        = sqrt(mean((deltas - avg_change) ** 2))
    bounds_i   = forecast_i ± std * sqrt(i + 1)

Forecast labels assume a monthly cadence: each step advances the last
historical label by one month and is formatted "Mon YYYY".
"""

from dataclasses import dataclass, field

import numpy as np

from macrodash.ingestion.periods import advance_months
from macrodash.ingestion.schema import IndicatorRecord
from macrodash.shared.utils import setup_logger

logger = setup_logger(__name__)

MAX_WINDOW = 6


@dataclass(frozen=True)
class ForecastResult:
    """Projected points with a widening confidence band."""

    labels: list[str] = field(default_factory=list)
    data: list[float] = field(default_factory=list)
    upper_bound: list[float] = field(default_factory=list)
    lower_bound: list[float] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.data

    def to_dict(self) -> dict:
        return {
            "labels": list(self.labels),
            "data": list(self.data),
            "upperBound": list(self.upper_bound),
            "lowerBound": list(self.lower_bound),
        }


def trailing_window(length: int) -> int:
    """Size of the trailing window used for a series of `length` points."""
    return max(2, min(MAX_WINDOW, length // 2))


def forecast(record: IndicatorRecord, periods: int = 6) -> ForecastResult:
    """Project `periods` future points from the record's recent trend.

    Returns an empty ForecastResult when the record has fewer than 2 points.

    Raises:
        ValueError: If periods is not positive.
    """
    if periods <= 0:
        raise ValueError(f"periods must be positive, got {periods}")

    values = np.asarray(record.data, dtype=float)
    if values.size < 2:
        logger.warning("Insufficient data for forecasting %s (%d points)", record.title, values.size)
        return ForecastResult()

    window = trailing_window(values.size)
    deltas = np.diff(values[-window:])
    avg_change = deltas.mean()
    volatility = np.sqrt(np.mean((deltas - avg_change) ** 2))

    steps = np.arange(1, periods + 1)
    points = values[-1] + avg_change * steps
    spread = volatility * np.sqrt(steps)

    return ForecastResult(
        labels=advance_months(record.labels[-1], periods),
        data=points.tolist(),
        upper_bound=(points + spread).tolist(),
        lower_bound=(points - spread).tolist(),
    )
