"""Indicator schema shared by every source adapter.

IndicatorRecord is the single shape all providers are normalized into:

    title: Display name of the series
    source: Provider tag (FRED, BEA, BLS, World Bank)
    unit: Display unit ("%", "$", "$ Billion", "Index", "Thousands", "")
    labels: Period labels, chronological ascending
    data: Numeric observations parallel to labels
    current_value: Last observation (None when empty)
    previous_value: Second-to-last observation (0.0 with fewer than 2 points)
    change: current_value - previous_value
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

import pandas as pd


class Provider(str, Enum):
    """Upstream statistical agencies. Values are the display tags."""

    FRED = "FRED"
    BEA = "BEA"
    BLS = "BLS"
    WORLD_BANK = "World Bank"

    @property
    def key_prefix(self) -> str:
        """Prefix used in indicator keys, e.g. ``worldbank`` in ``worldbank:gdp``."""
        return self.name.lower().replace("_", "")


UNITS = ("%", "$", "$ Billion", "Index", "Thousands", "")


@dataclass(frozen=True)
class SeriesDescriptor:
    """Immutable descriptor for a provider series."""

    id: str  # provider-native code
    title: str
    frequency: str  # daily, weekly, monthly, quarterly, annual
    unit: str = ""
    # Provider-specific request fields
    dataset: str | None = None  # BEA NIPA / ITA
    table: str | None = None  # BEA TableName
    line_number: str | None = None  # BEA NIPA line to keep
    params: tuple[tuple[str, str], ...] = ()  # extra query parameters


def _as_float(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


@dataclass(frozen=True)
class IndicatorRecord:
    """Normalized indicator record. Never mutated after an adapter returns it."""

    title: str
    source: str
    unit: str
    labels: tuple[str, ...] = field(default_factory=tuple)
    data: tuple[float, ...] = field(default_factory=tuple)
    current_value: float | None = None
    previous_value: float = 0.0
    change: float = 0.0

    @classmethod
    def from_observations(
        cls,
        title: str,
        source: "Provider | str",
        unit: str,
        labels: Iterable[str],
        data: Iterable,
    ) -> "IndicatorRecord":
        """Build a record from parallel labels/values, deriving the summary fields.

        Values that are not finite numbers are coerced to 0.0.

        Raises:
            ValueError: If labels and data differ in length.
        """
        labels = tuple(str(label) for label in labels)
        values = tuple(_as_float(v) for v in data)
        if len(labels) != len(values):
            raise ValueError(
                f"labels ({len(labels)}) and data ({len(values)}) must have the same length"
            )

        current = values[-1] if values else None
        previous = values[-2] if len(values) >= 2 else 0.0
        change = current - previous if current is not None else 0.0

        return cls(
            title=title,
            source=source.value if isinstance(source, Provider) else str(source),
            unit=unit,
            labels=labels,
            data=values,
            current_value=current,
            previous_value=previous,
            change=change,
        )

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0

    def to_dict(self) -> dict:
        """Display-layer representation (camelCase keys, lists)."""
        return {
            "title": self.title,
            "data": list(self.data),
            "labels": list(self.labels),
            "currentValue": self.current_value,
            "previousValue": self.previous_value,
            "change": self.change,
            "unit": self.unit,
            "source": self.source,
        }

    def to_frame(self) -> pd.DataFrame:
        """Tabular form for CSV export: [label, value, source]."""
        return pd.DataFrame(
            {
                "label": list(self.labels),
                "value": list(self.data),
                "source": self.source,
            }
        )
