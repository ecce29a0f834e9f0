"""Comparison and display helpers for indicator records."""

from collections.abc import Mapping, Sequence

from macrodash.ingestion.periods import month_label, parse_label
from macrodash.ingestion.schema import IndicatorRecord

# Comparison tool time ranges, in months
DATE_RANGES = {
    "3months": 3,
    "6months": 6,
    "1year": 12,
    "2years": 24,
}
MAX_COMPARED = 2


def align_for_comparison(
    catalog: Mapping[str, IndicatorRecord],
    keys: Sequence[str],
    date_range: str = "1year",
) -> dict:
    """Align up to two indicators on a common trailing window.

    Each series keeps its last N observations (N from DATE_RANGES) and is
    left-padded with None when shorter. Labels are the N months ending at the
    latest label among the selected records.

    Raises:
        ValueError: If date_range is unknown or more than two keys are given.
    """
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range '{date_range}' (expected one of {list(DATE_RANGES)})")
    if len(keys) > MAX_COMPARED:
        raise ValueError(f"At most {MAX_COMPARED} indicators can be compared, got {len(keys)}")

    months = DATE_RANGES[date_range]
    records = [(key, catalog[key]) for key in keys if key in catalog]

    datasets = []
    for key, record in records:
        data = list(record.data[-months:])
        padded = [None] * (months - len(data)) + data
        datasets.append({"key": key, "label": record.title, "data": padded})

    return {"labels": _trailing_month_labels(records, months), "datasets": datasets}


def _trailing_month_labels(records: list[tuple[str, IndicatorRecord]], months: int) -> list[str]:
    ends = [parse_label(r.labels[-1]) for _, r in records if r.labels]
    ends = [ts for ts in ends if ts is not None]
    if not ends:
        return [f"t-{months - i - 1}" for i in range(months)]

    end = max(ends)
    labels = []
    for i in range(months - 1, -1, -1):
        year, month = divmod(end.year * 12 + end.month - 1 - i, 12)
        labels.append(month_label(year, month + 1))
    return labels


def percent_change(data: Sequence[float]) -> float:
    """Percent change between the last two observations (0.0 if undefined)."""
    if len(data) < 2:
        return 0.0
    latest, previous = data[-1], data[-2]
    if previous == 0:
        return 0.0
    return (latest - previous) / previous * 100


def change_percent(record: IndicatorRecord) -> float | None:
    """Magnitude of the last change relative to the previous value, in percent.

    None when the previous value is 0.
    """
    if record.previous_value == 0:
        return None
    return abs(record.change) / abs(record.previous_value) * 100


def _grouped(value: float) -> str:
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text if text not in ("-0", "") else "0"


def format_value(value: float | None, unit: str = "") -> str:
    """Render a value with its display unit."""
    if value is None:
        return "n/a"
    if unit in ("$", "USD"):
        return f"${_grouped(value)}"
    if unit == "%":
        return f"{value:.1f}%"
    if unit == "$ Billion":
        return f"${value:.1f} B"
    return _grouped(value)
