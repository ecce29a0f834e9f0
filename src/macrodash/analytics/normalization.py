"""Min-max normalization for radar comparisons."""

from collections.abc import Iterable, Mapping, Sequence

from macrodash.ingestion.schema import IndicatorRecord

MIDPOINT = 50.0


def normalize(series: Sequence[float]) -> list[float]:
    """Scale values to [0, 100]; a constant series maps to 50 everywhere."""
    if len(series) == 0:
        return []

    low = min(series)
    high = max(series)
    if high == low:
        return [MIDPOINT] * len(series)
    return [(v - low) / (high - low) * 100 for v in series]


def radar_datasets(
    catalog: Mapping[str, IndicatorRecord],
    keys: Iterable[str] | None = None,
    points: int | None = None,
) -> dict:
    """Normalized series per key, shaped for a radar chart.

    Args:
        catalog: Indicator catalog.
        keys: Keys to include (default: every key). Missing keys are skipped.
        points: Keep only the trailing `points` observations before normalizing.

    Returns:
        {"labels": [...], "datasets": [{"key", "label", "data"}, ...]} where
        labels come from the longest included series.
    """
    if points is not None and points < 0:
        raise ValueError(f"points must be non-negative, got {points}")

    selected = [k for k in (keys if keys is not None else catalog) if k in catalog]
    if not selected:
        return {"labels": [], "datasets": []}

    datasets = []
    labels: list[str] = []
    for key in selected:
        record = catalog[key]
        data = _tail(record.data, points)
        record_labels = _tail(record.labels, points)
        if len(record_labels) > len(labels):
            labels = record_labels
        datasets.append({"key": key, "label": record.title, "data": normalize(data)})

    return {"labels": labels, "datasets": datasets}


def _tail(values: Sequence, points: int | None) -> list:
    if points is None:
        return list(values)
    # values[-0:] would be the whole sequence
    return list(values[-points:]) if points else []
