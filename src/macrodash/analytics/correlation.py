"""Direction-matching pseudo-correlation for the indicator heat map.

This is not Pearson correlation. For two series it counts how often both
moved in the same direction between consecutive observations:

    direction_k = +1 if x[k] > x[k-1] else -1      (flat counts as falling)
    ratio       = matches / comparisons,  k = 1 .. min(len_a, len_b) - 1
    value       = |ratio * 2 - 1|

Both series are compared from their first observation. Because of the
absolute value, perfectly inverse and perfectly co-moving series both score
1.0.
"""

from collections.abc import Mapping, Sequence

import pandas as pd

from macrodash.ingestion.schema import IndicatorRecord


def _direction(current: float, previous: float) -> int:
    return 1 if current > previous else -1


def pseudo_correlation(a: Sequence[float], b: Sequence[float]) -> float:
    """Same-direction frequency of two series, rescaled to [0, 1].

    Returns 0.0 when either series is empty or there is nothing to compare.
    """
    if len(a) == 0 or len(b) == 0:
        return 0.0

    length = min(len(a), len(b))
    matching = 0
    total = 0
    for k in range(1, length):
        if _direction(a[k], a[k - 1]) == _direction(b[k], b[k - 1]):
            matching += 1
        total += 1

    if total == 0:
        return 0.0
    return abs(matching / total * 2 - 1)


def correlation_matrix(catalog: Mapping[str, IndicatorRecord]) -> pd.DataFrame:
    """Square matrix of pseudo-correlations, one row/column per catalog key.

    The diagonal is exactly 1.0 regardless of the series contents.
    """
    keys = list(catalog)
    matrix = pd.DataFrame(0.0, index=keys, columns=keys)
    for i, row_key in enumerate(keys):
        for j, col_key in enumerate(keys):
            if i == j:
                matrix.iat[i, j] = 1.0
            else:
                matrix.iat[i, j] = pseudo_correlation(
                    catalog[row_key].data, catalog[col_key].data
                )
    return matrix


def correlation_strength(value: float) -> str:
    """Heat-map band for a matrix value: "high" (>= 0.7), "medium" (>= 0.4) or "low"."""
    if value >= 0.7:
        return "high"
    if value >= 0.4:
        return "medium"
    return "low"
