"""Ingestion package: provider adapters, indicator schema and the aggregator."""

from macrodash.ingestion.aggregator import Aggregator, default_keys, make_key, resolve_key
from macrodash.ingestion.schema import IndicatorRecord, Provider, SeriesDescriptor

__all__ = [
    "Aggregator",
    "IndicatorRecord",
    "Provider",
    "SeriesDescriptor",
    "default_keys",
    "make_key",
    "resolve_key",
]
