"""Unit tests for the indicator aggregator."""

import asyncio
import threading
from datetime import datetime
from unittest.mock import Mock

import pytest

from macrodash.ingestion.adapters import ADAPTER_CLASSES, BaseAdapter
from macrodash.ingestion.aggregator import Aggregator, default_keys, make_key, resolve_key
from macrodash.ingestion.schema import IndicatorRecord, Provider
from macrodash.shared.exceptions import (
    NoDataAvailableError,
    TransportError,
    UpstreamStatusError,
)


def _record(title: str, provider: Provider, data) -> IndicatorRecord:
    labels = [f"{2020 + i}" for i in range(len(data))]
    return IndicatorRecord.from_observations(title, provider, "%", labels, data)


def _fake_adapter(provider: Provider, fetch=None) -> Mock:
    """Adapter double whose fetch returns a record titled after the series."""
    adapter = Mock(spec=BaseAdapter)
    adapter.SOURCE = provider

    def default_fetch(series, start_date=None, end_date=None, **options):
        return _record(series, provider, [1.0, 2.0])

    adapter.fetch.side_effect = fetch or default_fetch
    return adapter


def _failing(provider: Provider, error: Exception) -> Mock:
    def fetch(series, start_date=None, end_date=None, **options):
        raise error

    return _fake_adapter(provider, fetch)


@pytest.fixture
def healthy_adapters():
    return {provider: _fake_adapter(provider) for provider in Provider}


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestKeys:
    def test_resolve_key(self):
        assert resolve_key("fred:unemployment") == (Provider.FRED, "unemployment")
        assert resolve_key("worldbank:NY.GDP.MKTP.CD") == (Provider.WORLD_BANK, "NY.GDP.MKTP.CD")

    def test_resolve_key_case_insensitive_prefix(self):
        assert resolve_key("BLS:cpi") == (Provider.BLS, "cpi")

    @pytest.mark.parametrize("key", ["unemployment", "fred:", ":gdp", ""])
    def test_malformed_key(self, key):
        with pytest.raises(ValueError, match="Invalid indicator key|Unknown provider"):
            resolve_key(key)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider 'imf'"):
            resolve_key("imf:gdp")

    def test_make_key_round_trip(self):
        assert make_key(Provider.WORLD_BANK, "gdp") == "worldbank:gdp"
        assert resolve_key(make_key(Provider.BEA, "gdp")) == (Provider.BEA, "gdp")

    def test_default_keys_cover_every_named_series(self):
        keys = default_keys()
        expected = sum(len(cls.SERIES) for cls in ADAPTER_CLASSES.values())
        assert len(keys) == expected
        assert "fred:unemployment" in keys
        assert "bls:payroll" in keys
        assert "bea:tradeBalance" in keys
        assert "worldbank:fdi" in keys


# ---------------------------------------------------------------------------
# fetch_many / collect
# ---------------------------------------------------------------------------


class TestCollect:
    def test_all_succeed(self, healthy_adapters):
        aggregator = Aggregator(adapters=healthy_adapters)
        keys = ["fred:unemployment", "bls:cpi", "worldbank:gdp"]

        catalog = aggregator.collect(keys)

        assert list(catalog) == keys
        assert catalog["bls:cpi"].title == "cpi"
        assert catalog["bls:cpi"].source == "BLS"
        assert aggregator.last_errors == {}

    def test_passes_window_to_adapters(self, healthy_adapters):
        start, end = datetime(2020, 1, 1), datetime(2024, 12, 31)

        Aggregator(adapters=healthy_adapters).collect(["fred:gdp"], start_date=start, end_date=end)

        healthy_adapters[Provider.FRED].fetch.assert_called_once_with("gdp", start, end)

    def test_failing_provider_is_omitted(self, healthy_adapters):
        healthy_adapters[Provider.BLS] = _failing(
            Provider.BLS, UpstreamStatusError("BLS", "Daily threshold exceeded")
        )
        aggregator = Aggregator(adapters=healthy_adapters)
        keys = ["fred:unemployment", "bls:cpi", "bls:payroll", "worldbank:gdp"]

        catalog = aggregator.collect(keys)

        assert set(catalog) == {"fred:unemployment", "worldbank:gdp"}
        assert set(aggregator.last_errors) == {"bls:cpi", "bls:payroll"}
        assert isinstance(aggregator.last_errors["bls:cpi"], UpstreamStatusError)

    def test_partial_failure_within_provider(self, healthy_adapters):
        def fetch(series, start_date=None, end_date=None, **options):
            if series == "gdp":
                raise TransportError("FRED", "timed out")
            return _record(series, Provider.FRED, [1.0])

        healthy_adapters[Provider.FRED] = _fake_adapter(Provider.FRED, fetch)
        aggregator = Aggregator(adapters=healthy_adapters)

        catalog = aggregator.collect(["fred:gdp", "fred:unemployment"])

        assert list(catalog) == ["fred:unemployment"]
        assert list(aggregator.last_errors) == ["fred:gdp"]

    def test_unexpected_exception_is_isolated(self, healthy_adapters):
        healthy_adapters[Provider.BEA] = _failing(Provider.BEA, KeyError("Data"))
        aggregator = Aggregator(adapters=healthy_adapters)

        catalog = aggregator.collect(["bea:gdp", "fred:gdp"])

        assert list(catalog) == ["fred:gdp"]
        assert isinstance(aggregator.last_errors["bea:gdp"], KeyError)

    def test_all_fail_raises_no_data(self):
        adapters = {
            provider: _failing(provider, TransportError(provider.value, "down"))
            for provider in Provider
        }
        aggregator = Aggregator(adapters=adapters)
        keys = ["fred:gdp", "bls:cpi"]

        with pytest.raises(NoDataAvailableError) as exc_info:
            aggregator.collect(keys)

        assert exc_info.value.keys == keys
        assert set(exc_info.value.errors) == set(keys)

    def test_empty_keys_returns_empty_catalog(self, healthy_adapters):
        assert Aggregator(adapters=healthy_adapters).collect([]) == {}

    def test_duplicate_keys_fetched_once(self, healthy_adapters):
        catalog = Aggregator(adapters=healthy_adapters).collect(["fred:gdp", "fred:gdp"])

        assert list(catalog) == ["fred:gdp"]
        healthy_adapters[Provider.FRED].fetch.assert_called_once()

    def test_malformed_key_raises_before_any_request(self, healthy_adapters):
        aggregator = Aggregator(adapters=healthy_adapters)

        with pytest.raises(ValueError):
            aggregator.collect(["fred:gdp", "nonsense"])

        healthy_adapters[Provider.FRED].fetch.assert_not_called()

    def test_default_keys_used_when_none(self, healthy_adapters):
        catalog = Aggregator(adapters=healthy_adapters).collect()

        assert list(catalog) == default_keys()

    def test_calls_run_concurrently(self):
        """Every call must be in flight before any one of them completes."""
        keys = ["fred:gdp", "bea:gdp", "bls:cpi", "worldbank:gdp"]
        barrier = threading.Barrier(len(keys), timeout=5)

        def fetch(series, start_date=None, end_date=None, **options):
            barrier.wait()
            return _record(series, Provider.FRED, [1.0])

        adapters = {provider: _fake_adapter(provider, fetch) for provider in Provider}

        catalog = Aggregator(adapters=adapters).collect(keys)

        assert list(catalog) == keys

    def test_large_batch_runs_fully_in_parallel(self):
        # More keys than the default executor allows workers (min(32, cpu + 4))
        keys = [f"fred:SERIES{i}" for i in range(40)]
        barrier = threading.Barrier(len(keys), timeout=5)

        def fetch(series, start_date=None, end_date=None, **options):
            barrier.wait()
            return _record(series, Provider.FRED, [1.0])

        adapters = {Provider.FRED: _fake_adapter(Provider.FRED, fetch)}

        catalog = Aggregator(adapters=adapters).collect(keys)

        assert list(catalog) == keys
        assert not barrier.broken

    def test_fetch_many_is_awaitable(self, healthy_adapters):
        aggregator = Aggregator(adapters=healthy_adapters)

        catalog = asyncio.run(aggregator.fetch_many(["worldbank:gdp"]))

        assert catalog["worldbank:gdp"].source == "World Bank"

    def test_records_are_untouched(self, healthy_adapters):
        record = _record("Unemployment Rate", Provider.FRED, [3.7, 4.1])
        healthy_adapters[Provider.FRED].fetch.side_effect = None
        healthy_adapters[Provider.FRED].fetch.return_value = record

        catalog = Aggregator(adapters=healthy_adapters).collect(["fred:unemployment"])

        assert catalog["fred:unemployment"] is record


class TestAdapterFor:
    def test_lazily_constructs_missing_adapter(self, monkeypatch):
        constructed = Mock(return_value=_fake_adapter(Provider.BLS))
        monkeypatch.setitem(ADAPTER_CLASSES, Provider.BLS, constructed)
        aggregator = Aggregator()

        first = aggregator.adapter_for(Provider.BLS)
        second = aggregator.adapter_for(Provider.BLS)

        assert first is second
        constructed.assert_called_once_with()
