"""Tests for the macrodash command."""

from datetime import datetime
from unittest.mock import Mock

import pytest

from macrodash import cli
from macrodash.ingestion.aggregator import Aggregator, default_keys
from macrodash.ingestion.schema import IndicatorRecord, Provider
from macrodash.shared.exceptions import NoDataAvailableError, TransportError


def _catalog() -> dict[str, IndicatorRecord]:
    return {
        "fred:unemployment": IndicatorRecord.from_observations(
            "Unemployment Rate", Provider.FRED, "%", ["Jan 2024", "Feb 2024", "Mar 2024"], [3.7, 3.9, 4.1]
        ),
        "bls:cpi": IndicatorRecord.from_observations(
            "Consumer Price Index", Provider.BLS, "Index", ["Jan 2024", "Feb 2024", "Mar 2024"], [308.4, 310.3, 312.3]
        ),
    }


@pytest.fixture
def aggregator():
    aggregator = Mock(spec=Aggregator)
    aggregator.collect.return_value = _catalog()
    aggregator.last_errors = {}
    return aggregator


class TestParseArgs:
    def test_defaults(self):
        args = cli.parse_args([])
        assert args.keys is None
        assert args.forecast == 0
        assert not args.export
        assert not args.correlation
        assert not args.health_check

    def test_keys_and_flags(self):
        args = cli.parse_args(["--keys", "fred:gdp", "bls:cpi", "--forecast", "3", "--correlation", "-v"])
        assert args.keys == ["fred:gdp", "bls:cpi"]
        assert args.forecast == 3
        assert args.correlation
        assert args.verbose


class TestMain:
    def test_collects_default_keys(self, aggregator):
        assert cli.main([], aggregator=aggregator) == 0

        aggregator.collect.assert_called_once_with(default_keys(), start_date=None, end_date=None)

    def test_passes_keys_and_dates(self, aggregator):
        argv = ["--keys", "fred:unemployment", "--start", "2020-01-01", "--end", "2024-12-31"]

        assert cli.main(argv, aggregator=aggregator) == 0

        aggregator.collect.assert_called_once_with(
            ["fred:unemployment"],
            start_date=datetime(2020, 1, 1),
            end_date=datetime(2024, 12, 31),
        )

    def test_invalid_date(self, aggregator):
        assert cli.main(["--start", "01/01/2020"], aggregator=aggregator) == 1
        aggregator.collect.assert_not_called()

    def test_start_after_end(self, aggregator):
        assert cli.main(["--start", "2025-01-01", "--end", "2024-01-01"], aggregator=aggregator) == 1
        aggregator.collect.assert_not_called()

    def test_invalid_key(self, aggregator):
        aggregator.collect.side_effect = ValueError("Invalid indicator key 'nonsense'")
        assert cli.main(["--keys", "nonsense"], aggregator=aggregator) == 1

    def test_no_data(self, aggregator):
        aggregator.collect.side_effect = NoDataAvailableError(
            ["fred:gdp"], {"fred:gdp": TransportError("FRED", "down")}
        )
        assert cli.main(["--keys", "fred:gdp"], aggregator=aggregator) == 1

    def test_partial_failure_still_succeeds(self, aggregator):
        aggregator.last_errors = {"bea:gdp": TransportError("BEA", "down")}
        assert cli.main([], aggregator=aggregator) == 0

    def test_export(self, aggregator):
        adapter = Mock()
        aggregator.adapter_for.return_value = adapter

        assert cli.main(["--export"], aggregator=aggregator) == 0

        aggregator.adapter_for.assert_any_call(Provider.FRED)
        aggregator.adapter_for.assert_any_call(Provider.BLS)
        assert adapter.export_csv.call_count == 2
        exported = [c.args[1] for c in adapter.export_csv.call_args_list]
        assert exported == ["unemployment", "cpi"]

    def test_forecast_and_correlation(self, aggregator):
        assert cli.main(["--forecast", "3", "--correlation"], aggregator=aggregator) == 0

    def test_health_check(self, aggregator):
        healthy = Mock()
        healthy.health_check.return_value = True
        aggregator.adapter_for.return_value = healthy

        assert cli.main(["--health-check"], aggregator=aggregator) == 0
        assert healthy.health_check.call_count == len(Provider)
        aggregator.collect.assert_not_called()

    def test_health_check_failure(self, aggregator):
        unhealthy = Mock()
        unhealthy.health_check.return_value = False
        aggregator.adapter_for.return_value = unhealthy

        assert cli.main(["--health-check"], aggregator=aggregator) == 1
