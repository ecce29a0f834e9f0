"""Unit tests for the World Bank source adapter."""

from datetime import datetime
from unittest.mock import Mock

import pytest
import requests

from macrodash.ingestion.adapters.worldbank_adapter import WorldBankAdapter
from macrodash.shared.exceptions import (
    TransportError,
    UpstreamSchemaError,
    UpstreamStatusError,
)

# ---------------------------------------------------------------------------
# Sample Data
# ---------------------------------------------------------------------------


def _make_response(payload, status: int = 200) -> Mock:
    """Build a mock requests.Response returning `payload` from .json()."""
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=resp)
    else:
        resp.raise_for_status = Mock()
    return resp


SAMPLE_METADATA = {"page": 1, "pages": 1, "per_page": 60, "total": 4}

# Newest first, latest year not yet published
SAMPLE_POINTS = [
    {"date": "2024", "value": None},
    {"date": "2023", "value": 27360935000000.0},
    {"date": "2022", "value": 25744108000000.0},
    {"date": "2021", "value": 23594031000000.0},
]


@pytest.fixture
def adapter(tmp_path):
    adapter = WorldBankAdapter(output_dir=tmp_path)
    adapter._session = Mock()
    return adapter


class TestFetch:
    def test_fetch_drops_nulls_and_sorts(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, SAMPLE_POINTS])

        record = adapter.fetch("gdp")

        assert record.title == "GDP"
        assert record.source == "World Bank"
        assert record.unit == "$"
        assert record.labels == ("2021", "2022", "2023")
        assert record.current_value == 27360935000000.0
        assert record.previous_value == 25744108000000.0

    def test_request_url_and_params(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, SAMPLE_POINTS])

        adapter.fetch("inflation", start_date=datetime(2015, 1, 1), end_date=datetime(2024, 1, 1))

        args, kwargs = adapter._session.get.call_args
        assert args[0] == "https://api.worldbank.org/v2/country/USA/indicator/FP.CPI.TOTL.ZG"
        assert kwargs["params"] == {"format": "json", "per_page": 60, "date": "2015:2024"}

    def test_default_window_and_per_page_override(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, SAMPLE_POINTS])

        adapter.fetch("gdp", end_date=datetime(2024, 1, 1), per_page=100)

        params = adapter._session.get.call_args.kwargs["params"]
        assert params["date"] == "2014:2024"
        assert params["per_page"] == 100

    def test_page_size_covers_long_window(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, SAMPLE_POINTS])

        adapter.fetch("gdp", start_date=datetime(1960, 1, 1), end_date=datetime(2024, 1, 1))

        params = adapter._session.get.call_args.kwargs["params"]
        assert params["date"] == "1960:2024"
        assert params["per_page"] == 65

    def test_follows_additional_pages(self, adapter):
        first = [{"page": 1, "pages": 2, "per_page": 2, "total": 4}, SAMPLE_POINTS[:2]]
        second = [{"page": 2, "pages": 2, "per_page": 2, "total": 4}, SAMPLE_POINTS[2:]]
        adapter._session.get.side_effect = [_make_response(first), _make_response(second)]

        record = adapter.fetch("gdp", end_date=datetime(2024, 1, 1), per_page=2)

        assert adapter._session.get.call_count == 2
        second_params = adapter._session.get.call_args_list[1].kwargs["params"]
        assert second_params["page"] == 2
        assert second_params["date"] == "2014:2024"
        assert record.labels == ("2021", "2022", "2023")

    def test_native_indicator_code(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, SAMPLE_POINTS])

        record = adapter.fetch("SP.POP.TOTL")

        assert adapter._session.get.call_args.args[0].endswith("/indicator/SP.POP.TOTL")
        assert record.title == "World Bank Data"

    def test_error_message(self, adapter):
        payload = [{"message": [{"id": "120", "key": "Invalid value", "value": "The provided parameter value is not valid"}]}]
        adapter._session.get.return_value = _make_response(payload)

        with pytest.raises(UpstreamStatusError, match="not valid"):
            adapter.fetch("gdp")

    def test_missing_data_array(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA])

        with pytest.raises(UpstreamSchemaError, match="No data returned from World Bank API"):
            adapter.fetch("gdp")

    def test_null_data_array(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, None])

        with pytest.raises(UpstreamSchemaError, match="No data returned from World Bank API"):
            adapter.fetch("gdp")

    def test_all_values_null(self, adapter):
        points = [{"date": "2024", "value": None}]
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, points])

        with pytest.raises(UpstreamSchemaError):
            adapter.fetch("gdp")

    def test_not_an_array(self, adapter):
        adapter._session.get.return_value = _make_response({"error": "nope"})

        with pytest.raises(UpstreamSchemaError):
            adapter.fetch("gdp")

    def test_http_error(self, adapter):
        adapter._session.get.return_value = _make_response(None, status=502)

        with pytest.raises(TransportError):
            adapter.fetch("gdp")


class TestHealthCheck:
    def test_success(self, adapter):
        adapter._session.get.return_value = _make_response([SAMPLE_METADATA, SAMPLE_POINTS[:1]])
        assert adapter.health_check() is True

    def test_connection_error(self, adapter):
        adapter._session.get.side_effect = requests.exceptions.ConnectionError()
        assert adapter.health_check() is False
