"""BEA Source Adapter.

Fetches national accounts (NIPA) and international transactions (ITA) data
from the Bureau of Economic Analysis API:

    GET /api/data?UserID=...&method=GetData&datasetname=NIPA&TableName=T10105
        &Frequency=Q&Year=2020,2021,...&ResultFormat=JSON

Response envelope:
    {"BEAAPI": {"Request": {...}, "Results": {"Data": [
        {"LineNumber": "1", "TimePeriod": "2024Q1", "DataValue": "28,269.2",
         "UNIT_MULT": "6", ...}, ...]}}}

Errors are reported inside the envelope as BEAAPI.Error or
BEAAPI.Results.Error ({"APIErrorCode": ..., "APIErrorDescription": ...}).

API: https://apps.bea.gov/api/_pdf/bea_web_service_api_user_guide.pdf
"""

from datetime import datetime
from pathlib import Path

import requests

from macrodash.ingestion.adapters.base_adapter import BaseAdapter
from macrodash.ingestion.periods import parse_provider_period
from macrodash.ingestion.schema import IndicatorRecord, Provider, SeriesDescriptor
from macrodash.shared.config import Config
from macrodash.shared.exceptions import TransportError, UpstreamSchemaError, UpstreamStatusError


class BEAAdapter(BaseAdapter):
    """Adapter for BEA NIPA and ITA tables."""

    SOURCE = Provider.BEA
    DEFAULT_FREQUENCY = "quarterly"
    DEFAULT_WINDOW_YEARS = {"monthly": 2, "quarterly": 5, "annual": 10}

    FREQUENCY_CODES = {"monthly": "M", "quarterly": "Q", "annual": "A"}

    SERIES: dict[str, SeriesDescriptor] = {
        "gdp": SeriesDescriptor(
            "GDP",
            "GDP (BEA)",
            "quarterly",
            "$ Billion",
            dataset="NIPA",
            table="T10105",
            line_number="1",
        ),
        "gdpGrowth": SeriesDescriptor(
            "GDP_PCT_CHG",
            "Real GDP Growth (BEA)",
            "quarterly",
            "%",
            dataset="NIPA",
            table="T10101",
            line_number="1",
        ),
        "tradeBalance": SeriesDescriptor(
            "TRADE",
            "Trade Balance (BEA)",
            "quarterly",
            "$ Billion",
            dataset="ITA",
            params=(
                ("Indicator", "BalGdsServ"),
                ("AreaOrCountry", "AllCountries"),
                ("Frequency", "QSA"),
            ),
        ),
    }

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
        output_dir: Path | None = None,
        log_file: Path | None = None,
    ) -> None:
        super().__init__(output_dir=output_dir, log_file=log_file)
        self._api_key = api_key or Config.BEA_API_KEY or ""
        if not self._api_key:
            self.logger.warning("BEA_API_KEY is not set; requests will be rejected by BEA")
        self.base_url = base_url or Config.BEA_BASE_URL
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self._session = requests.Session()
        self.logger.info("BEAAdapter initialized, base_url=%s", self.base_url)

    # ------------------------------------------------------------------
    # BaseAdapter interface
    # ------------------------------------------------------------------

    def fetch(
        self,
        series: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        **options,
    ) -> IndicatorRecord:
        """Fetch a BEA table line and normalize it.

        Args:
            series: Name from SERIES ("gdp", "gdpGrowth", "tradeBalance").
            start_date: First year of the window (default depends on frequency).
            end_date: Last year of the window (default: current year).

        Returns:
            IndicatorRecord with "YYYY Q#" / "Mon YYYY" / "YYYY" labels.
        """
        descriptor = self.describe(series)
        params = self._build_params(descriptor, start_date, end_date)
        self.logger.info(
            "Fetching BEA %s/%s for years %s",
            descriptor.dataset,
            descriptor.table or descriptor.id,
            params["Year"],
        )

        payload = self._get(params)
        rows = self._extract_rows(payload)

        if descriptor.line_number is not None:
            rows = [r for r in rows if str(r.get("LineNumber")) == descriptor.line_number]

        pairs = [
            (parse_provider_period(row.get("TimePeriod", "")), self._row_value(row, descriptor))
            for row in rows
        ]
        return self.build_record(descriptor, pairs)

    def health_check(self) -> bool:
        """Check BEA API availability by listing datasets."""
        try:
            response = self._session.get(
                self.base_url,
                params={"UserID": self._api_key, "method": "GetDataSetList", "ResultFormat": "JSON"},
                timeout=10,
            )
            return response.ok and "Error" not in response.json().get("BEAAPI", {})
        except (requests.exceptions.RequestException, ValueError):
            return False

    # ------------------------------------------------------------------
    # Private: request/response handling
    # ------------------------------------------------------------------

    def _build_params(
        self,
        descriptor: SeriesDescriptor,
        start_date: datetime | None,
        end_date: datetime | None,
    ) -> dict[str, str]:
        end_year = (end_date or datetime.now()).year
        if start_date is not None:
            start_year = start_date.year
        else:
            start_year = end_year - self.DEFAULT_WINDOW_YEARS.get(descriptor.frequency, 5)
        if start_year > end_year:
            raise ValueError(f"start year ({start_year}) must not be after end year ({end_year})")

        params = {
            "UserID": self._api_key,
            "method": "GetData",
            "datasetname": descriptor.dataset or "NIPA",
            "Frequency": self.FREQUENCY_CODES.get(descriptor.frequency, "Q"),
            "Year": ",".join(str(y) for y in range(start_year, end_year + 1)),
            "ResultFormat": "JSON",
        }
        if descriptor.table:
            params["TableName"] = descriptor.table
        params.update(dict(descriptor.params))
        return params

    def _get(self, params: dict[str, str]) -> dict:
        try:
            response = self._session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error("BEA request failed: %s", e)
            raise TransportError(self.SOURCE.value, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamSchemaError(self.SOURCE.value, f"Response is not JSON: {e}") from e

    def _extract_rows(self, payload: dict) -> list[dict]:
        envelope = payload.get("BEAAPI") if isinstance(payload, dict) else None
        if not isinstance(envelope, dict):
            raise UpstreamSchemaError(self.SOURCE.value, "Response is missing BEAAPI envelope")

        results = envelope.get("Results")
        if isinstance(results, list):
            results = results[0] if results else None

        error = envelope.get("Error") or (results or {}).get("Error")
        if error:
            message = self._error_message(error)
            self.logger.error("BEA API error: %s", message)
            raise UpstreamStatusError(self.SOURCE.value, message)

        if not isinstance(results, dict) or not isinstance(results.get("Data"), list):
            raise UpstreamSchemaError(self.SOURCE.value, "Response is missing BEAAPI.Results.Data")
        return results["Data"]

    @staticmethod
    def _error_message(error) -> str:
        if isinstance(error, list):
            error = error[0] if error else {}
        if isinstance(error, dict):
            detail = error.get("ErrorDetail") or {}
            return (
                error.get("APIErrorDescription")
                or (detail.get("Description") if isinstance(detail, dict) else None)
                or "Unknown error"
            )
        return str(error)

    @staticmethod
    def _row_value(row: dict, descriptor: SeriesDescriptor) -> float:
        """Parse DataValue, rescaling dollar amounts to billions via UNIT_MULT."""
        raw = str(row.get("DataValue", "")).replace(",", "").strip()
        try:
            value = float(raw)
        except ValueError:
            return 0.0

        if descriptor.unit == "$ Billion" and row.get("UNIT_MULT") not in (None, ""):
            try:
                value = value * 10 ** int(row["UNIT_MULT"]) / 1e9
            except (TypeError, ValueError):
                pass
        return value
