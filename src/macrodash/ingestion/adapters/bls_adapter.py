"""BLS Source Adapter.

Fetches labor-market and price series from the Bureau of Labor Statistics
Public Data API v2:

    POST /publicAPI/v2/timeseries/data/
    {"seriesid": ["LNS14000000"], "startyear": "2023", "endyear": "2025",
     "registrationkey": "..."}

Response:
    {"status": "REQUEST_SUCCEEDED", "message": [],
     "Results": {"series": [{"seriesID": "...", "data": [
         {"year": "2025", "period": "M03", "periodName": "March", "value": "4.2"}, ...]}]}}

BLS returns newest observations first; the adapter re-sorts ascending.
Period "M13" (annual average) is not a month and is skipped.

API: https://www.bls.gov/developers/api_signature_v2.htm
"""

from datetime import datetime
from pathlib import Path

import requests

from macrodash.ingestion.adapters.base_adapter import BaseAdapter
from macrodash.ingestion.periods import month_label
from macrodash.ingestion.schema import IndicatorRecord, Provider, SeriesDescriptor
from macrodash.shared.config import Config
from macrodash.shared.exceptions import TransportError, UpstreamSchemaError, UpstreamStatusError


class BLSAdapter(BaseAdapter):
    """Adapter for BLS time series."""

    SOURCE = Provider.BLS
    SUCCESS_STATUS = "REQUEST_SUCCEEDED"
    DEFAULT_WINDOW_YEARS = 2

    SERIES: dict[str, SeriesDescriptor] = {
        "unemployment": SeriesDescriptor("LNS14000000", "Unemployment Rate", "monthly", "%"),
        "cpi": SeriesDescriptor("CUUR0000SA0", "Consumer Price Index", "monthly", "Index"),
        "payroll": SeriesDescriptor("CES0000000001", "Nonfarm Payroll", "monthly", "Thousands"),
        "wages": SeriesDescriptor("CES0500000003", "Average Hourly Earnings", "monthly", "$"),
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
        self._api_key = api_key or Config.BLS_API_KEY or ""
        if not self._api_key:
            self.logger.warning("BLS_API_KEY is not set; using unregistered v2 limits")
        self.base_url = base_url or Config.BLS_BASE_URL
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self._session = requests.Session()
        self.logger.info("BLSAdapter initialized, base_url=%s", self.base_url)

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
        """Fetch a BLS series and normalize it.

        Args:
            series: Name from SERIES ("unemployment", "cpi", ...) or a BLS series id.
            start_date: First year of the window (default: end year - 2).
            end_date: Last year of the window (default: current year).

        Returns:
            IndicatorRecord with "Mon YYYY" labels.
        """
        descriptor = self.describe(series)
        end_year = (end_date or datetime.now()).year
        start_year = start_date.year if start_date else end_year - self.DEFAULT_WINDOW_YEARS
        if start_year > end_year:
            raise ValueError(f"start year ({start_year}) must not be after end year ({end_year})")

        body = {
            "seriesid": [descriptor.id],
            "startyear": str(start_year),
            "endyear": str(end_year),
        }
        if self._api_key:
            body["registrationkey"] = self._api_key

        self.logger.info("Fetching BLS %s for %d-%d", descriptor.id, start_year, end_year)
        payload = self._post(body)

        if payload.get("status") != self.SUCCESS_STATUS:
            message = self._error_message(payload.get("message"))
            self.logger.error("BLS API error for %s: %s", descriptor.id, message)
            raise UpstreamStatusError(self.SOURCE.value, message)

        points = self._extract_points(payload)
        pairs = []
        for point in points:
            period = str(point.get("period", ""))
            if not period.startswith("M") or period == "M13":
                continue
            try:
                label = month_label(point["year"], period[1:])
            except (KeyError, TypeError, ValueError):
                self.logger.warning("Skipping malformed BLS period %r for %s", point, descriptor.id)
                continue
            pairs.append((label, point.get("value")))

        return self.build_record(descriptor, pairs)

    def health_check(self) -> bool:
        """Check BLS API availability with a one-year unemployment request."""
        year = str(datetime.now().year)
        try:
            response = self._session.post(
                self.base_url,
                json={"seriesid": [self.SERIES["unemployment"].id], "startyear": year, "endyear": year},
                timeout=10,
            )
            return response.ok and response.json().get("status") == self.SUCCESS_STATUS
        except (requests.exceptions.RequestException, ValueError):
            return False

    # ------------------------------------------------------------------
    # Private: request/response handling
    # ------------------------------------------------------------------

    def _post(self, body: dict) -> dict:
        try:
            response = self._session.post(self.base_url, json=body, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error("BLS request failed: %s", e)
            raise TransportError(self.SOURCE.value, str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamSchemaError(self.SOURCE.value, f"Response is not JSON: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamSchemaError(self.SOURCE.value, "Response is not a JSON object")
        return payload

    def _extract_points(self, payload: dict) -> list[dict]:
        results = payload.get("Results")
        series = results.get("series") if isinstance(results, dict) else None
        if not isinstance(series, list) or not series:
            raise UpstreamSchemaError(self.SOURCE.value, "Response is missing Results.series")

        data = series[0].get("data") if isinstance(series[0], dict) else None
        if not isinstance(data, list):
            raise UpstreamSchemaError(self.SOURCE.value, "Response is missing Results.series[0].data")
        return data

    @staticmethod
    def _error_message(message) -> str:
        if isinstance(message, list):
            return "; ".join(str(m) for m in message) or "Unknown error"
        return str(message) if message else "Unknown error"
