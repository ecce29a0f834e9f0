"""World Bank Source Adapter.

Fetches annual US indicators from the World Bank Indicators API v2. No API
key is required.

    GET /v2/country/USA/indicator/NY.GDP.MKTP.CD?format=json&per_page=60&date=2015:2025

Response is a two-element array:
    [{"page": 1, "pages": 1, "per_page": 60, "total": 11, ...},
     [{"indicator": {...}, "date": "2024", "value": 29184890000000.0, ...}, ...]]

Errors come back as a one-element array:
    [{"message": [{"id": "120", "key": "Invalid value", "value": "..."}]}]

Observations with a null value (years not yet published) are dropped. The
page size covers the whole year window; any further pages reported in the
metadata are fetched and appended.

API: https://datahelpdesk.worldbank.org/knowledgebase/articles/898581
"""

from datetime import datetime
from pathlib import Path

import requests

from macrodash.ingestion.adapters.base_adapter import BaseAdapter
from macrodash.ingestion.schema import IndicatorRecord, Provider, SeriesDescriptor
from macrodash.shared.config import Config
from macrodash.shared.exceptions import TransportError, UpstreamSchemaError, UpstreamStatusError


class WorldBankAdapter(BaseAdapter):
    """Adapter for World Bank country indicators (United States only)."""

    SOURCE = Provider.WORLD_BANK
    DEFAULT_FREQUENCY = "annual"
    COUNTRY_CODE = "USA"
    DEFAULT_WINDOW_YEARS = 10
    DEFAULT_PER_PAGE = 60

    SERIES: dict[str, SeriesDescriptor] = {
        "gdp": SeriesDescriptor("NY.GDP.MKTP.CD", "GDP", "annual", "$"),
        "gdpGrowth": SeriesDescriptor("NY.GDP.MKTP.KD.ZG", "GDP Growth Rate", "annual", "%"),
        "inflation": SeriesDescriptor("FP.CPI.TOTL.ZG", "Inflation Rate", "annual", "%"),
        "unemployment": SeriesDescriptor("SL.UEM.TOTL.ZS", "Unemployment Rate", "annual", "%"),
        "exports": SeriesDescriptor("NE.EXP.GNFS.ZS", "Exports (% of GDP)", "annual", "%"),
        "imports": SeriesDescriptor("NE.IMP.GNFS.ZS", "Imports (% of GDP)", "annual", "%"),
        "manufacturing": SeriesDescriptor(
            "NV.IND.MANF.ZS", "Manufacturing (% of GDP)", "annual", "%"
        ),
        "fdi": SeriesDescriptor("BX.KLT.DINV.WD.GD.ZS", "Foreign Direct Investment", "annual", "%"),
    }

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        output_dir: Path | None = None,
        log_file: Path | None = None,
    ) -> None:
        super().__init__(output_dir=output_dir, log_file=log_file)
        self.base_url = (base_url or Config.WORLD_BANK_BASE_URL).rstrip("/")
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self._session = requests.Session()
        self.logger.info("WorldBankAdapter initialized, base_url=%s", self.base_url)

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
        """Fetch a World Bank indicator for the United States.

        Args:
            series: Name from SERIES ("gdp", "inflation", ...) or an indicator code.
            start_date: First year (default: end year - 10).
            end_date: Last year (default: current year).
            **options: ``per_page`` overrides the page size (default: the larger
                of 60 and the number of years in the window).

        Returns:
            IndicatorRecord with "YYYY" labels.
        """
        descriptor = self.describe(series)
        end_year = (end_date or datetime.now()).year
        start_year = start_date.year if start_date else end_year - self.DEFAULT_WINDOW_YEARS
        if start_year > end_year:
            raise ValueError(f"start year ({start_year}) must not be after end year ({end_year})")

        params = {
            "format": "json",
            "per_page": options.get("per_page")
            or max(self.DEFAULT_PER_PAGE, end_year - start_year + 1),
            "date": f"{start_year}:{end_year}",
        }
        url = self._indicator_url(descriptor.id)
        self.logger.info("Fetching World Bank %s for %s", descriptor.id, params["date"])

        payload = self._get(url, params)
        points = list(self._extract_points(payload))

        pages = self._page_count(payload)
        for page in range(2, pages + 1):
            self.logger.debug("Fetching World Bank %s page %d/%d", descriptor.id, page, pages)
            points.extend(self._extract_points(self._get(url, {**params, "page": page})))

        pairs = [
            (str(point.get("date", "")), point["value"])
            for point in points
            if point.get("value") is not None
        ]
        return self.build_record(descriptor, pairs)

    def health_check(self) -> bool:
        """Check World Bank API availability with a single-row request."""
        try:
            response = self._session.get(
                self._indicator_url(self.SERIES["gdp"].id),
                params={"format": "json", "per_page": 1},
                timeout=10,
            )
            return response.ok
        except requests.exceptions.RequestException:
            return False

    # ------------------------------------------------------------------
    # Private: request/response handling
    # ------------------------------------------------------------------

    def _indicator_url(self, code: str) -> str:
        return f"{self.base_url}/country/{self.COUNTRY_CODE}/indicator/{code}"

    def _get(self, url: str, params: dict):
        self.logger.debug("GET %s", url)
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error("World Bank request failed: %s", e)
            raise TransportError(self.SOURCE.value, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamSchemaError(self.SOURCE.value, f"Response is not JSON: {e}") from e

    def _extract_points(self, payload) -> list[dict]:
        if not isinstance(payload, list) or not payload:
            raise UpstreamSchemaError(self.SOURCE.value, "Response is not a [metadata, data] array")

        metadata = payload[0]
        if isinstance(metadata, dict) and "message" in metadata:
            message = self._error_message(metadata["message"])
            self.logger.error("World Bank API error: %s", message)
            raise UpstreamStatusError(self.SOURCE.value, message)

        if len(payload) < 2 or not isinstance(payload[1], list):
            raise UpstreamSchemaError(self.SOURCE.value, "No data returned from World Bank API")
        return payload[1]

    @staticmethod
    def _page_count(payload) -> int:
        try:
            return int(payload[0].get("pages") or 1)
        except (AttributeError, TypeError, ValueError):
            return 1

    @staticmethod
    def _error_message(messages) -> str:
        if isinstance(messages, list):
            parts = [
                (m.get("value") or m.get("key") or str(m)) if isinstance(m, dict) else str(m)
                for m in messages
            ]
            return "; ".join(parts) or "Unknown error"
        return str(messages)
