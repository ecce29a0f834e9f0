"""FRED Source Adapter.

Fetches US macroeconomic series from the St. Louis Fed FRED API through the
fredapi package:
    - /fred/series (metadata) via Fred.get_series_info
    - /fred/series/observations (values) via Fred.get_series

Missing observations (FRED's "." placeholder) arrive as NaN and are coerced
to 0.0 so the record stays numeric.

API Documentation: https://fred.stlouisfed.org/docs/api/
Get API Key: https://fred.stlouisfed.org/docs/api/api_key.html

Example:
    >>> from macrodash.ingestion.adapters.fred_adapter import FREDAdapter
    >>>
    >>> adapter = FREDAdapter()
    >>> record = adapter.fetch("unemployment")
    >>> record.current_value, record.change
"""

from datetime import datetime, timedelta
from pathlib import Path

from fredapi import Fred

from macrodash.ingestion.adapters.base_adapter import BaseAdapter
from macrodash.ingestion.periods import label_for_date
from macrodash.ingestion.schema import IndicatorRecord, Provider, SeriesDescriptor
from macrodash.shared.config import Config
from macrodash.shared.exceptions import TransportError, UpstreamStatusError


class FREDAdapter(BaseAdapter):
    """Adapter for FRED series.

    Titles and units come from SERIES; FRED metadata is consulted only for
    native series ids that have no table entry.
    """

    SOURCE = Provider.FRED
    DEFAULT_WINDOW_DAYS = 730  # 2 years

    # FRED `frequency` query values
    FREQUENCY_CODES = {
        "daily": "d",
        "weekly": "w",
        "monthly": "m",
        "quarterly": "q",
        "annual": "a",
    }

    # FRED metadata `frequency_short` → frequency name
    _SHORT_FREQUENCIES = {
        "D": "daily",
        "W": "weekly",
        "M": "monthly",
        "Q": "quarterly",
        "A": "annual",
    }

    # FRED `units` strings → display units
    _UNIT_ALIASES = {
        "percent": "%",
        "billions of dollars": "$ Billion",
        "dollars": "$",
        "thousands of persons": "Thousands",
        "index": "Index",
    }

    SERIES: dict[str, SeriesDescriptor] = {
        "gdp": SeriesDescriptor("GDP", "Gross Domestic Product", "quarterly", "$ Billion"),
        "gdpGrowth": SeriesDescriptor(
            "A191RL1Q225SBEA", "Real GDP Growth Rate", "quarterly", "%"
        ),
        "unemployment": SeriesDescriptor("UNRATE", "Unemployment Rate", "monthly", "%"),
        "inflation": SeriesDescriptor("CPIAUCSL", "Consumer Price Index", "monthly", "Index"),
        "inflationRate": SeriesDescriptor(
            "CPIAUCSL",
            "Inflation Rate (CPI, YoY Change)",
            "monthly",
            "%",
            params=(("units", "pc1"),),
        ),
        "federalFundsRate": SeriesDescriptor("FEDFUNDS", "Federal Funds Rate", "monthly", "%"),
        "sp500": SeriesDescriptor("SP500", "S&P 500 Index", "monthly", "Index"),
        "housing": SeriesDescriptor("MSPUS", "Median Sales Price of Houses", "quarterly", "$"),
        "tradeBalance": SeriesDescriptor(
            "BOPGSTB", "Trade Balance of Goods and Services", "monthly", "$"
        ),
        "manufacturing": SeriesDescriptor(
            "IPMAN", "Industrial Production: Manufacturing", "monthly", "Index"
        ),
    }

    def __init__(
        self,
        api_key: str | None = None,
        output_dir: Path | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the FRED adapter.

        Args:
            api_key: FRED API key (defaults to Config.FRED_API_KEY). A missing
                key is not rejected here; FRED answers with an error message.
            output_dir: Directory for CSV exports.
            log_file: Optional path for file-based logging.
        """
        super().__init__(output_dir=output_dir, log_file=log_file)

        self._api_key = api_key or Config.FRED_API_KEY or ""
        if not self._api_key:
            self.logger.warning("FRED_API_KEY is not set; requests will be rejected by FRED")

        self._fred = Fred(api_key=self._api_key)
        self.logger.info("FREDAdapter initialized")

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
        """Fetch a FRED series and normalize it.

        Args:
            series: Name from SERIES (e.g. "unemployment") or a FRED id ("PAYEMS").
            start_date: Start of range (default: 2 years before end_date).
            end_date: End of range (default: today).
            **options: ``frequency`` overrides the descriptor frequency
                ("monthly", "quarterly", ...). Native ids default to the
                frequency reported in the series metadata.

        Returns:
            IndicatorRecord with labels formatted for the series frequency.
        """
        descriptor = self.describe(series)
        end = end_date or datetime.now()
        start = start_date or end - timedelta(days=self.DEFAULT_WINDOW_DAYS)
        if start > end:
            raise ValueError(f"start_date ({start.date()}) must be before end_date ({end.date()})")

        self.logger.info(
            "Fetching FRED %s from %s to %s", descriptor.id, start.date(), end.date()
        )

        info = self._call(descriptor.id, self._fred.get_series_info, descriptor.id)
        native = series not in self.SERIES and descriptor.id not in self._table_ids()

        frequency = options.get("frequency")
        if not frequency:
            # Native ids keep the frequency FRED publishes them at
            frequency = self._native_frequency(info) if native else descriptor.frequency

        query = dict(descriptor.params)
        if frequency in self.FREQUENCY_CODES:
            query["frequency"] = self.FREQUENCY_CODES[frequency]

        observations = self._call(
            descriptor.id,
            self._fred.get_series,
            descriptor.id,
            observation_start=start.strftime("%Y-%m-%d"),
            observation_end=end.strftime("%Y-%m-%d"),
            **query,
        )

        title = None
        unit = None
        if native:
            title = info.get("title") or descriptor.title
            unit = self._display_unit(info.get("units", ""))

        pairs = [
            (label_for_date(date, frequency), value) for date, value in observations.items()
        ]
        return self.build_record(descriptor, pairs, title=title, unit=unit)

    def health_check(self) -> bool:
        """Verify FRED API is reachable."""
        try:
            self._fred.get_series_info("GDP")
            return True
        except Exception as e:
            self.logger.error("FRED health check failed: %s", e)
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _call(self, series_id: str, method, *args, **kwargs):
        """Invoke a fredapi method, mapping its errors to UpstreamError."""
        try:
            return method(*args, **kwargs)
        except ValueError as e:
            # fredapi surfaces FRED's own error message as ValueError
            self.logger.error("FRED rejected series '%s': %s", series_id, e)
            raise UpstreamStatusError(self.SOURCE.value, str(e)) from e
        except OSError as e:
            self.logger.error("Failed to reach FRED for '%s': %s", series_id, e)
            raise TransportError(self.SOURCE.value, str(e)) from e

    def _native_frequency(self, info) -> str | None:
        """Map FRED's frequency_short ("M", "Q", ...) to a frequency name."""
        code = str(info.get("frequency_short") or "").strip().upper()
        return self._SHORT_FREQUENCIES.get(code)

    def _table_ids(self) -> set[str]:
        return {d.id for d in self.SERIES.values()}

    def _display_unit(self, units: str) -> str:
        lowered = (units or "").lower()
        for prefix, unit in self._UNIT_ALIASES.items():
            if lowered.startswith(prefix):
                return unit
        return ""
