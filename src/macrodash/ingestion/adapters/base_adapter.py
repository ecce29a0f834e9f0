"""Abstract base class for all provider source adapters.

Every adapter maps one provider's JSON schema to the common IndicatorRecord:
- Default query window when the caller supplies none
- Provider period codes converted to uniform labels
- Observations sorted chronologically ascending
- Tolerant numeric parsing (unparseable values become 0.0)
- Titles and units from a fixed per-provider table
- current/previous/change derived by IndicatorRecord.from_observations

Adapters do not retry, back off or cache; one failed attempt is final for
that call.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

import pandas as pd

from macrodash.ingestion.periods import parse_label
from macrodash.ingestion.schema import IndicatorRecord, Provider, SeriesDescriptor
from macrodash.shared.config import Config
from macrodash.shared.exceptions import UpstreamSchemaError
from macrodash.shared.utils import setup_logger


class BaseAdapter(ABC):
    """Base class for provider adapters.

    Subclasses must define:
        SOURCE (Provider): provider tag stamped on every record.
        SERIES (dict[str, SeriesDescriptor]): named series table.
        DEFAULT_FREQUENCY (str): frequency assumed for native ids not in SERIES.

    Subclasses must implement:
        fetch(): fetch one series and return an IndicatorRecord.
        health_check(): verify the provider is reachable.
    """

    SOURCE: Provider
    SERIES: dict[str, SeriesDescriptor] = {}
    DEFAULT_FREQUENCY = "monthly"

    def __init__(self, output_dir: Path | None = None, log_file: Path | None = None) -> None:
        """Initialize the adapter.

        Args:
            output_dir: Directory for CSV exports (default: data/exports/{source}).
            log_file: Optional path for file-based logging.
        """
        self.output_dir = output_dir or Config.DATA_DIR / "exports" / self.SOURCE.key_prefix
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def fetch(
        self,
        series: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        **options,
    ) -> IndicatorRecord:
        """Fetch one series and normalize it.

        Args:
            series: Name from SERIES or a provider-native series id.
            start_date: Start of the query window (provider default if None).
            end_date: End of the query window (default: today).
            **options: Provider-specific overrides.

        Returns:
            Normalized IndicatorRecord.

        Raises:
            TransportError: The HTTP call failed.
            UpstreamSchemaError: The payload lacks the expected structure.
            UpstreamStatusError: The provider reported a failure.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the provider is reachable and responding."""
        ...

    def describe(self, series: str) -> SeriesDescriptor:
        """Look up a series by table name or native id.

        Unknown names are treated as native ids with a generic descriptor.
        """
        if series in self.SERIES:
            return self.SERIES[series]
        for descriptor in self.SERIES.values():
            if descriptor.id == series:
                return descriptor
        return SeriesDescriptor(
            id=series,
            title=f"{self.SOURCE.value} Data",
            frequency=self.DEFAULT_FREQUENCY,
        )

    def build_record(
        self,
        descriptor: SeriesDescriptor,
        observations: list[tuple[str, object]],
        title: str | None = None,
        unit: str | None = None,
    ) -> IndicatorRecord:
        """Sort (label, raw value) pairs chronologically and build the record.

        Raises:
            UpstreamSchemaError: If there are no observations.
        """
        if not observations:
            raise UpstreamSchemaError(self.SOURCE.value, f"No data returned for {descriptor.id}")

        df = pd.DataFrame(observations, columns=["label", "value"])
        df["value"] = pd.to_numeric(df["value"], errors="coerce").fillna(0.0)
        df["period"] = [parse_label(label) for label in df["label"]]
        unparsed = df["period"].isna()
        if unparsed.any():
            self.logger.warning(
                "%d unparseable period labels for %s; keeping provider order for them",
                int(unparsed.sum()),
                descriptor.id,
            )
        df = df.sort_values("period", kind="stable", na_position="last")

        record = IndicatorRecord.from_observations(
            title=title or descriptor.title,
            source=self.SOURCE,
            unit=descriptor.unit if unit is None else unit,
            labels=df["label"].tolist(),
            data=df["value"].tolist(),
        )
        self.logger.info(
            "Normalized %s (%s): %d observations", descriptor.id, record.title, len(record.data)
        )
        return record

    def export_csv(self, record: IndicatorRecord, name: str) -> Path:
        """Export a record to CSV.

        File path: {output_dir}/{source}_{name}_{YYYYMMDD}.csv

        Raises:
            ValueError: If the record has no observations.
        """
        if record.is_empty:
            raise ValueError(f"Cannot export empty record for '{name}'")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        date_str = datetime.now().strftime("%Y%m%d")
        safe_name = name.replace(":", "_").replace(".", "_")
        path = self.output_dir / f"{self.SOURCE.key_prefix}_{safe_name}_{date_str}.csv"
        record.to_frame().to_csv(path, index=False, encoding="utf-8")
        self.logger.info("Exported %d records to %s", len(record.data), path)
        return path
