"""
Root pytest configuration.

Shared fixtures: a record factory and a Config redirect so exports and
logs land in tmp_path.
"""

import pytest

from macrodash.ingestion.periods import month_label
from macrodash.ingestion.schema import IndicatorRecord, Provider


def make_record(
    data,
    labels=None,
    title: str = "Test Series",
    source: Provider = Provider.FRED,
    unit: str = "%",
) -> IndicatorRecord:
    """Build an IndicatorRecord with monthly labels starting Jan 2024."""
    if labels is None:
        labels = [month_label(2024 + i // 12, i % 12 + 1) for i in range(len(data))]
    return IndicatorRecord.from_observations(title, source, unit, labels, data)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    """Keep exports and logs out of the repository during tests."""
    monkeypatch.setattr("macrodash.shared.config.Config.DATA_DIR", tmp_path / "data")
    monkeypatch.setattr("macrodash.shared.config.Config.LOGS_DIR", tmp_path / "logs")
    return tmp_path
