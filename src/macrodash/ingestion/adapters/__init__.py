"""Source adapters, one per upstream provider."""

from macrodash.ingestion.adapters.base_adapter import BaseAdapter
from macrodash.ingestion.adapters.bea_adapter import BEAAdapter
from macrodash.ingestion.adapters.bls_adapter import BLSAdapter
from macrodash.ingestion.adapters.fred_adapter import FREDAdapter
from macrodash.ingestion.adapters.worldbank_adapter import WorldBankAdapter
from macrodash.ingestion.schema import Provider

ADAPTER_CLASSES: dict[Provider, type[BaseAdapter]] = {
    Provider.FRED: FREDAdapter,
    Provider.BEA: BEAAdapter,
    Provider.BLS: BLSAdapter,
    Provider.WORLD_BANK: WorldBankAdapter,
}

__all__ = [
    "ADAPTER_CLASSES",
    "BaseAdapter",
    "BEAAdapter",
    "BLSAdapter",
    "FREDAdapter",
    "WorldBankAdapter",
]
