"""Configuration management for macrodash."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).resolve().parents[3]
    DATA_DIR = ROOT_DIR / "data"
    LOGS_DIR = ROOT_DIR / "logs"

    # API Keys (not validated up front; a missing key surfaces as an upstream failure)
    FRED_API_KEY: Optional[str] = os.getenv("FRED_API_KEY")
    BEA_API_KEY: Optional[str] = os.getenv("BEA_API_KEY")
    BLS_API_KEY: Optional[str] = os.getenv("BLS_API_KEY")

    # Provider endpoints
    BEA_BASE_URL: str = os.getenv("BEA_BASE_URL", "https://apps.bea.gov/api/data")
    BLS_BASE_URL: str = os.getenv(
        "BLS_BASE_URL", "https://api.bls.gov/publicAPI/v2/timeseries/data/"
    )
    WORLD_BANK_BASE_URL: str = os.getenv("WORLD_BANK_BASE_URL", "https://api.worldbank.org/v2")

    # Request settings
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Preference persistence
    PREFERENCES_DB_URL: str = os.getenv(
        "PREFERENCES_DB_URL", f"sqlite:///{DATA_DIR / 'preferences.db'}"
    )

    @classmethod
    def missing_api_keys(cls) -> list[str]:
        """Return the names of provider API keys that are not set."""
        keys = {
            "FRED_API_KEY": cls.FRED_API_KEY,
            "BEA_API_KEY": cls.BEA_API_KEY,
            "BLS_API_KEY": cls.BLS_API_KEY,
        }
        return [name for name, value in keys.items() if not value]


config = Config()
