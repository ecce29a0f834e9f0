from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from macrodash.shared.config import Config


def make_engine(url: str | None = None) -> Engine:
    """Create an engine for the preference database.

    For file-backed SQLite URLs the parent directory is created first.
    """
    url = url or Config.PREFERENCES_DB_URL
    parsed = make_url(url)
    if parsed.drivername.startswith("sqlite") and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, pool_pre_ping=True, echo=False)

