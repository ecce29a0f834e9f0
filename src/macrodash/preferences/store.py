"""Key-value preference persistence.

PreferenceStore is the port the dashboard depends on; values are opaque JSON
blobs (favorite indicator keys, panel layout records). Two implementations:

    MemoryPreferenceStore   process-local dict, for tests and ephemeral use
    SQLPreferenceStore      SQLAlchemy `preferences` table (SQLite by default)

No schema versioning or migration: a blob that can no longer be decoded is
logged and replaced by the caller's default.
"""

import copy
import json
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.engine import Engine

from macrodash.shared.db import Base, Preference, get_db, make_engine, make_session_factory
from macrodash.shared.utils import setup_logger


class PreferenceStore(ABC):
    """Port for durable key-value preference storage."""

    @abstractmethod
    def load(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default if absent/unreadable."""
        ...

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Persist value under key, replacing any previous value."""
        ...


class MemoryPreferenceStore(PreferenceStore):
    """In-process store; values are deep-copied in and out."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def load(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    def save(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)


class SQLPreferenceStore(PreferenceStore):
    """Preference store backed by a SQLAlchemy database.

    Example:
        >>> store = SQLPreferenceStore("sqlite:///data/preferences.db")
        >>> store.save("favoriteIndicators", ["fred:unemployment"])
        >>> store.load("favoriteIndicators", [])
        ['fred:unemployment']
    """

    def __init__(self, url: str | None = None, engine: Engine | None = None) -> None:
        """Initialize the store and create the preferences table if missing.

        Args:
            url: Database URL (default: Config.PREFERENCES_DB_URL).
            engine: Pre-built engine; takes precedence over url.
        """
        self.logger = setup_logger(self.__class__.__name__)
        self._engine = engine or make_engine(url)
        self._session_factory = make_session_factory(self._engine)
        Base.metadata.create_all(self._engine, tables=[Preference.__table__])
        self.logger.info("SQLPreferenceStore initialized, url=%s", self._engine.url)

    def load(self, key: str, default: Any = None) -> Any:
        with get_db(self._session_factory) as db:
            row = db.query(Preference).filter(Preference.key == key).one_or_none()
            if row is None:
                return default
            raw = row.value

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.error("Error parsing stored preference '%s': %s", key, e)
            return default

    def save(self, key: str, value: Any) -> None:
        blob = json.dumps(value)
        with get_db(self._session_factory) as db:
            row = db.query(Preference).filter(Preference.key == key).one_or_none()
            if row is None:
                db.add(Preference(key=key, value=blob))
            else:
                row.value = blob
        self.logger.debug("Saved preference '%s' (%d bytes)", key, len(blob))
