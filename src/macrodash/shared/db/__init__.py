"""Database engine, session factory and ORM models for preference persistence.

Nothing here touches the filesystem or opens connections at import time;
callers build an engine with make_engine() and a factory with
make_session_factory().
"""

from .base import Base
from .engine import make_engine
from .models import Preference
from .session import get_db, make_session_factory

__all__ = [
    # ORM infrastructure
    "Base",
    "make_engine",
    "make_session_factory",
    "get_db",
    # ORM models
    "Preference",
]
