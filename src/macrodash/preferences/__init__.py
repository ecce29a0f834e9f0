"""User preference persistence (favorites, dashboard layout)."""

from macrodash.preferences.favorites import DashboardLayout, Favorites
from macrodash.preferences.store import MemoryPreferenceStore, PreferenceStore, SQLPreferenceStore

__all__ = [
    "DashboardLayout",
    "Favorites",
    "MemoryPreferenceStore",
    "PreferenceStore",
    "SQLPreferenceStore",
]
