"""Favorite indicators and dashboard panel layout, persisted through a PreferenceStore."""

from typing import Any

from macrodash.preferences.store import PreferenceStore

FAVORITES_KEY = "favoriteIndicators"
LAYOUT_KEY = "dashboardLayout"

PANEL_FIELDS = ("i", "x", "y", "w", "h")


class Favorites:
    """List of favorite indicator keys."""

    def __init__(self, store: PreferenceStore, key: str = FAVORITES_KEY) -> None:
        self._store = store
        self._key = key

    def all(self) -> list[str]:
        value = self._store.load(self._key, [])
        return list(value) if isinstance(value, list) else []

    def is_favorite(self, indicator_key: str) -> bool:
        return indicator_key in self.all()

    def toggle(self, indicator_key: str) -> list[str]:
        """Add the key if absent, remove it if present; returns the new list."""
        favorites = self.all()
        if indicator_key in favorites:
            favorites = [k for k in favorites if k != indicator_key]
        else:
            favorites.append(indicator_key)
        self._store.save(self._key, favorites)
        return favorites


class DashboardLayout:
    """Panel position records ({"i", "x", "y", "w", "h"}) for the grid layout."""

    def __init__(
        self,
        store: PreferenceStore,
        initial_layout: list[dict[str, Any]] | None = None,
        key: str = LAYOUT_KEY,
    ) -> None:
        self._store = store
        self._key = key
        self._initial = [dict(p) for p in initial_layout or []]

    def panels(self) -> list[dict[str, Any]]:
        value = self._store.load(self._key, None)
        if not isinstance(value, list):
            return [dict(p) for p in self._initial]
        return value

    def save(self, layout: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for panel in layout:
            self._validate(panel)
        self._store.save(self._key, layout)
        return layout

    def add_panel(self, panel: dict[str, Any]) -> list[dict[str, Any]]:
        """Append a panel.

        Raises:
            ValueError: If the panel lacks a field or its id is already used.
        """
        self._validate(panel)
        layout = self.panels()
        if any(p.get("i") == panel["i"] for p in layout):
            raise ValueError(f"Panel '{panel['i']}' already exists")
        return self.save(layout + [dict(panel)])

    def remove_panel(self, panel_id: str) -> list[dict[str, Any]]:
        return self.save([p for p in self.panels() if p.get("i") != panel_id])

    def update_panel(self, panel_id: str, **changes: Any) -> list[dict[str, Any]]:
        """Merge changes into the panel with id panel_id (no-op if absent)."""
        if "i" in changes and changes["i"] != panel_id:
            raise ValueError("Panel id cannot be changed")
        layout = [{**p, **changes} if p.get("i") == panel_id else p for p in self.panels()]
        return self.save(layout)

    def reset(self) -> list[dict[str, Any]]:
        return self.save([dict(p) for p in self._initial])

    @staticmethod
    def _validate(panel: dict[str, Any]) -> None:
        missing = [f for f in PANEL_FIELDS if f not in panel]
        if missing:
            raise ValueError(f"Panel is missing fields: {missing}")
