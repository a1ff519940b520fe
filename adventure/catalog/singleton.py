from __future__ import annotations

from pathlib import Path

from adventure.catalog.registry import EventCatalog, load_event_catalog


_CATALOG: EventCatalog | None = None


def init_catalog(*, project_root: Path) -> EventCatalog:
    """Load the event catalog once and cache it.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    The catalog is immutable, so one instance is shared by every session.
    """

    global _CATALOG
    if _CATALOG is None:
        _CATALOG = load_event_catalog(root=project_root)
    return _CATALOG


def reset_catalog_for_tests() -> None:
    global _CATALOG
    _CATALOG = None


def get_catalog() -> EventCatalog:
    if _CATALOG is None:
        raise RuntimeError("Event catalog not initialized. Call init_catalog() at startup.")
    return _CATALOG
