from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from adventure.api.models import AdventureEvent, EventCategory

logger = logging.getLogger(__name__)


class CatalogLoadError(RuntimeError):
    pass


class CatalogFileMissingError(CatalogLoadError):
    pass


class EventNotFoundError(KeyError):
    pass


@dataclass(frozen=True, slots=True)
class EventCatalog:
    """Read-only, ordered set of adventure events.

    Order is the file order and is what `list_eligible` preserves.
    """

    events: tuple[AdventureEvent, ...]
    _by_id: dict[str, AdventureEvent]

    @staticmethod
    def from_events(events: list[AdventureEvent]) -> "EventCatalog":
        by_id: dict[str, AdventureEvent] = {}
        for e in events:
            if e.id in by_id:
                raise CatalogLoadError(f"Duplicate event id: {e.id}")
            by_id[e.id] = e
        return EventCatalog(events=tuple(events), _by_id=by_id)

    def list_all(self) -> tuple[AdventureEvent, ...]:
        return self.events

    def get(self, event_id: str) -> AdventureEvent | None:
        return self._by_id.get(event_id)

    def require(self, event_id: str) -> AdventureEvent:
        event = self.get(event_id)
        if event is None:
            raise EventNotFoundError(f"Event not found: {event_id}")
        return event


_EVENT_LIST = TypeAdapter(list[AdventureEvent])


def load_events_json(path: Path) -> EventCatalog:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CatalogFileMissingError(f"Catalog file not found: {path}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Invalid JSON in {path}: {e}") from e

    # Accept either a bare list or {"events": [...]}.
    if isinstance(data, dict):
        data = data.get("events")
    if not isinstance(data, list):
        raise CatalogLoadError(f"Expected a list of events in {path}")

    try:
        events = _EVENT_LIST.validate_python(data)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid event definition in {path}: {e}") from e

    return EventCatalog.from_events(events)


def _fallback_catalog() -> EventCatalog:
    """Built-in starter content used when no catalog file is present."""

    events = [
        AdventureEvent(
            id="ancient_tower",
            title="Ancient Tower",
            category=EventCategory.exploration,
            choices=("Enter", "Inspect the surroundings", "Leave"),
            grants=frozenset({"found_tower_key"}),
            prompt="Describe an abandoned tower filled with magical vines and old artifacts.",
        ),
        AdventureEvent(
            id="mysterious_merchant",
            title="Mysterious Merchant",
            category=EventCategory.social,
            choices=("Barter", "Ask about local rumors", "Ignore"),
            grants=frozenset({"merchant_friend"}),
            prompt="Describe a mysterious merchant with unusual wares and knowledge of the area.",
        ),
        AdventureEvent(
            id="dark_forest",
            title="Dark Forest",
            category=EventCategory.exploration,
            choices=("Proceed carefully", "Take a shortcut", "Turn back"),
            grants=frozenset({"forest_explorer"}),
            prompt="Describe a dense, dark forest with strange sounds and glowing eyes in the shadows.",
        ),
        AdventureEvent(
            id="ancient_ruins",
            title="Ancient Ruins",
            category=EventCategory.puzzle,
            choices=("Investigate the symbols", "Search for treasure", "Leave"),
            requires=frozenset({"found_tower_key"}),
            grants=frozenset({"ruins_knowledge"}),
            prompt="Describe ancient ruins with mysterious symbols and a sense of forgotten magic.",
        ),
        AdventureEvent(
            id="bandit_ambush",
            title="Bandit Ambush",
            category=EventCategory.combat,
            choices=("Fight", "Negotiate", "Flee"),
            grants=frozenset({"bandit_defeated"}),
            prompt="Describe a sudden ambush by bandits in a narrow pass.",
        ),
    ]
    return EventCatalog.from_events(events)


def load_event_catalog(*, root: Path) -> EventCatalog:
    path = root / "assets" / "events.json"

    # Only a missing file falls back to the starter content; a broken file always raises.
    # Set ADVENTURE_STRICT_CATALOG=1 to make a missing file an error too.
    strict = os.getenv("ADVENTURE_STRICT_CATALOG", "").strip().lower() in {"1", "true", "yes"}

    try:
        return load_events_json(path)
    except CatalogFileMissingError:
        if strict:
            raise
        logger.warning("No event catalog at %s; using the built-in sample events", path)
        return _fallback_catalog()
