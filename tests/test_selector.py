from __future__ import annotations

import random
from collections import Counter

from adventure.api.models import AdventureEvent, EventCategory
from adventure.catalog.registry import EventCatalog
from adventure.core.selector import list_eligible, pick_random


def _event(event_id: str, *, requires: set[str] | None = None) -> AdventureEvent:
    return AdventureEvent(
        id=event_id,
        title=event_id.title(),
        category=EventCategory.exploration,
        choices=("Go",),
        requires=frozenset(requires or ()),
        prompt=f"Describe {event_id}.",
    )


def test_list_eligible_preserves_catalog_order(catalog: EventCatalog) -> None:
    eligible = list_eligible(catalog, set())
    assert [e.id for e in eligible] == ["ancient_tower", "bandit_ambush"]

    eligible = list_eligible(catalog, {"found_tower_key"})
    assert [e.id for e in eligible] == ["ancient_tower", "ancient_ruins", "bandit_ambush"]


def test_pick_random_returns_none_when_nothing_is_eligible() -> None:
    catalog = EventCatalog.from_events([_event("locked", requires={"never"})])
    rng = random.Random(1)
    for _ in range(20):
        assert pick_random(catalog, set(), rng) is None

    assert pick_random(EventCatalog.from_events([]), {"anything"}, rng) is None


def test_pick_random_only_draws_eligible_events() -> None:
    catalog = EventCatalog.from_events([_event("open"), _event("locked", requires={"key"})])
    rng = random.Random(7)
    picks = {pick_random(catalog, set(), rng).id for _ in range(50)}  # type: ignore[union-attr]
    assert picks == {"open"}


def test_pick_random_is_roughly_uniform() -> None:
    catalog = EventCatalog.from_events([_event("a"), _event("b"), _event("c")])
    rng = random.Random(1234)
    counts = Counter(pick_random(catalog, set(), rng).id for _ in range(3000))  # type: ignore[union-attr]

    assert set(counts) == {"a", "b", "c"}
    for n in counts.values():
        assert 850 < n < 1150


def test_pick_random_is_reproducible_with_a_seeded_rng(catalog: EventCatalog) -> None:
    a = [pick_random(catalog, {"found_tower_key"}, random.Random(99)) for _ in range(3)]
    b = [pick_random(catalog, {"found_tower_key"}, random.Random(99)) for _ in range(3)]
    assert a == b
