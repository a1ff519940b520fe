from __future__ import annotations

import random
from collections.abc import Collection

from adventure.api.models import AdventureEvent
from adventure.catalog.registry import EventCatalog
from adventure.core.eligibility import is_eligible


def list_eligible(catalog: EventCatalog, tags: Collection[str]) -> list[AdventureEvent]:
    """Events whose requirements are met by `tags`, in catalog order."""

    tag_set = set(tags)
    return [e for e in catalog.list_all() if is_eligible(e.requires, tag_set)]


def pick_random(catalog: EventCatalog, tags: Collection[str], rng: random.Random) -> AdventureEvent | None:
    """Uniform draw over the eligible events.

    Returns None when nothing is eligible; the caller treats that as "explored everything".
    """

    eligible = list_eligible(catalog, tags)
    if not eligible:
        return None
    return rng.choice(eligible)
