from __future__ import annotations

import random
from collections.abc import Iterable

from adventure.api.models import (
    AdventureEvent,
    Effect,
    EventChoice,
    EventOutcome,
    PlayerState,
    PlayerStateUpdate,
)
from adventure.catalog.registry import EventCatalog
from adventure.core.choices import apply_follow_up, process_choice
from adventure.core.player_state import PlayerStateStore
from adventure.core.selector import list_eligible, pick_random
from adventure.narration.base import DescriptionProvider
from adventure.narration.fallback import generate_with_fallback

DEFAULT_NARRATION_TIMEOUT_S = 10.0


class AdventureEngine:
    """One player's session handle.

    Owns the player's state store; the catalog is shared read-only. Construct
    one engine per session. Calls on a single engine must not interleave.
    """

    def __init__(
        self,
        catalog: EventCatalog,
        provider: DescriptionProvider,
        *,
        state: PlayerState | None = None,
        rng: random.Random | None = None,
        narration_timeout_s: float = DEFAULT_NARRATION_TIMEOUT_S,
    ) -> None:
        self.catalog = catalog
        self.provider = provider
        self.narration_timeout_s = narration_timeout_s
        self._store = PlayerStateStore(state)
        self._rng = rng or random.Random()

    def get_player_state(self) -> PlayerState:
        return self._store.snapshot()

    def list_eligible(self) -> list[AdventureEvent]:
        return list_eligible(self.catalog, self._store.tags)

    def pick_random(self) -> AdventureEvent | None:
        return pick_random(self.catalog, self._store.tags, self._rng)

    async def describe(self, event: AdventureEvent) -> str:
        return await generate_with_fallback(
            self.provider, event, self._store.snapshot(), timeout_s=self.narration_timeout_s
        )

    async def process(self, event: AdventureEvent, choice_index: int) -> EventOutcome:
        return await process_choice(
            event, choice_index, self._store, self.provider, timeout_s=self.narration_timeout_s
        )

    def apply_follow_up(self, choice: EventChoice) -> None:
        apply_follow_up(choice, self._store)

    def apply_effects(self, effects: Iterable[Effect]) -> None:
        self._store.apply_all(effects)

    def update_player_state(self, update: PlayerStateUpdate) -> None:
        self._store.update(update)
