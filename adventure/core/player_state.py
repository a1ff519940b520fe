from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import assert_never

from adventure.api.models import (
    Effect,
    ItemGrant,
    PlayerState,
    PlayerStateUpdate,
    StatDelta,
    TagGrant,
    TagRevoke,
)
from adventure.core.eligibility import is_eligible

logger = logging.getLogger(__name__)


class PlayerStateStore:
    """Mutable progression state for a single session.

    Every session constructs its own store; nothing here is shared between sessions.
    Callers only ever see copies (`snapshot`), never the live model.
    """

    def __init__(self, initial: PlayerState | None = None) -> None:
        self._state = initial.model_copy(deep=True) if initial is not None else PlayerState()
        self._normalize_stats()

    def snapshot(self) -> PlayerState:
        return self._state.model_copy(deep=True)

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._state.tags)

    def has_tags(self, requires: Iterable[str]) -> bool:
        return is_eligible(requires, self.tags)

    def add_tags(self, tags: Iterable[str]) -> None:
        current = self._state.tags
        for tag in tags:
            if tag not in current:
                current.append(tag)

    def remove_tags(self, tags: Iterable[str]) -> None:
        drop = set(tags)
        self._state.tags = [t for t in self._state.tags if t not in drop]

    def add_items(self, items: Iterable[str]) -> None:
        self._state.inventory.extend(items)

    def merge_stats(self, **stats: int) -> None:
        """Overwrite the named stats, then re-apply stat bounds."""

        merged = self._state.stats.model_dump()
        for name, value in stats.items():
            if name not in merged:
                raise ValueError(f"Unknown stat: {name}")
            merged[name] = value
        self._state.stats = type(self._state.stats).model_validate(_clamped(merged))

    def update(self, update: PlayerStateUpdate) -> None:
        """Partial update: replaces tags/inventory when given, merges stats."""

        if update.tags is not None:
            self._state.tags = list(dict.fromkeys(update.tags))
        if update.inventory is not None:
            self._state.inventory = list(update.inventory)
        if update.stats is not None:
            self.merge_stats(**update.stats.model_dump(exclude_none=True))

    def apply(self, effect: Effect) -> None:
        match effect:
            case TagGrant(tag=tag):
                self.add_tags([tag])
            case TagRevoke(tag=tag):
                self.remove_tags([tag])
            case ItemGrant(item_id=item_id):
                self.add_items([item_id])
            case StatDelta(stat=stat, amount=amount):
                current = getattr(self._state.stats, stat)
                self.merge_stats(**{stat: current + amount})
            case _:
                assert_never(effect)

    def apply_all(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            self.apply(effect)

    def _normalize_stats(self) -> None:
        self._state.stats = type(self._state.stats).model_validate(_clamped(self._state.stats.model_dump()))


def _clamped(stats: dict[str, int]) -> dict[str, int]:
    """Floor every stat at 0 and keep health within [0, max_health]."""

    out = {k: max(0, v) for k, v in stats.items()}
    if out["health"] > out["max_health"]:
        logger.debug("Clamping health %s to max_health %s", out["health"], out["max_health"])
        out["health"] = out["max_health"]
    return out
