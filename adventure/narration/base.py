from __future__ import annotations

from typing import Protocol

from adventure.api.models import AdventureEvent, PlayerState


class DescriptionGenerationError(RuntimeError):
    pass


class DescriptionProvider(Protocol):
    name: str

    async def generate(self, event: AdventureEvent, state: PlayerState) -> str:  # pragma: no cover
        ...
