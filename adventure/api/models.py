from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class EventCategory(StrEnum):
    exploration = "exploration"
    combat = "combat"
    social = "social"
    puzzle = "puzzle"
    treasure = "treasure"


class AdventureEvent(BaseModel):
    """A static narrative event from the catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    title: str
    # Older content files call this field `type`.
    category: EventCategory = Field(..., validation_alias=AliasChoices("category", "type"))
    choices: tuple[str, ...] = Field(..., min_length=1)
    requires: frozenset[str] = frozenset()
    grants: frozenset[str] = frozenset()
    prompt: str = ""


StatName = Literal["health", "max_health", "gold", "experience", "level"]


class PlayerStats(BaseModel):
    health: int = Field(100, ge=0)
    max_health: int = Field(100, ge=0)
    gold: int = Field(0, ge=0)
    experience: int = Field(0, ge=0)
    level: int = Field(1, ge=0)


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


class PlayerState(BaseModel):
    tags: list[str] = Field(default_factory=list)
    inventory: list[str] = Field(default_factory=list)
    stats: PlayerStats = Field(default_factory=PlayerStats)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, v: list[str]) -> list[str]:
        return _unique(v)


class EventChoice(BaseModel):
    text: str
    outcome: str
    requires: list[str] | None = None
    grants: list[str] = Field(default_factory=list)


class EventOutcome(BaseModel):
    description: str
    choices: list[EventChoice] = Field(..., min_length=1)


# Effects: one variant per kind of state change.


class TagGrant(BaseModel):
    kind: Literal["tag"] = "tag"
    tag: str = Field(..., min_length=1)


class TagRevoke(BaseModel):
    kind: Literal["untag"] = "untag"
    tag: str = Field(..., min_length=1)


class ItemGrant(BaseModel):
    kind: Literal["item"] = "item"
    item_id: str = Field(..., min_length=1)


class StatDelta(BaseModel):
    kind: Literal["stat"] = "stat"
    stat: StatName
    amount: int


Effect = Annotated[Union[TagGrant, TagRevoke, ItemGrant, StatDelta], Field(discriminator="kind")]


class SessionPhase(StrEnum):
    awaiting_event = "awaiting_event"
    event_presented = "event_presented"
    exhausted = "exhausted"


class HistoryEntry(BaseModel):
    seq: int
    event_id: str
    choice_index: int
    choice_label: str
    created_at: datetime


class SessionRecord(BaseModel):
    session_id: UUID
    created_at: datetime
    last_updated_at: datetime

    # For reproducibility/debugging.
    seed: int

    phase: SessionPhase = SessionPhase.awaiting_event

    # Set while an event is waiting for the player's choice.
    current_event_id: str | None = None

    player: PlayerState = Field(default_factory=PlayerState)
    history: list[HistoryEntry] = Field(default_factory=list)
    last_outcome: EventOutcome | None = None


class SessionCreateRequest(BaseModel):
    seed: int | None = Field(None, ge=1)


class ChoiceRequest(BaseModel):
    choice_index: int


class FollowUpRequest(BaseModel):
    choice: EventChoice


class EffectsRequest(BaseModel):
    effects: list[Effect] = Field(..., min_length=1)


class StatsUpdate(BaseModel):
    health: int | None = Field(None, ge=0)
    max_health: int | None = Field(None, ge=0)
    gold: int | None = Field(None, ge=0)
    experience: int | None = Field(None, ge=0)
    level: int | None = Field(None, ge=0)


class PlayerStateUpdate(BaseModel):
    tags: list[str] | None = None
    inventory: list[str] | None = None
    stats: StatsUpdate | None = None


class PresentedEvent(BaseModel):
    event: AdventureEvent | None = None
    description: str | None = None


class EligibleEventsResponse(BaseModel):
    events: list[AdventureEvent]


class SessionListResponse(BaseModel):
    sessions: list[SessionRecord]
