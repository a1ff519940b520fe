from __future__ import annotations

import logging

from adventure.api.models import AdventureEvent, EventCategory, EventChoice, EventOutcome
from adventure.core.player_state import PlayerStateStore
from adventure.narration.base import DescriptionProvider
from adventure.narration.fallback import generate_with_fallback

logger = logging.getLogger(__name__)


class InvalidChoiceIndex(ValueError):
    def __init__(self, *, event_id: str, choice_index: int, num_choices: int) -> None:
        super().__init__(
            f"Invalid choice index {choice_index} for event {event_id} (expected 0..{num_choices - 1})"
        )
        self.event_id = event_id
        self.choice_index = choice_index
        self.num_choices = num_choices


class ChoiceLockedError(ValueError):
    pass


CONTINUE_CHOICE = EventChoice(text="Continue", outcome="You continue your journey.", grants=[])

_CATEGORY_CHOICES: dict[EventCategory, EventChoice] = {
    EventCategory.combat: EventChoice(
        text="Rest",
        outcome="You take a moment to rest and recover.",
        grants=["rested"],
    ),
    EventCategory.treasure: EventChoice(
        text="Examine closely",
        outcome="You examine the treasure more closely.",
        grants=["careful_examiner"],
    ),
}


def follow_up_choices(event: AdventureEvent) -> list[EventChoice]:
    """Outcome options: "Continue" first, then at most one category-specific option."""

    choices = [CONTINUE_CHOICE.model_copy(deep=True)]
    extra = _CATEGORY_CHOICES.get(event.category)
    if extra is not None:
        choices.append(extra.model_copy(deep=True))
    return choices


def validate_choice_index(event: AdventureEvent, choice_index: int) -> None:
    if not 0 <= choice_index < len(event.choices):
        raise InvalidChoiceIndex(event_id=event.id, choice_index=choice_index, num_choices=len(event.choices))


async def process_choice(
    event: AdventureEvent,
    choice_index: int,
    store: PlayerStateStore,
    provider: DescriptionProvider,
    *,
    timeout_s: float,
) -> EventOutcome:
    """Resolve the player's pick for `event`.

    The index is checked before anything is touched, so a bad index leaves the
    store unchanged. Only tags change here: the event's grants are unioned in.
    """

    validate_choice_index(event, choice_index)

    store.add_tags(event.grants)
    logger.debug("Event %s resolved with choice %d (%s)", event.id, choice_index, event.choices[choice_index])

    description = await generate_with_fallback(provider, event, store.snapshot(), timeout_s=timeout_s)
    return EventOutcome(description=description, choices=follow_up_choices(event))


def apply_follow_up(choice: EventChoice, store: PlayerStateStore) -> None:
    if choice.requires and not store.has_tags(choice.requires):
        missing = sorted(set(choice.requires) - store.tags)
        raise ChoiceLockedError(f"Choice '{choice.text}' requires tags: {','.join(missing)}")
    store.add_tags(choice.grants)
