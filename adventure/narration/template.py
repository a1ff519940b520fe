from __future__ import annotations

from dataclasses import dataclass

from adventure.api.models import AdventureEvent, EventCategory, PlayerState


_CATEGORY_DETAIL: dict[EventCategory, str] = {
    EventCategory.exploration: "The area is filled with interesting details and potential discoveries.",
    EventCategory.combat: "The situation is tense and dangerous.",
    EventCategory.social: "The person seems to have valuable information or items.",
    EventCategory.puzzle: "There are clues scattered around that might help solve this puzzle.",
    EventCategory.treasure: "Valuable items are visible, but there might be traps or guardians.",
}


@dataclass(slots=True)
class TemplateDescriptionProvider:
    """Deterministic narration built from the event and player state.

    No network, no randomness: the same event and state always give the same text.
    Used by default and in tests.
    """

    name: str = "template"

    async def generate(self, event: AdventureEvent, state: PlayerState) -> str:
        return render_description(event, state)


def render_description(event: AdventureEvent, state: PlayerState) -> str:
    parts = [f"You encounter {event.title.lower()}.", event.prompt.strip(), _CATEGORY_DETAIL[event.category]]

    if "rested" in state.tags:
        parts.append("You feel well-rested and ready for anything.")

    stats = state.stats
    if stats.health < stats.max_health * 0.5:
        parts.append("Your injuries make this situation more challenging.")

    if stats.level > 5:
        parts.append("Your experience helps you notice details that others might miss.")

    return " ".join(p for p in parts if p)
