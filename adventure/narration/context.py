from __future__ import annotations

from dataclasses import dataclass

from adventure.api.models import AdventureEvent, PlayerState


@dataclass(frozen=True, slots=True)
class RenderedContext:
    """Final, merged context passed into the LLM agent."""

    system_prompt: str


def player_context_text(state: PlayerState) -> str:
    s = state.stats
    return "\n".join(
        [
            "PLAYER CONTEXT:",
            f"- tags: {', '.join(state.tags) or '(none)'}",
            f"- inventory: {', '.join(state.inventory) or '(empty)'}",
            f"- level: {s.level}",
            f"- health: {s.health}/{s.max_health}",
            f"- gold: {s.gold}",
        ]
    )


def event_prompt_text(event: AdventureEvent) -> str:
    return "\n".join(
        [
            f"EVENT: {event.title} ({event.category.value})",
            f"Player options: {', '.join(event.choices)}",
            "",
            event.prompt.strip(),
        ]
    ).strip()


def compose_context(*, base_prompt: str, state: PlayerState) -> RenderedContext:
    parts = [base_prompt.strip(), player_context_text(state)]
    system_prompt = "\n\n".join([p for p in parts if p.strip()]).strip()
    return RenderedContext(system_prompt=system_prompt)
