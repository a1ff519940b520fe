from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest

from adventure.api.models import AdventureEvent, EventCategory, PlayerState, PlayerStats
from adventure.narration.base import DescriptionGenerationError
from adventure.narration.context import compose_context, event_prompt_text
from adventure.narration.fallback import generate_with_fallback
from adventure.narration.prompts import PromptLoadError, load_prompt
from adventure.narration.template import TemplateDescriptionProvider, render_description

EVENT = AdventureEvent(
    id="ancient_tower",
    title="Ancient Tower",
    category=EventCategory.exploration,
    choices=("Enter", "Leave"),
    grants=frozenset({"found_tower_key"}),
    prompt="Describe an abandoned tower filled with magical vines and old artifacts.",
)


class _FailingProvider:
    name = "failing"

    async def generate(self, event: AdventureEvent, state: PlayerState) -> str:
        raise DescriptionGenerationError("backend down")


class _SlowProvider:
    name = "slow"

    async def generate(self, event: AdventureEvent, state: PlayerState) -> str:
        await asyncio.sleep(5)
        return "too late"


class _BlankProvider:
    name = "blank"

    async def generate(self, event: AdventureEvent, state: PlayerState) -> str:
        return "   "


def test_template_description_is_deterministic() -> None:
    state = PlayerState()
    a = render_description(EVENT, state)
    b = render_description(EVENT, state)

    assert a == b
    assert a.startswith("You encounter ancient tower.")
    assert EVENT.prompt in a
    assert "potential discoveries" in a


def test_template_description_reflects_player_state() -> None:
    state = PlayerState(tags=["rested"], stats=PlayerStats(health=30, max_health=100, level=7))
    text = render_description(EVENT, state)

    assert "well-rested" in text
    assert "injuries" in text
    assert "experience helps you" in text


@pytest.mark.asyncio
async def test_template_provider_generates() -> None:
    text = await TemplateDescriptionProvider().generate(EVENT, PlayerState())
    assert text == render_description(EVENT, PlayerState())


@pytest.mark.asyncio
async def test_fallback_on_provider_error(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        text = await generate_with_fallback(_FailingProvider(), EVENT, PlayerState(), timeout_s=1.0)

    assert text == EVENT.prompt
    assert "ancient_tower" in caplog.text


@pytest.mark.asyncio
async def test_fallback_on_timeout() -> None:
    text = await generate_with_fallback(_SlowProvider(), EVENT, PlayerState(), timeout_s=0.05)
    assert text == EVENT.prompt


@pytest.mark.asyncio
async def test_fallback_on_blank_text() -> None:
    text = await generate_with_fallback(_BlankProvider(), EVENT, PlayerState(), timeout_s=1.0)
    assert text == EVENT.prompt


def test_compose_context_includes_player_state() -> None:
    state = PlayerState(tags=["found_tower_key"], inventory=["rope"], stats=PlayerStats(gold=12))
    ctx = compose_context(base_prompt="NARRATOR", state=state)

    assert ctx.system_prompt.startswith("NARRATOR")
    assert "PLAYER CONTEXT" in ctx.system_prompt
    assert "found_tower_key" in ctx.system_prompt
    assert "rope" in ctx.system_prompt
    assert "health: 100/100" in ctx.system_prompt


def test_event_prompt_text_lists_choices() -> None:
    text = event_prompt_text(EVENT)
    assert "Ancient Tower (exploration)" in text
    assert "Enter, Leave" in text
    assert text.endswith(EVENT.prompt)


def test_load_narrator_prompt() -> None:
    text = load_prompt("narrator.txt")
    assert "narrator" in text
    assert "second person" in text


def test_missing_prompt_raises() -> None:
    with pytest.raises(PromptLoadError):
        load_prompt("does_not_exist.txt")


def test_blank_prompt_raises(tmp_path: Path) -> None:
    (tmp_path / "blank.txt").write_text("   \n", encoding="utf-8")
    with pytest.raises(PromptLoadError):
        load_prompt("blank.txt", tmp_path)
