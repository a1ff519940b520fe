from __future__ import annotations

import os

import httpx
import pytest

from adventure.api.models import AdventureEvent, EventCategory, PlayerState
from adventure.narration.ag2_backend import Ag2DescriptionProvider, _extract_last_content
from adventure.narration.fallback import generate_with_fallback
from adventure.settings import settings_from_env


def _endpoint_healthy(base_url: str) -> bool:
    try:
        r = httpx.get(base_url.rstrip("/") + "/models", timeout=1.5)
        return r.status_code < 500
    except Exception:
        return False


def test_extract_last_content_skips_empty_messages() -> None:
    messages = [
        {"role": "user", "content": "Describe the tower."},
        {"role": "assistant", "content": "  Vines choke the doorway.  "},
        {"role": "assistant", "content": ""},
    ]
    assert _extract_last_content(messages) == "Vines choke the doorway."
    assert _extract_last_content("not a list") == ""


@pytest.mark.integration
@pytest.mark.asyncio
async def test_ag2_narrator_env_gated() -> None:
    base_url = os.environ.get("OPENAI_BASE_URL")
    api_key = os.environ.get("OPENAI_API_KEY")

    if not (api_key or base_url):
        pytest.skip("Set OPENAI_API_KEY or OPENAI_BASE_URL")

    if base_url and not _endpoint_healthy(base_url):
        pytest.skip("LLM endpoint not reachable at OPENAI_BASE_URL")

    event = AdventureEvent(
        id="ancient_tower",
        title="Ancient Tower",
        category=EventCategory.exploration,
        choices=("Enter", "Leave"),
        prompt="Describe an abandoned tower filled with magical vines and old artifacts.",
    )
    provider = Ag2DescriptionProvider(settings=settings_from_env())

    text = await generate_with_fallback(provider, event, PlayerState(tags=["rested"]), timeout_s=60.0)
    assert text.strip()
