from __future__ import annotations

from typing import Any

from autogen import LLMConfig

from adventure.narration.base import DescriptionGenerationError
from adventure.settings import EngineSettings


def narrator_config_entry(settings: EngineSettings) -> dict[str, Any]:
    """One OAI_CONFIG_LIST-style entry for the narrator model."""

    # Local OpenAI-compatible servers ignore the key, but the client insists on one.
    api_key = settings.llm_api_key or ("ollama" if settings.llm_base_url else None)
    if not api_key:
        raise DescriptionGenerationError(
            "LLM narration needs OPENAI_API_KEY, or OPENAI_BASE_URL for a local OpenAI-compatible server"
        )

    entry: dict[str, Any] = {"model": settings.llm_model, "api_key": api_key}
    if settings.llm_base_url:
        entry["base_url"] = settings.llm_base_url
    return entry


def narrator_llm_config(settings: EngineSettings) -> LLMConfig:
    return LLMConfig(config_list=[narrator_config_entry(settings)])
