from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

NarrationBackend = Literal["template", "llm"]

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_LLM_MODEL = "gpt-4o-mini"


@dataclass(frozen=True, slots=True)
class EngineSettings:
    redis_url: str = DEFAULT_REDIS_URL
    narration_backend: NarrationBackend = "template"
    # Hard cap on one narration call before falling back to the event prompt.
    narration_timeout_s: float = 10.0
    llm_model: str = DEFAULT_LLM_MODEL
    # For Ollama, typically http://127.0.0.1:11434/v1
    llm_base_url: str | None = None
    llm_api_key: str | None = None


def settings_from_env() -> EngineSettings:
    backend = os.environ.get("ADVENTURE_NARRATION_BACKEND", "template").strip().lower()
    if backend not in {"template", "llm"}:
        raise ValueError(f"Unknown ADVENTURE_NARRATION_BACKEND: {backend}")

    raw_timeout = os.environ.get("ADVENTURE_NARRATION_TIMEOUT_S", "10")
    try:
        timeout = float(raw_timeout)
    except ValueError as e:
        raise ValueError(f"ADVENTURE_NARRATION_TIMEOUT_S must be a number, got {raw_timeout!r}") from e
    if timeout <= 0:
        raise ValueError("ADVENTURE_NARRATION_TIMEOUT_S must be > 0")

    return EngineSettings(
        redis_url=os.environ.get("REDIS_URL", DEFAULT_REDIS_URL),
        narration_backend=backend,  # type: ignore[arg-type]
        narration_timeout_s=timeout,
        llm_model=os.environ.get("OPENAI_MODEL", DEFAULT_LLM_MODEL),
        llm_base_url=os.environ.get("OPENAI_BASE_URL") or None,
        llm_api_key=os.environ.get("OPENAI_API_KEY") or None,
    )
