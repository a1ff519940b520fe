from __future__ import annotations

import asyncio
from dataclasses import dataclass

from autogen import ConversableAgent

from adventure.api.models import AdventureEvent, PlayerState
from adventure.narration.base import DescriptionGenerationError
from adventure.narration.context import RenderedContext, compose_context, event_prompt_text
from adventure.narration.llm_config import narrator_llm_config
from adventure.narration.prompts import load_prompt
from adventure.settings import EngineSettings


def _extract_last_content(messages: object) -> str:
    """Extract the last message content from AG2 chat history."""

    if not isinstance(messages, list):
        return ""

    for msg in reversed(messages):
        if isinstance(msg, dict):
            content = msg.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return ""


@dataclass(slots=True)
class Ag2DescriptionProvider:
    """LLM narrator using the documented `autogen` API.

    Context stacking (narrator prompt + player state) is handled by our code;
    transport/config is handled by AG2.

    Model, key and base URL come from `EngineSettings` (`OPENAI_MODEL`,
    `OPENAI_API_KEY`, `OPENAI_BASE_URL`).

    The chat runs in a worker thread. When the caller's `wait_for` times out, the
    thread is abandoned, not interrupted: the LLM request runs to completion in
    the background and its text is discarded. It only returns a string, so a late
    reply never touches player state.
    """

    settings: EngineSettings
    name: str = "ag2-narrator"
    prompt_file: str = "narrator.txt"

    async def generate(self, event: AdventureEvent, state: PlayerState) -> str:
        ctx = compose_context(base_prompt=load_prompt(self.prompt_file), state=state)
        # agent.run blocks; keep it off the event loop so callers can time it out.
        text = await asyncio.to_thread(self._run_chat, ctx, event_prompt_text(event))
        if not text:
            raise DescriptionGenerationError(f"Empty narration for event {event.id}")
        return text

    def _run_chat(self, ctx: RenderedContext, prompt: str) -> str:
        agent = ConversableAgent(
            name=self.name,
            system_message=ctx.system_prompt,
            llm_config=narrator_llm_config(self.settings),
            human_input_mode="NEVER",
        )

        result = agent.run(message=prompt, max_turns=1)
        result.process()

        text = _extract_last_content(list(result.messages))
        if not text:
            summary = result.summary
            if isinstance(summary, str):
                text = summary.strip()
        return text
