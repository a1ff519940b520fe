from __future__ import annotations

import asyncio
import logging

from adventure.api.models import AdventureEvent, PlayerState
from adventure.narration.base import DescriptionProvider

logger = logging.getLogger(__name__)


async def generate_with_fallback(
    provider: DescriptionProvider,
    event: AdventureEvent,
    state: PlayerState,
    *,
    timeout_s: float,
) -> str:
    """Narrate `event`, degrading to its static prompt on timeout or error.

    Never raises for provider failures; the progression logic must not depend
    on the narration backend being available.
    """

    try:
        text = await asyncio.wait_for(provider.generate(event, state), timeout=timeout_s)
    except TimeoutError:
        logger.warning("Narration timed out after %.1fs for event %s (provider=%s)", timeout_s, event.id, provider.name)
        return event.prompt
    except Exception:
        logger.warning("Narration failed for event %s (provider=%s)", event.id, provider.name, exc_info=True)
        return event.prompt

    if not isinstance(text, str) or not text.strip():
        logger.warning("Narration returned no text for event %s (provider=%s)", event.id, provider.name)
        return event.prompt
    return text.strip()
