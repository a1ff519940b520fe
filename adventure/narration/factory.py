from __future__ import annotations

from typing import cast

from adventure.narration.base import DescriptionProvider
from adventure.narration.template import TemplateDescriptionProvider
from adventure.settings import EngineSettings


def create_description_provider(settings: EngineSettings) -> DescriptionProvider:
    """Pick the narration backend once, at construction time."""

    if settings.narration_backend == "llm":
        # Imported lazily so the template backend works without AG2 configured.
        from adventure.narration.ag2_backend import Ag2DescriptionProvider

        return cast(DescriptionProvider, Ag2DescriptionProvider(settings=settings))
    return cast(DescriptionProvider, TemplateDescriptionProvider())
