from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

import redis

from adventure.catalog.registry import EventCatalog
from adventure.catalog.singleton import get_catalog
from adventure.narration.base import DescriptionProvider
from adventure.narration.factory import create_description_provider
from adventure.settings import EngineSettings, settings_from_env


def get_redis() -> Generator[redis.Redis, None, None]:
    # decode_responses=True => strings in/out instead of bytes
    client = redis.Redis.from_url(get_settings().redis_url, decode_responses=True)
    try:
        yield client
    finally:
        client.close()


def get_event_catalog() -> EventCatalog:
    return get_catalog()


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    return settings_from_env()


@lru_cache(maxsize=1)
def get_description_provider() -> DescriptionProvider:
    return create_description_provider(get_settings())
