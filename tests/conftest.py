from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_llm_env_for_tests() -> None:
    """Pull the OPENAI_* settings from a local `.env` for the env-gated narrator test.

    Only LLM keys are taken, so a developer `.env` cannot point the suite at a real
    redis or switch the narration backend. Skipped in CI unless
    `ADVENTURE_LOAD_DOTENV_FOR_TESTS=1`.
    """

    if os.environ.get("CI") and os.environ.get("ADVENTURE_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if not env_path.exists():
        return

    from dotenv import dotenv_values

    for key, value in dotenv_values(env_path).items():
        if key.startswith("OPENAI_") and value and key not in os.environ:
            os.environ[key] = value


@pytest.fixture(scope="session", autouse=True)
def _init_catalog_from_test_fixtures() -> None:
    """Initialize the catalog from `tests/assets` and forbid the built-in fallback.

    This keeps tests hermetic and independent of the repo's real content.
    """

    os.environ["ADVENTURE_STRICT_CATALOG"] = "1"

    from adventure.catalog.singleton import init_catalog, reset_catalog_for_tests

    reset_catalog_for_tests()

    # Point the loader at a fake project root: tests/ contains an assets/ dir.
    test_root = Path(__file__).resolve().parent
    init_catalog(project_root=test_root)


@pytest.fixture()
def catalog():
    from adventure.catalog.singleton import get_catalog

    return get_catalog()


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient wired to fakeredis and the template narrator."""

    import fakeredis
    from fastapi.testclient import TestClient

    from adventure.api.deps import get_description_provider, get_redis
    from adventure.main import app
    from adventure.narration.template import TemplateDescriptionProvider

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    def _provider() -> TemplateDescriptionProvider:
        return TemplateDescriptionProvider()

    app.dependency_overrides[get_redis] = _override
    app.dependency_overrides[get_description_provider] = _provider
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
