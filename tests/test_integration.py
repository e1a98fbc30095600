"""Integration tests requiring network access to the translation endpoint.

Run with: pytest -m integration
Skipped by default in CI and normal test runs.
"""

import asyncio

import httpx
import pytest

from udt.core.config import TranslationConfig
from udt.core.settings import Settings, SettingsHolder
from udt.translate.pipeline import TranslationPipeline
from udt.translate.provider import TranslationProvider

pytestmark = pytest.mark.integration

TEST_CONFIG = TranslationConfig()


@pytest.fixture(scope="module")
def require_endpoint():
    """Skip when the translation endpoint cannot be reached."""
    try:
        httpx.head(TEST_CONFIG.endpoint, timeout=5)
    except httpx.HTTPError:
        pytest.skip("Translation endpoint unreachable")


def test_live_translation_keeps_protected_terms(require_endpoint):
    async def scenario():
        provider = TranslationProvider(TEST_CONFIG)
        pipeline = TranslationPipeline(provider, SettingsHolder(Settings()))
        try:
            return await pipeline.translate("Install FastAPI with pip today.", "de")
        finally:
            await provider.aclose()

    result = asyncio.run(scenario())
    assert result
    assert "FastAPI" in result
    assert "__UDT_TERM_" not in result
