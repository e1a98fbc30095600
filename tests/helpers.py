"""Test doubles and builders shared across test modules."""

import asyncio

import httpx

from udt.core.errors import TranslationError
from udt.core.settings import Settings, SettingsHolder
from udt.translate.pipeline import TranslationPipeline
from udt.utils.cache import BoundedCache


class FakeProvider:
    """Provider double that records calls and tags translations with the language.

    Set `gate` to hold every request until the event is set; add texts to
    `fail_on` to make requests containing them raise TranslationError.
    """

    def __init__(self, gate: asyncio.Event | None = None):
        self.calls: list[tuple[str, str]] = []
        self.gate = gate
        self.fail_on: set[str] = set()

    async def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if self.gate is not None:
            await self.gate.wait()
        if any(marker in text for marker in self.fail_on):
            raise TranslationError("Translation request failed: 503")
        return f"[{target_language}] {text}"

    async def aclose(self) -> None:
        pass


def make_pipeline(
    provider: FakeProvider | None = None,
    settings: SettingsHolder | None = None,
    limit: int = 2000,
) -> TranslationPipeline:
    return TranslationPipeline(
        provider or FakeProvider(),
        settings or SettingsHolder(Settings()),
        cache=BoundedCache(limit),
    )


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by `handler(request)`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))

