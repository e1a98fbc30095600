"""Cached, term-protected translation of caption text."""

from __future__ import annotations

import asyncio
from typing import Iterable

from udt.core.settings import Settings, SettingsHolder
from udt.translate.provider import TranslationProvider
from udt.translate.terms import protect, restore
from udt.utils.cache import BoundedCache, translation_key
from udt.utils.console import console

TRANSLATION_CACHE_LIMIT = 2000


def preserve_terms_signature(terms: Iterable[str]) -> str:
    """Case-insensitive, order-independent signature of a preserve-term set."""
    normalized = {term.strip().lower() for term in terms if term.strip()}
    return "\n".join(sorted(normalized))


class TranslationPipeline:
    """Translate text through a shared cache, deduplicating concurrent requests.

    Concurrent calls for the same (language, text) key share one provider
    request. The cache is cleared whenever the preserve-term set changes,
    since cached translations were produced under the old protection set.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        settings: SettingsHolder,
        cache: BoundedCache[str, str] | None = None,
    ) -> None:
        self.provider = provider
        self.settings = settings
        self.cache = cache if cache is not None else BoundedCache(TRANSLATION_CACHE_LIMIT)
        self._in_flight: dict[str, asyncio.Task[str]] = {}
        self._generation = 0
        self._terms_signature = preserve_terms_signature(settings.current.preserve_terms)
        settings.on_change(self.on_settings_changed)

    def on_settings_changed(self, settings: Settings) -> None:
        signature = preserve_terms_signature(settings.preserve_terms)
        if signature == self._terms_signature:
            return
        self._terms_signature = signature
        self.invalidate()
        console.print("[dim]Preserve terms changed, translation cache cleared.[/dim]")

    def invalidate(self) -> None:
        """Drop cached translations; fetches already in flight will not be stored."""
        self.cache.clear()
        self._in_flight.clear()
        self._generation += 1

    async def translate(self, text: str, target_language: str) -> str:
        source = text.strip()
        if not source:
            return ""

        key = translation_key(target_language, source)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._fetch(key, source, target_language, self._generation)
            )
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))

        # Shielded so a caller that stops waiting leaves the fetch running
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[str]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _fetch(
        self, key: str, source: str, target_language: str, generation: int
    ) -> str:
        protected_text, terms = protect(source, self.settings.current.preserve_terms)
        translated = await self.provider.translate(protected_text, target_language)
        result = restore(translated.strip(), terms)
        if generation == self._generation:
            self.cache.set(key, result)
        return result

    @property
    def in_flight(self) -> int:
        """Number of provider requests currently pending."""
        return len(self._in_flight)
