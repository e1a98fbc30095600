"""Display-side caption translation.

The page-facing half of the system: for each caption slot on screen it asks
the engine for a translation of the current caption text and hands back the
string to render beneath it. Rendering itself belongs to the host. Failures
yield an empty string so the overlay simply stays blank until the next
caption change retries.
"""

from __future__ import annotations

from dataclasses import dataclass

from udt.core.messages import (
    PrefetchVttRequest,
    PrefetchVttResult,
    TranslateTextRequest,
    TranslateTextResult,
)
from udt.core.settings import Settings, SettingsHolder
from udt.service.dispatcher import CommandDispatcher
from udt.translate.pipeline import preserve_terms_signature
from udt.utils.cache import BoundedCache, translation_key

DISPLAY_CACHE_LIMIT = 1500


@dataclass(frozen=True)
class _Rendered:
    source: str
    language: str
    translated: str


class CaptionOverlay:
    """Resolve translated lines for caption slots, with a local display cache."""

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        settings: SettingsHolder,
        cache: BoundedCache[str, str] | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.settings = settings
        self.cache = cache if cache is not None else BoundedCache(DISPLAY_CACHE_LIMIT)
        self._rendered: dict[str, _Rendered] = {}
        self._terms_signature = preserve_terms_signature(settings.current.preserve_terms)
        settings.on_change(self._on_settings_changed)

    def _on_settings_changed(self, settings: Settings) -> None:
        signature = preserve_terms_signature(settings.preserve_terms)
        if signature != self._terms_signature:
            self._terms_signature = signature
            self.cache.clear()
            self._rendered.clear()

    async def render(self, slot: str, source_text: str) -> str:
        """Translated line for a caption slot, or "" when nothing should be shown."""
        settings = self.settings.current
        if not settings.enabled:
            self._rendered.pop(slot, None)
            return ""

        source = source_text.strip()
        if not source:
            return ""

        language = settings.target_language
        previous = self._rendered.get(slot)
        if previous and previous.source == source and previous.language == language:
            return previous.translated

        translated = await self.request_translation(source, language)
        if translated:
            self._rendered[slot] = _Rendered(source, language, translated)
        return translated

    async def request_translation(self, text: str, language: str) -> str:
        key = translation_key(language, text)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = await self.dispatcher.dispatch(
            TranslateTextRequest(text=text, target_language=language)
        )
        if not isinstance(result, TranslateTextResult):
            return ""
        if result.translated_text:
            self.cache.set(key, result.translated_text)
        return result.translated_text

    async def prefetch(self, track_url: str, current_time: float) -> int:
        """Prefetch upcoming cues and prime the display cache.

        Returns the number of cached items; failures are treated as zero.
        """
        if not self.settings.current.enabled:
            return 0
        language = self.settings.current.target_language
        result = await self.dispatcher.dispatch(
            PrefetchVttRequest(url=track_url, target_language=language, current_time=current_time)
        )
        if not isinstance(result, PrefetchVttResult):
            return 0
        return self.prime([(i.text, i.translated_text) for i in result.items], language)

    def prime(self, items: list[tuple[str, str]], language: str) -> int:
        count = 0
        for text, translated in items:
            if text.strip() and translated:
                self.cache.set(translation_key(language, text), translated)
                count += 1
        return count

    def forget(self, slot: str) -> None:
        self._rendered.pop(slot, None)
