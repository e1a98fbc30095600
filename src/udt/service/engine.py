"""Wiring of the translation services from configuration and settings."""

from __future__ import annotations

import httpx

from udt.core.config import UDTConfig
from udt.core.messages import dump_result
from udt.core.settings import Settings, SettingsFile, SettingsHolder
from udt.service.dispatcher import CommandDispatcher
from udt.service.overlay import CaptionOverlay
from udt.subtitles.prefetch import PrefetchScheduler, TrackLoader
from udt.translate.pipeline import TranslationPipeline
from udt.translate.provider import TranslationProvider
from udt.utils.cache import BoundedCache


def default_settings(config: UDTConfig) -> Settings:
    return Settings(
        enabled=config.defaults.enabled,
        target_language=config.defaults.target_language,
    )


class Engine:
    """All services sharing one translation cache and one settings holder.

    Pass `http_client` to route both provider and track requests through a
    caller-owned client (tests use an httpx.MockTransport).
    """

    def __init__(
        self,
        config: UDTConfig,
        settings: SettingsHolder | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or SettingsHolder(default_settings(config))

        self.provider = TranslationProvider(config.translation, http_client=http_client)
        self.pipeline = TranslationPipeline(
            self.provider,
            self.settings,
            cache=BoundedCache(config.translation.cache_limit),
        )
        self.loader = TrackLoader(
            config.prefetch,
            http_client=http_client,
            cache=BoundedCache(config.prefetch.track_cache_limit),
        )
        self.scheduler = PrefetchScheduler(
            self.pipeline, self.loader, window=config.prefetch.window
        )
        self.dispatcher = CommandDispatcher(
            self.pipeline,
            self.scheduler,
            default_language=config.defaults.target_language,
        )
        self.overlay = CaptionOverlay(
            self.dispatcher,
            self.settings,
            cache=BoundedCache(config.translation.display_cache_limit),
        )

    async def handle(self, message: object) -> dict:
        """Dispatch a raw message and return the wire-shaped result."""
        return dump_result(await self.dispatcher.dispatch(message))

    async def aclose(self) -> None:
        await self.provider.aclose()
        await self.loader.aclose()

    async def __aenter__(self) -> Engine:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def build_engine(config: UDTConfig) -> tuple[Engine, SettingsFile]:
    """Create an engine whose settings are loaded from the configured settings file."""
    store = SettingsFile(config.settings_path, defaults=default_settings(config))
    holder = SettingsHolder(store.read())
    return Engine(config, settings=holder), store
