"""Lookahead translation of upcoming subtitle cues.

Given a subtitle track URL and the current playback time, the next few cues
are translated ahead of display so the on-demand path finds them cached.
"""

from __future__ import annotations

import asyncio
import re

import httpx

from udt.core.config import PrefetchConfig
from udt.core.errors import TrackLoadError
from udt.core.models import Cue, PrefetchItem
from udt.subtitles.vtt import ensure_sorted, find_cue_index, parse_vtt
from udt.translate.pipeline import TranslationPipeline
from udt.utils.cache import BoundedCache
from udt.utils.console import console

PREFETCH_WINDOW = 5
TRACK_CACHE_LIMIT = 5

# Thumbnail sprite tracks carry image references instead of speech
NON_LINGUISTIC_RE = re.compile(r"\.(?:png|jpe?g|webp|gif)\b|xywh=", re.IGNORECASE)


def is_linguistic(text: str) -> bool:
    """False for cue text that is an image sprite or pixel-region marker."""
    return not NON_LINGUISTIC_RE.search(text)


class TrackLoader:
    """Fetch and parse subtitle tracks, caching parsed cues per URL.

    Concurrent loads of the same URL share a single request.
    """

    def __init__(
        self,
        config: PrefetchConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        cache: BoundedCache[str, list[Cue]] | None = None,
    ) -> None:
        self.config = config or PrefetchConfig()
        self.cache = cache if cache is not None else BoundedCache(self.config.track_cache_limit)
        self._client = http_client
        self._owns_client = http_client is None
        self._in_flight: dict[str, asyncio.Task[list[Cue]]] = {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout), follow_redirects=True
            )
            self._owns_client = True
        return self._client

    async def load(self, url: str) -> list[Cue]:
        cached = self.cache.get(url)
        if cached is not None:
            return cached

        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._fetch(url))
            self._in_flight[url] = task
            task.add_done_callback(lambda done, url=url: self._release(url, done))
        return await asyncio.shield(task)

    def _release(self, url: str, task: asyncio.Task[list[Cue]]) -> None:
        if self._in_flight.get(url) is task:
            del self._in_flight[url]

    async def _fetch(self, url: str) -> list[Cue]:
        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            raise TrackLoadError(f"Subtitle track request failed: {e}") from e
        if not response.is_success:
            raise TrackLoadError(f"Subtitle track request failed: {response.status_code}")

        cues = ensure_sorted(parse_vtt(response.text))
        self.cache.set(url, cues)
        console.print(f"[dim]Loaded subtitle track:[/dim] {len(cues)} cues from {url}")
        return cues

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class PrefetchScheduler:
    """Translate the cues following the current playback position."""

    def __init__(
        self,
        pipeline: TranslationPipeline,
        loader: TrackLoader,
        window: int = PREFETCH_WINDOW,
    ) -> None:
        self.pipeline = pipeline
        self.loader = loader
        self.window = window

    def upcoming_texts(self, cues: list[Cue], current_time: float) -> list[str]:
        """Linguistic cue texts in the prefetch window starting at the anchor cue."""
        anchor = find_cue_index(current_time, cues)
        window = cues[anchor : anchor + self.window]
        return [cue.text for cue in window if is_linguistic(cue.text)]

    async def prefetch(
        self, track_url: str, target_language: str, current_time: float = 0.0
    ) -> list[PrefetchItem]:
        cues = await self.loader.load(track_url)
        texts = self.upcoming_texts(cues, current_time)
        if not texts:
            return []

        results = await asyncio.gather(
            *(self.pipeline.translate(text, target_language) for text in texts),
            return_exceptions=True,
        )

        # All translations settle before the first failure is raised
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return [
            PrefetchItem(text=text, translated_text=translated)
            for text, translated in zip(texts, results)
        ]
