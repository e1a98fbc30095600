"""HTTP client for the public machine-translation endpoint.

The endpoint takes auto source detection (`sl=auto`), a target language
(`tl`) and the text (`q`), and answers with nested arrays whose first element
lists `[translatedSegment, originalSegment, ...]` entries.
"""

from __future__ import annotations

import httpx

from udt.core.config import TranslationConfig
from udt.core.errors import TranslationError


def extract_translation(payload: object) -> str:
    """Concatenate translated segments from a provider response.

    Unexpected shapes degrade to empty segments instead of raising.
    """
    if not isinstance(payload, list) or not payload:
        return ""
    segments = payload[0]
    if not isinstance(segments, list):
        return ""

    parts = []
    for segment in segments:
        if isinstance(segment, list) and segment and isinstance(segment[0], str):
            parts.append(segment[0])
    return "".join(parts).strip()


class TranslationProvider:
    """Async client for the translation endpoint.

    The caller owns `http_client` when passing one in; otherwise a client is
    created lazily and closed by `aclose()`.
    """

    def __init__(
        self,
        config: TranslationConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or TranslationConfig()
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))
            self._owns_client = True
        return self._client

    async def translate(self, text: str, target_language: str) -> str:
        """Translate text, raising TranslationError on transport or HTTP failure."""
        params = {
            "client": self.config.client,
            "sl": "auto",
            "tl": target_language,
            "dt": "t",
            "q": text,
        }
        try:
            response = await self._get_client().get(self.config.endpoint, params=params)
        except httpx.HTTPError as e:
            raise TranslationError(f"Translation request failed: {e}") from e

        if not response.is_success:
            raise TranslationError(f"Translation request failed: {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return extract_translation(payload)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
