"""Tests for the command dispatcher and engine wiring."""

import asyncio

import httpx
import pytest

from udt.core.config import UDTConfig
from udt.core.messages import (
    ErrorResult,
    PrefetchVttRequest,
    TranslateTextRequest,
    TranslateTextResult,
    dump_result,
)
from udt.service.dispatcher import CommandDispatcher
from udt.service.engine import Engine
from udt.subtitles.prefetch import PrefetchScheduler, TrackLoader
from tests.helpers import FakeProvider, make_pipeline, mock_client

TRACK_URL = "https://cdn.example.com/lecture.vtt"
TRACK = "WEBVTT\n\n00:01.000 --> 00:02.000\nHello\n\n00:03.000 --> 00:04.000\nWorld\n"


def _dispatcher(provider: FakeProvider | None = None, default_language: str = "ko"):
    provider = provider or FakeProvider()

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TRACK_URL:
            return httpx.Response(200, text=TRACK)
        return httpx.Response(404)

    pipeline = make_pipeline(provider)
    loader = TrackLoader(http_client=mock_client(handler))
    scheduler = PrefetchScheduler(pipeline, loader)
    return CommandDispatcher(pipeline, scheduler, default_language=default_language), provider


def _dispatch(dispatcher: CommandDispatcher, message) -> dict:
    return dump_result(asyncio.run(dispatcher.dispatch(message)))


class TestTranslateText:
    def test_ok(self):
        dispatcher, _ = _dispatcher()
        result = _dispatch(dispatcher, {"type": "TRANSLATE_TEXT", "text": "Hi", "targetLanguage": "ja"})
        assert result == {"ok": True, "translatedText": "[ja] Hi"}

    def test_default_language(self):
        dispatcher, provider = _dispatcher(default_language="fr")
        _dispatch(dispatcher, {"type": "TRANSLATE_TEXT", "text": "Hi"})
        assert provider.calls == [("Hi", "fr")]

    def test_missing_text_is_empty(self):
        dispatcher, provider = _dispatcher()
        assert _dispatch(dispatcher, {"type": "TRANSLATE_TEXT"}) == {
            "ok": True,
            "translatedText": "",
        }
        assert provider.calls == []

    def test_null_text_is_empty(self):
        dispatcher, provider = _dispatcher()
        result = _dispatch(dispatcher, {"type": "TRANSLATE_TEXT", "text": None})
        assert result == {"ok": True, "translatedText": ""}
        assert provider.calls == []

    def test_typed_request_accepted(self):
        dispatcher, _ = _dispatcher()
        result = asyncio.run(dispatcher.dispatch(TranslateTextRequest(text="Hi")))
        assert isinstance(result, TranslateTextResult)
        assert result.translated_text == "[ko] Hi"

    def test_provider_failure_becomes_error_result(self):
        provider = FakeProvider()
        provider.fail_on.add("Hi")
        dispatcher, _ = _dispatcher(provider)
        result = _dispatch(dispatcher, {"type": "TRANSLATE_TEXT", "text": "Hi"})
        assert result == {"ok": False, "error": "Translation request failed: 503"}


class TestPrefetchVtt:
    def test_ok_with_default_time(self):
        dispatcher, _ = _dispatcher()
        result = _dispatch(dispatcher, {"type": "PREFETCH_VTT", "url": TRACK_URL})
        assert result == {
            "ok": True,
            "items": [
                {"text": "Hello", "translatedText": "[ko] Hello"},
                {"text": "World", "translatedText": "[ko] World"},
            ],
        }

    def test_current_time(self):
        dispatcher, _ = _dispatcher()
        message = PrefetchVttRequest(url=TRACK_URL, target_language="ja", current_time=2.5)
        result = dump_result(asyncio.run(dispatcher.dispatch(message)))
        assert result["items"] == [{"text": "World", "translatedText": "[ja] World"}]

    def test_provider_down_becomes_error_result(self):
        provider = FakeProvider()
        provider.fail_on.update({"Hello", "World"})
        dispatcher, _ = _dispatcher(provider)
        result = _dispatch(dispatcher, {"type": "PREFETCH_VTT", "url": TRACK_URL})
        assert result == {"ok": False, "error": "Translation request failed: 503"}

    def test_track_failure_becomes_error_result(self):
        dispatcher, _ = _dispatcher()
        result = _dispatch(
            dispatcher, {"type": "PREFETCH_VTT", "url": "https://cdn.example.com/missing.vtt"}
        )
        assert result == {"ok": False, "error": "Subtitle track request failed: 404"}


class TestInvalidMessages:
    @pytest.mark.parametrize("message", [{}, {"type": "PING"}, "not a dict", None])
    def test_unsupported_type(self, message):
        dispatcher, _ = _dispatcher()
        result = asyncio.run(dispatcher.dispatch(message))
        assert isinstance(result, ErrorResult)
        assert "Unsupported message type" in result.error

    def test_missing_url(self):
        dispatcher, _ = _dispatcher()
        result = _dispatch(dispatcher, {"type": "PREFETCH_VTT"})
        assert result["ok"] is False
        assert "url" in result["error"]

    def test_negative_time_rejected(self):
        dispatcher, _ = _dispatcher()
        result = _dispatch(dispatcher, {"type": "PREFETCH_VTT", "url": TRACK_URL, "currentTime": -1})
        assert result["ok"] is False
        assert "currentTime" in result["error"]


def test_engine_end_to_end():
    """Provider and track requests both go through the injected client."""
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.host)
        if request.url.host == "translate.googleapis.com":
            text = request.url.params["q"]
            return httpx.Response(200, json=[[[f"<{text}>", text]]])
        return httpx.Response(200, text=TRACK)

    async def scenario():
        async with Engine(UDTConfig(), http_client=mock_client(handler)) as engine:
            prefetched = await engine.handle(
                {"type": "PREFETCH_VTT", "url": TRACK_URL, "currentTime": 0}
            )
            on_demand = await engine.handle({"type": "TRANSLATE_TEXT", "text": "Hello"})
            return prefetched, on_demand

    prefetched, on_demand = asyncio.run(scenario())
    assert prefetched["items"][0] == {"text": "Hello", "translatedText": "<Hello>"}
    assert on_demand == {"ok": True, "translatedText": "<Hello>"}
    # one track fetch, two translations, no repeat for the on-demand hit
    assert requests.count("translate.googleapis.com") == 2
    assert requests.count("cdn.example.com") == 1
