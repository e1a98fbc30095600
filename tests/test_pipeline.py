"""Tests for the translation pipeline: caching, dedup, protection, invalidation."""

import asyncio

import pytest

from udt.core.errors import TranslationError
from udt.core.settings import Settings, SettingsHolder
from udt.translate.pipeline import preserve_terms_signature
from udt.utils.cache import translation_key
from tests.helpers import FakeProvider, make_pipeline


def test_second_call_is_cache_hit():
    provider = FakeProvider()
    pipeline = make_pipeline(provider)

    async def scenario():
        first = await pipeline.translate("Hello world", "ko")
        second = await pipeline.translate("Hello world", "ko")
        return first, second

    first, second = asyncio.run(scenario())
    assert first == second == "[ko] Hello world"
    assert len(provider.calls) == 1


def test_key_uses_trimmed_text_and_language():
    provider = FakeProvider()
    pipeline = make_pipeline(provider)

    async def scenario():
        await pipeline.translate("  Hello  ", "ko")
        await pipeline.translate("Hello", "ko")
        await pipeline.translate("Hello", "ja")

    asyncio.run(scenario())
    assert provider.calls == [("Hello", "ko"), ("Hello", "ja")]
    assert translation_key("ko", "Hello") in pipeline.cache


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_short_circuits(text):
    provider = FakeProvider()
    pipeline = make_pipeline(provider)
    assert asyncio.run(pipeline.translate(text, "ko")) == ""
    assert provider.calls == []
    assert len(pipeline.cache) == 0


def test_terms_protected_before_provider_and_restored_after():
    provider = FakeProvider()
    pipeline = make_pipeline(provider)

    result = asyncio.run(pipeline.translate("Install v1.2.3 of the API now.", "ko"))

    sent = provider.calls[0][0]
    assert sent == "Install __UDT_TERM_0__ of the __UDT_TERM_1__ now."
    assert result == "[ko] Install v1.2.3 of the API now."


def test_preserve_terms_from_settings_are_used():
    provider = FakeProvider()
    settings = SettingsHolder(Settings(preserve_terms=("decorator",)))
    pipeline = make_pipeline(provider, settings)

    asyncio.run(pipeline.translate("a decorator wraps it", "ko"))
    assert provider.calls[0][0] == "a __UDT_TERM_0__ wraps it"


def test_concurrent_identical_requests_share_one_fetch():
    async def scenario():
        provider = FakeProvider(gate=asyncio.Event())
        pipeline = make_pipeline(provider)

        first = asyncio.create_task(pipeline.translate("Hello", "ko"))
        second = asyncio.create_task(pipeline.translate("Hello", "ko"))
        await asyncio.sleep(0)
        pending = pipeline.in_flight

        provider.gate.set()
        results = await asyncio.gather(first, second)
        await asyncio.sleep(0)
        return provider, pipeline, pending, results

    provider, pipeline, pending, results = asyncio.run(scenario())
    assert pending == 1
    assert results == ["[ko] Hello", "[ko] Hello"]
    assert len(provider.calls) == 1
    assert pipeline.in_flight == 0


def test_failure_clears_in_flight_and_is_not_cached():
    provider = FakeProvider()
    provider.fail_on.add("Hello")
    pipeline = make_pipeline(provider)

    async def scenario():
        with pytest.raises(TranslationError):
            await pipeline.translate("Hello", "ko")
        await asyncio.sleep(0)
        assert pipeline.in_flight == 0
        assert len(pipeline.cache) == 0

        provider.fail_on.clear()
        return await pipeline.translate("Hello", "ko")

    assert asyncio.run(scenario()) == "[ko] Hello"
    assert len(provider.calls) == 2


def test_cancelled_waiter_does_not_cancel_fetch():
    async def scenario():
        provider = FakeProvider(gate=asyncio.Event())
        pipeline = make_pipeline(provider)

        waiter = asyncio.create_task(pipeline.translate("Hello", "ko"))
        await asyncio.sleep(0)
        waiter.cancel()
        await asyncio.sleep(0)

        provider.gate.set()
        result = await pipeline.translate("Hello", "ko")
        return provider, result

    provider, result = asyncio.run(scenario())
    assert result == "[ko] Hello"
    assert len(provider.calls) == 1


class TestInvalidation:
    def test_preserve_term_change_clears_cache(self):
        provider = FakeProvider()
        settings = SettingsHolder(Settings(preserve_terms=("Kubernetes",)))
        pipeline = make_pipeline(provider, settings)
        key = translation_key("ko", "Deploy to the cluster")

        asyncio.run(pipeline.translate("Deploy to the cluster", "ko"))
        assert key in pipeline.cache

        settings.update(preserve_terms=("Kubernetes", "cluster"))
        assert pipeline.cache.get(key) is None

        asyncio.run(pipeline.translate("Deploy to the cluster", "ko"))
        assert provider.calls[-1][0] == "Deploy to the __UDT_TERM_0__"

    def test_equivalent_term_sets_keep_cache(self):
        settings = SettingsHolder(Settings(preserve_terms=("Docker", "Helm")))
        pipeline = make_pipeline(settings=settings)
        asyncio.run(pipeline.translate("hello", "ko"))

        settings.update(preserve_terms=("helm", " DOCKER "))
        assert len(pipeline.cache) == 1

    def test_unrelated_setting_change_keeps_cache(self):
        settings = SettingsHolder(Settings())
        pipeline = make_pipeline(settings=settings)
        asyncio.run(pipeline.translate("hello", "ko"))

        settings.update(target_language="ja", enabled=False)
        assert len(pipeline.cache) == 1

    def test_fetch_in_flight_during_change_is_not_stored(self):
        async def scenario():
            provider = FakeProvider(gate=asyncio.Event())
            settings = SettingsHolder(Settings())
            pipeline = make_pipeline(provider, settings)

            task = asyncio.create_task(pipeline.translate("hello", "ko"))
            await asyncio.sleep(0)
            settings.update(preserve_terms=("hello",))
            provider.gate.set()
            return pipeline, await task

        pipeline, result = asyncio.run(scenario())
        assert result == "[ko] hello"
        assert len(pipeline.cache) == 0


def test_signature_is_case_and_order_insensitive():
    assert preserve_terms_signature(["B", "a"]) == preserve_terms_signature(["A", "b", " a "])
    assert preserve_terms_signature([]) == preserve_terms_signature(["", "  "])
    assert preserve_terms_signature(["a"]) != preserve_terms_signature(["a", "b"])
