"""Command dispatch at the messaging boundary.

A single entry point validates an incoming message, routes it to the
translation pipeline or the prefetch scheduler, and wraps the outcome in a
success or error result. Network failures become error results; nothing is
retried.
"""

from __future__ import annotations

from pydantic import ValidationError

from udt.core.errors import UDTError
from udt.core.messages import (
    ErrorResult,
    PrefetchVttRequest,
    PrefetchVttResult,
    Request,
    Result,
    TranslatedItem,
    TranslateTextRequest,
    TranslateTextResult,
    request_adapter,
)
from udt.core.languages import DEFAULT_TARGET_LANGUAGE
from udt.subtitles.prefetch import PrefetchScheduler
from udt.translate.pipeline import TranslationPipeline


def parse_request(message: object) -> Request:
    """Validate a raw message dict into a typed request (raises ValidationError)."""
    return request_adapter.validate_python(message)


class CommandDispatcher:
    def __init__(
        self,
        pipeline: TranslationPipeline,
        scheduler: PrefetchScheduler,
        default_language: str = DEFAULT_TARGET_LANGUAGE,
    ) -> None:
        self.pipeline = pipeline
        self.scheduler = scheduler
        self.default_language = default_language

    async def dispatch(self, message: object) -> Result:
        if isinstance(message, (TranslateTextRequest, PrefetchVttRequest)):
            request = message
        else:
            try:
                request = parse_request(message)
            except ValidationError as e:
                return ErrorResult(error=_describe_invalid(message, e))

        try:
            return await self._route(request)
        except UDTError as e:
            return ErrorResult(error=str(e))

    async def _route(self, request: Request) -> Result:
        language = request.target_language or self.default_language
        match request:
            case TranslateTextRequest(text=text):
                translated = await self.pipeline.translate(text, language)
                return TranslateTextResult(translated_text=translated)
            case PrefetchVttRequest(url=url, current_time=current_time):
                items = await self.scheduler.prefetch(url, language, current_time)
                return PrefetchVttResult(
                    items=[
                        TranslatedItem(text=item.text, translated_text=item.translated_text)
                        for item in items
                    ]
                )
        raise TypeError(f"Unhandled request: {request!r}")


def _describe_invalid(message: object, error: ValidationError) -> str:
    kind = message.get("type") if isinstance(message, dict) else None
    if kind not in ("TRANSLATE_TEXT", "PREFETCH_VTT"):
        return f"Unsupported message type: {kind!r}"
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"][1:]) or "message"
    return f"Invalid {kind} message: {field}: {first['msg']}"
