"""Typed requests and results exchanged at the messaging boundary.

Wire shape uses camelCase keys, e.g.::

    {"type": "TRANSLATE_TEXT", "text": "...", "targetLanguage": "ko"}
    {"type": "PREFETCH_VTT", "url": "...", "targetLanguage": "ko", "currentTime": 12.5}
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class _Message(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranslateTextRequest(_Message):
    type: Literal["TRANSLATE_TEXT"] = "TRANSLATE_TEXT"
    text: str = ""
    target_language: str | None = None

    @field_validator("text", mode="before")
    @classmethod
    def null_text_is_empty(cls, value: object) -> object:
        return "" if value is None else value


class PrefetchVttRequest(_Message):
    type: Literal["PREFETCH_VTT"] = "PREFETCH_VTT"
    url: str
    target_language: str | None = None
    current_time: float = Field(default=0.0, ge=0.0)


Request = Annotated[
    Union[TranslateTextRequest, PrefetchVttRequest],
    Field(discriminator="type"),
]

request_adapter: TypeAdapter[Request] = TypeAdapter(Request)


class CaptionRequest(_Message):
    """A caption slot's current text, answered with the line to render under it."""

    slot: str = "main"
    text: str = ""


class CaptionPrefetchRequest(_Message):
    url: str
    current_time: float = Field(default=0.0, ge=0.0)


class TranslatedItem(_Message):
    text: str
    translated_text: str


class TranslateTextResult(_Message):
    ok: Literal[True] = True
    translated_text: str


class PrefetchVttResult(_Message):
    ok: Literal[True] = True
    items: list[TranslatedItem]


class ErrorResult(_Message):
    ok: Literal[False] = False
    error: str


Result = Union[TranslateTextResult, PrefetchVttResult, ErrorResult]


def dump_result(result: Result) -> dict:
    """Serialize a result to its camelCase wire shape."""
    return result.model_dump(by_alias=True)
