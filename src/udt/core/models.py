"""Shared data models for udt."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Cue:
    """One timed caption entry parsed from a subtitle track."""

    start: float  # seconds
    end: float  # seconds
    text: str


@dataclass(frozen=True)
class ProtectedRange:
    """Half-open span [start, end) of the source text kept out of translation."""

    start: int
    end: int
    text: str


@dataclass(frozen=True)
class ProtectedTerm:
    """A placeholder token and the original substring it stands in for."""

    token: str
    term: str


@dataclass
class PrefetchItem:
    """An upcoming cue text paired with its translation."""

    text: str
    translated_text: str
