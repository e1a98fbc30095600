"""Technical term protection for machine translation.

Identifiers, code, version strings and user-declared terms are swapped for
opaque placeholder tokens before text goes to the translation provider, and
swapped back afterwards. Three sources feed the candidate ranges:

- user preserve terms, matched case-insensitively on word boundaries
- inline code between backticks
- tokens that score as "technical" under SCORING_RULES

Overlapping candidates are resolved left to right, longest first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable

from udt.core.models import ProtectedRange, ProtectedTerm

PLACEHOLDER_TEMPLATE = "__UDT_TERM_{index}__"
PROTECT_THRESHOLD = 2

_TOKEN_RE = re.compile(r"[A-Za-z0-9_]+(?:[./-][A-Za-z0-9_]+)*")
_INLINE_CODE_RE = re.compile(r"`[^`]+`")
_ASCII_WORD_RE = re.compile(r"[A-Za-z0-9_]")

_ACRONYM_RE = re.compile(r"^[A-Z][A-Z0-9]*(?:[./-][A-Z0-9]+)*$")
_CAMEL_RE = re.compile(r"[a-z]+[A-Z]")
_BRAND_RE = re.compile(r"^[A-Z]{2,}[a-z][A-Za-z0-9]*$")
_TITLE_RE = re.compile(r"^[A-Z][a-z]+$")
_VERSION_RE = re.compile(r"^v\d+(?:\.\d+)+$", re.IGNORECASE)
_PLAIN_WORD_RE = re.compile(r"^[a-z]+(?:-[a-z]+)*$")
_NUMERIC_RE = re.compile(r"^\d+(?:\.\d+)?$")

_SENTENCE_END = ".!?:"


@dataclass(frozen=True)
class TokenContext:
    """A candidate token with its position in the source text."""

    token: str
    text: str
    start: int

    @property
    def is_acronym(self) -> bool:
        return len(self.token) >= 2 and bool(_ACRONYM_RE.match(self.token))

    @property
    def at_sentence_start(self) -> bool:
        preceding = self.text[: self.start].rstrip()
        return not preceding or preceding[-1] in _SENTENCE_END


@dataclass(frozen=True)
class ScoringRule:
    name: str
    delta: int
    applies: Callable[[TokenContext], bool]


SCORING_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("acronym", 2, lambda c: c.is_acronym),
    ScoringRule("camel_case", 2, lambda c: bool(_CAMEL_RE.search(c.token))),
    ScoringRule("acronym_brand", 2, lambda c: bool(_BRAND_RE.match(c.token))),
    ScoringRule(
        "title_case_mid_sentence",
        1,
        lambda c: bool(_TITLE_RE.match(c.token)) and not c.at_sentence_start,
    ),
    ScoringRule("has_digit", 1, lambda c: any(ch.isdigit() for ch in c.token)),
    ScoringRule("has_path_chars", 1, lambda c: any(ch in "./_" for ch in c.token)),
    ScoringRule(
        "hyphen_with_upper_or_digit",
        1,
        lambda c: "-" in c.token and any(ch.isupper() or ch.isdigit() for ch in c.token),
    ),
    ScoringRule("version", 2, lambda c: bool(_VERSION_RE.match(c.token))),
    ScoringRule("plain_lowercase_word", -2, lambda c: bool(_PLAIN_WORD_RE.match(c.token))),
    ScoringRule("short_non_acronym", -1, lambda c: len(c.token) <= 2 and not c.is_acronym),
    ScoringRule("numeric", -2, lambda c: bool(_NUMERIC_RE.match(c.token))),
    ScoringRule(
        "mixed_case",
        1,
        lambda c: any(ch.isupper() for ch in c.token) and any(ch.islower() for ch in c.token),
    ),
)


def score_token(token: str, text: str = "", start: int = 0) -> int:
    """Sum the deltas of every scoring rule that applies to a token."""
    context = TokenContext(token=token, text=text or token, start=start)
    return sum(rule.delta for rule in SCORING_RULES if rule.applies(context))


def is_boundary_safe(text: str, start: int, end: int) -> bool:
    """True if the characters just outside [start, end) are not ASCII word characters."""
    if start > 0 and _ASCII_WORD_RE.match(text[start - 1]):
        return False
    if end < len(text) and _ASCII_WORD_RE.match(text[end]):
        return False
    return True


def _preserve_term_candidates(text: str, preserve_terms: Iterable[str]) -> list[ProtectedRange]:
    candidates = []
    for term in preserve_terms:
        term = term.strip()
        if not term:
            continue
        for match in re.finditer(re.escape(term), text, re.IGNORECASE):
            if is_boundary_safe(text, match.start(), match.end()):
                candidates.append(ProtectedRange(match.start(), match.end(), match.group()))
    return candidates


def _inline_code_candidates(text: str) -> list[ProtectedRange]:
    return [
        ProtectedRange(m.start(), m.end(), m.group()) for m in _INLINE_CODE_RE.finditer(text)
    ]


def _technical_token_candidates(text: str) -> list[ProtectedRange]:
    candidates = []
    for match in _TOKEN_RE.finditer(text):
        if score_token(match.group(), text, match.start()) < PROTECT_THRESHOLD:
            continue
        if is_boundary_safe(text, match.start(), match.end()):
            candidates.append(ProtectedRange(match.start(), match.end(), match.group()))
    return candidates


def resolve_overlaps(candidates: Iterable[ProtectedRange]) -> list[ProtectedRange]:
    """Select non-overlapping ranges, earliest start first and longest on ties."""
    selected: list[ProtectedRange] = []
    last_end = 0
    for candidate in sorted(candidates, key=lambda r: (r.start, -r.end)):
        if candidate.start < last_end:
            continue
        selected.append(candidate)
        last_end = candidate.end
    return selected


def find_protected_ranges(text: str, preserve_terms: Iterable[str] = ()) -> list[ProtectedRange]:
    """Find the resolved, sorted ranges of text that must not be translated."""
    candidates = (
        _preserve_term_candidates(text, preserve_terms)
        + _inline_code_candidates(text)
        + _technical_token_candidates(text)
    )
    return resolve_overlaps(candidates)


def protect(text: str, preserve_terms: Iterable[str] = ()) -> tuple[str, list[ProtectedTerm]]:
    """Replace protected ranges with placeholder tokens.

    Returns:
        Tuple of (protected text, terms) where terms are in order of appearance.
    """
    ranges = find_protected_ranges(text, preserve_terms)
    if not ranges:
        return text, []

    parts: list[str] = []
    terms: list[ProtectedTerm] = []
    cursor = 0
    for index, protected in enumerate(ranges):
        token = PLACEHOLDER_TEMPLATE.format(index=index)
        parts.append(text[cursor : protected.start])
        parts.append(token)
        terms.append(ProtectedTerm(token=token, term=protected.text))
        cursor = protected.end
    parts.append(text[cursor:])
    return "".join(parts), terms


def restore(text: str, terms: Iterable[ProtectedTerm]) -> str:
    """Put original terms back in place of every occurrence of their tokens."""
    for term in terms:
        text = text.replace(term.token, term.term)
    return text
