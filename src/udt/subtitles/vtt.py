"""WebVTT parsing and time-indexed cue lookup.

Parsing is tolerant: blocks with malformed timing lines are skipped rather
than aborting the whole document, and an empty result is a valid outcome.
"""

from __future__ import annotations

import html
import re

from udt.core.models import Cue
from udt.utils.console import console

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_ARROW = "-->"


def parse_timestamp(value: str) -> float | None:
    """Parse a `[[HH:]MM:]SS[.mmm]` timestamp into seconds.

    Missing hour/minute components default to 0. The fraction is padded or
    truncated to exactly three digits. Returns None when malformed.
    """
    value = value.strip()
    if not value:
        return None

    parts = value.split(":")
    if len(parts) > 3:
        return None

    seconds_part = parts[-1]
    whole, _, fraction = seconds_part.partition(".")
    fields = parts[:-1] + [whole]
    if not all(f.isascii() and f.isdigit() for f in fields):
        return None
    if fraction and not (fraction.isascii() and fraction.isdigit()):
        return None

    hours, minutes = 0, 0
    if len(fields) == 3:
        hours, minutes = int(fields[0]), int(fields[1])
    elif len(fields) == 2:
        minutes = int(fields[0])
    millis = int(fraction[:3].ljust(3, "0")) if fraction else 0
    return hours * 3600 + minutes * 60 + int(fields[-1]) + millis / 1000


def _parse_timing(line: str) -> tuple[float, float] | None:
    start_raw, _, end_raw = line.partition(_ARROW)
    end_tokens = end_raw.split()
    if not end_tokens:
        return None
    # Trailing cue settings (line:85%, align:start, ...) are ignored
    start = parse_timestamp(start_raw)
    end = parse_timestamp(end_tokens[0])
    if start is None or end is None or end < start:
        return None
    return start, end


def clean_cue_text(lines: list[str]) -> str:
    """Join cue payload lines, strip markup tags and collapse whitespace."""
    text = " ".join(lines)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_vtt(document: str) -> list[Cue]:
    """Parse a WebVTT document into cues, in source order."""
    lines = document.lstrip("\ufeff").splitlines()
    if lines and lines[0].strip().startswith("WEBVTT"):
        lines = lines[1:]

    cues: list[Cue] = []
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        i += 1
        # Anything before a timing line (cue ids, NOTE/STYLE blocks) is skipped
        if _ARROW not in line:
            continue

        timing = _parse_timing(line)
        payload: list[str] = []
        while i < len(lines) and lines[i].strip():
            if _ARROW in lines[i]:
                break
            payload.append(lines[i].strip())
            i += 1

        if timing is None:
            continue
        text = clean_cue_text(payload)
        if text:
            cues.append(Cue(start=timing[0], end=timing[1], text=text))

    return cues


def ensure_sorted(cues: list[Cue]) -> list[Cue]:
    """Return cues ordered by start time.

    Binary search in find_cue_index relies on this ordering. Already sorted
    input is returned as-is; otherwise a stable sorted copy is returned.
    """
    if all(a.start <= b.start for a, b in zip(cues, cues[1:])):
        return cues
    console.print("[yellow]Subtitle track cues are out of order, sorting by start time.[/yellow]")
    return sorted(cues, key=lambda cue: cue.start)


def find_cue_index(time: float, cues: list[Cue]) -> int:
    """Binary-search the cue whose [start, end] contains `time`.

    Returns that cue's index, or the index of the next upcoming cue when no
    cue contains `time` (len(cues) when `time` is past the last cue).
    """
    low, high = 0, len(cues) - 1
    while low <= high:
        mid = (low + high) // 2
        cue = cues[mid]
        if time < cue.start:
            high = mid - 1
        elif time > cue.end:
            low = mid + 1
        else:
            return mid
    return min(low, len(cues))
