"""Write translated subtitle tracks to disk.

Translated cues inherit timing from the originals. Sprite/thumbnail cues are
carried over untranslated.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pysubs2

from udt.core.models import Cue
from udt.subtitles.prefetch import is_linguistic
from udt.translate.pipeline import TranslationPipeline

MAX_CONCURRENT_TRANSLATIONS = 8


async def translate_cues(
    cues: list[Cue],
    pipeline: TranslationPipeline,
    target_language: str,
    max_concurrent: int = MAX_CONCURRENT_TRANSLATIONS,
) -> list[Cue]:
    """Translate every linguistic cue through the pipeline, keeping timestamps.

    At most `max_concurrent` provider requests are outstanding at once.
    """
    semaphore = asyncio.Semaphore(max_concurrent)

    async def _one(cue: Cue) -> Cue:
        if not is_linguistic(cue.text):
            return cue
        async with semaphore:
            translated = await pipeline.translate(cue.text, target_language)
        return Cue(start=cue.start, end=cue.end, text=translated or cue.text)

    return list(await asyncio.gather(*(_one(cue) for cue in cues)))


def save_subtitles(cues: list[Cue], path: Path, fmt: str = "vtt") -> Path:
    """Save cues to a subtitle file.

    Args:
        cues: Cues to write.
        path: Output file path.
        fmt: Format, one of "srt", "vtt", "ass", or "txt".

    Returns:
        The path the file was written to.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "txt":
        path.write_text("\n".join(cue.text for cue in cues), encoding="utf-8")
        return path

    subs = pysubs2.SSAFile()
    for cue in cues:
        subs.events.append(
            pysubs2.SSAEvent(
                start=pysubs2.make_time(s=cue.start),
                end=pysubs2.make_time(s=cue.end),
                text=cue.text,
            )
        )
    subs.save(str(path), format_=fmt)
    return path


def save_bilingual_vtt(
    original: list[Cue],
    translated: list[Cue],
    path: Path,
    original_line: str = "80%",
    translated_line: str = "90%",
) -> Path:
    """Save both lines in one VTT, translation stacked under the original.

    Each source cue yields two numbered cues sharing its timing, positioned
    with the `line:` cue setting.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    blocks = ["WEBVTT"]
    number = 0
    for orig, trans in zip(original, translated, strict=True):
        timing = f"{format_vtt_time(orig.start)} --> {format_vtt_time(orig.end)}"
        for text, line in ((orig.text, original_line), (trans.text, translated_line)):
            number += 1
            blocks.append(f"{number}\n{timing} line:{line}\n{text}")

    path.write_text("\n\n".join(blocks) + "\n", encoding="utf-8")
    return path


def format_vtt_time(seconds: float) -> str:
    """Format seconds as VTT timestamp (HH:MM:SS.mmm)."""
    total_ms = int(round(seconds * 1000))
    h, rem = divmod(total_ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"
