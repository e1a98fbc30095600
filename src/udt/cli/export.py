"""udt export command — translate a whole subtitle track to a file."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from udt.cli.utils import check_language, is_url
from udt.core.config import load_config
from udt.core.errors import UDTError
from udt.service.engine import build_engine
from udt.subtitles.export import save_bilingual_vtt, save_subtitles, translate_cues
from udt.subtitles.vtt import ensure_sorted, parse_vtt
from udt.utils.console import console


def export(
    track: Annotated[str, typer.Argument(help="Subtitle track URL or local .vtt file.")],
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Target language code."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path."),
    ] = None,
    fmt: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: vtt, srt, ass, txt."),
    ] = "vtt",
    bilingual: Annotated[
        bool,
        typer.Option("--bilingual", help="Write original and translation in one VTT."),
    ] = False,
) -> None:
    """Translate every cue of a subtitle track and save the result."""
    check_language(to)

    if not is_url(track) and not Path(track).is_file():
        console.print(f"[red]File not found:[/red] {track}")
        raise typer.Exit(1)

    config = load_config()

    async def _run():
        engine, _ = build_engine(config)
        async with engine:
            if is_url(track):
                cues = await engine.loader.load(track)
            else:
                cues = ensure_sorted(parse_vtt(Path(track).read_text(encoding="utf-8")))
            language = to or engine.settings.current.target_language
            console.print(f"[bold]Translating {len(cues)} cues to {language}...[/bold]")
            translated = await translate_cues(
                cues, engine.pipeline, language, max_concurrent=config.translation.max_concurrent
            )
            return cues, translated, language

    try:
        original, translated, language = asyncio.run(_run())
    except UDTError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if output is None:
        stem = Path(track).stem if not is_url(track) else "track"
        suffix = "vtt" if bilingual else fmt
        output = Path(f"{stem}.{language}.{suffix}")

    if bilingual:
        save_bilingual_vtt(original, translated, output)
    else:
        save_subtitles(translated, output, fmt=fmt)
    console.print(f"[green]Saved:[/green] {output}")
