"""udt prefetch command — translate the cues ahead of a playback position."""

from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import typer
from rich.table import Table

from udt.cli.utils import check_language
from udt.core.config import load_config
from udt.core.messages import ErrorResult, PrefetchVttRequest
from udt.service.engine import build_engine
from udt.utils.console import console


def prefetch(
    url: Annotated[str, typer.Argument(help="Subtitle track (WebVTT) URL.")],
    time: Annotated[
        float,
        typer.Option("--time", help="Current playback time in seconds.", min=0.0),
    ] = 0.0,
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Target language code."),
    ] = None,
    window: Annotated[
        Optional[int],
        typer.Option("--window", "-w", help="Number of upcoming cues to translate."),
    ] = None,
) -> None:
    """Pre-translate the next cues of a subtitle track."""
    check_language(to)
    overrides = {}
    if window is not None:
        overrides["prefetch.window"] = window
    config = load_config(**overrides)

    async def _run():
        engine, _ = build_engine(config)
        async with engine:
            language = to or engine.settings.current.target_language
            return await engine.dispatcher.dispatch(
                PrefetchVttRequest(url=url, target_language=language, current_time=time)
            )

    result = asyncio.run(_run())
    if isinstance(result, ErrorResult):
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)

    if not result.items:
        console.print("[dim]No upcoming cues to translate.[/dim]")
        return

    table = Table(title=f"Prefetched cues ({len(result.items)})")
    table.add_column("Original")
    table.add_column("Translation", style="bold cyan")
    for item in result.items:
        table.add_row(item.text, item.translated_text)
    console.print(table)
