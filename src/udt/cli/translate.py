"""udt translate command — translate a caption line."""

from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import typer

from udt.cli.utils import check_language
from udt.core.config import load_config
from udt.core.messages import ErrorResult, TranslateTextRequest
from udt.service.engine import build_engine
from udt.utils.console import console


def translate(
    text: Annotated[str, typer.Argument(help="Caption text to translate.")],
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Target language code (run 'udt languages' to list)."),
    ] = None,
) -> None:
    """Translate text with technical terms protected."""
    check_language(to)
    config = load_config()

    async def _run():
        engine, _ = build_engine(config)
        async with engine:
            language = to or engine.settings.current.target_language
            return await engine.dispatcher.dispatch(
                TranslateTextRequest(text=text, target_language=language)
            )

    result = asyncio.run(_run())
    if isinstance(result, ErrorResult):
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)
    console.print(result.translated_text, markup=False, highlight=False)
