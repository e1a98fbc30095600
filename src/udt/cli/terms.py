"""udt terms command — show what would be protected from translation."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.table import Table

from udt.core.config import load_config
from udt.core.settings import SettingsFile
from udt.translate.terms import find_protected_ranges, protect, score_token
from udt.utils.console import console


def terms(
    text: Annotated[str, typer.Argument(help="Text to analyse.")],
    preserve: Annotated[
        Optional[list[str]],
        typer.Option("--preserve", "-p", help="Extra term to preserve (repeatable)."),
    ] = None,
    use_settings: Annotated[
        bool,
        typer.Option("--settings/--no-settings", help="Include preserve terms from settings."),
    ] = True,
) -> None:
    """List the protected ranges and the placeholder text sent for translation."""
    preserve_terms = list(preserve or [])
    if use_settings:
        store = SettingsFile(load_config().settings_path)
        preserve_terms.extend(store.read().preserve_terms)

    ranges = find_protected_ranges(text, preserve_terms)
    protected_text, _ = protect(text, preserve_terms)

    table = Table(title=f"Protected ranges ({len(ranges)})")
    table.add_column("#", style="dim", width=3)
    table.add_column("Span", width=10)
    table.add_column("Text", style="bold cyan")
    table.add_column("Score", justify="right", width=6)

    for i, r in enumerate(ranges):
        table.add_row(str(i), f"{r.start}-{r.end}", r.text, str(score_token(r.text, text, r.start)))

    console.print(table)
    console.print("[bold]Sent to provider:[/bold]")
    console.print(protected_text, markup=False, highlight=False)
