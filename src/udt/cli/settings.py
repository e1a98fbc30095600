"""udt settings command — view or change the stored user settings."""

from __future__ import annotations

from dataclasses import replace
from typing import Annotated, Optional

import typer
from rich.table import Table

from udt.cli.utils import check_language
from udt.core.config import load_config
from udt.core.settings import SettingsFile
from udt.service.engine import default_settings
from udt.utils.console import console


def settings(
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Set the target language code."),
    ] = None,
    enabled: Annotated[
        Optional[bool],
        typer.Option("--enable/--disable", help="Turn the translated line on or off."),
    ] = None,
    preserve: Annotated[
        Optional[list[str]],
        typer.Option("--preserve", "-p", help="Add a term to keep untranslated (repeatable)."),
    ] = None,
    remove: Annotated[
        Optional[list[str]],
        typer.Option("--remove", "-r", help="Remove a preserve term (repeatable)."),
    ] = None,
    clear_terms: Annotated[
        bool,
        typer.Option("--clear-terms", help="Remove all preserve terms."),
    ] = False,
) -> None:
    """Show settings, applying any changes given as options."""
    check_language(to)
    config = load_config()
    store = SettingsFile(config.settings_path, defaults=default_settings(config))
    current = store.read()

    terms = [] if clear_terms else list(current.preserve_terms)
    removed = {t.lower() for t in remove or []}
    terms = [t for t in terms if t.lower() not in removed]
    for term in preserve or []:
        if term.strip() and term.lower() not in {t.lower() for t in terms}:
            terms.append(term.strip())

    updated = replace(
        current,
        target_language=to or current.target_language,
        enabled=current.enabled if enabled is None else enabled,
        preserve_terms=tuple(terms),
    )
    if updated != current:
        store.write(updated)
        console.print(f"[green]Saved:[/green] {store.path}")

    table = Table(title="Settings")
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")
    table.add_row("enabled", "yes" if updated.enabled else "no")
    table.add_row("targetLanguage", updated.target_language)
    table.add_row("preserveTerms", ", ".join(updated.preserve_terms) or "-")
    console.print(table)
