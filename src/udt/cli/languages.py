"""udt languages command — list supported target languages."""

from __future__ import annotations

from rich.table import Table

from udt.core.languages import DEFAULT_TARGET_LANGUAGE, TARGET_LANGUAGES
from udt.utils.console import console


def languages() -> None:
    """List the languages captions can be translated into."""
    table = Table(title=f"Target Languages ({len(TARGET_LANGUAGES)})")
    table.add_column("Code", style="bold cyan", width=6)
    table.add_column("Language", width=20)
    table.add_column("Default", width=8)

    for code, label in TARGET_LANGUAGES.items():
        table.add_row(code, label, "yes" if code == DEFAULT_TARGET_LANGUAGE else "-")

    console.print(table)
