"""Shared CLI utilities."""

from __future__ import annotations

import typer

from udt.core.languages import validate_language
from udt.utils.console import console


def is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def check_language(code: str | None) -> None:
    """Exit with an error message if a given language code is unsupported."""
    if code is None:
        return
    try:
        validate_language(code)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
