"""udt CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from udt import __version__
from udt.cli.export import export
from udt.cli.languages import languages
from udt.cli.prefetch import prefetch
from udt.cli.serve import serve
from udt.cli.settings import settings
from udt.cli.terms import terms
from udt.cli.translate import translate

app = typer.Typer(
    name="udt",
    help="udt — Dual-subtitle translation for video lectures.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"udt {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """udt — Dual-subtitle translation for video lectures."""
    # Shell exports take precedence over .env values
    load_dotenv(override=False)


app.command("translate")(translate)
app.command("terms")(terms)
app.command("prefetch")(prefetch)
app.command("export")(export)
app.command("serve")(serve)
app.command("settings")(settings)
app.command("languages")(languages)
