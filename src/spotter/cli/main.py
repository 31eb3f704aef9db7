"""Main CLI entry point for Spotter"""

import typer

from spotter.__version__ import __version__
from spotter.cli.commands import chat as chat_module
from spotter.cli.commands import server as server_module

app = typer.Typer(
    name="spotter",
    help="Spotter - chat-based personal-trainer assistant",
    add_completion=False,
)

# Register subcommands
app.add_typer(chat_module.app, name="chat", help="Chat with the assistant in the console")
app.add_typer(server_module.app, name="server", help="Start the Spotter API server")


def version_callback(value: bool) -> None:
    """Print version and exit"""
    if value:
        typer.echo(f"Spotter version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Spotter - chat-based personal-trainer assistant"""
    pass


def cli() -> None:
    """Entry point for CLI"""
    app()


if __name__ == "__main__":
    cli()
