"""Chat command for interactive sessions."""

import asyncio
from pathlib import Path

import typer

app = typer.Typer(help="Start interactive chat with Spotter")


@app.callback(invoke_without_command=True)
def run_chat(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to spotter.yaml or config directory"
    ),
    user_id: int = typer.Option(1, "--user", "-u", help="Chat identity to speak as"),
    first_name: str = typer.Option("", "--name", "-n", help="First name sent with messages"),
    debug: bool = typer.Option(False, "--debug", help="Debug mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose mode"),
    ctx: typer.Context = typer.Option(None, hidden=True),  # Inject context
) -> None:
    """Start interactive chat session."""
    if ctx and ctx.invoked_subcommand:
        return

    from spotter.cli.chat_runner import ChatConfig, run_chat_session

    chat_config = ChatConfig(
        config_path=config,
        user_id=user_id,
        first_name=first_name,
        debug=debug,
        verbose=verbose,
    )

    try:
        asyncio.run(run_chat_session(chat_config))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        typer.echo(f"Fatal error: {e}", err=True)
        raise typer.Exit(1)
