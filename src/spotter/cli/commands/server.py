"""Server command to start API."""

import os
from pathlib import Path

import typer
import uvicorn

from spotter.config.loader import ConfigLoader
from spotter.core.errors import ConfigError

app = typer.Typer(help="Start API server")


@app.callback(invoke_without_command=True)
def start_server(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to spotter.yaml", exists=True
    ),
    host: str = typer.Option("0.0.0.0", "--host", "-h"),
    port: int = typer.Option(8000, "--port", "-p"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Start the Spotter API server."""

    # 1. Validate Config
    try:
        ConfigLoader.load(config)
    except ConfigError as e:
        typer.echo(f"Invalid config: {e}", err=True)
        raise typer.Exit(1)

    # 2. Set Env Vars for the server process (it loads config from env)
    if config is not None:
        os.environ["SPOTTER_CONFIG_PATH"] = str(config.absolute())

    typer.echo(f"Starting Spotter Server on http://{host}:{port}")
    typer.echo(f"   Config: {config or 'defaults'}")

    try:
        uvicorn.run(
            "spotter.server.api:app",
            host=host,
            port=port,
            reload=reload,
            log_level="info",
        )
    except Exception as e:
        typer.echo(f"Server failed: {e}", err=True)
        raise typer.Exit(1)
