"""Command line entry points."""

from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from bookshelf.runtime.context import get_config, set_config
from bookshelf.utils.durations import parse_duration

console = Console(stderr=True)

app = typer.Typer(
    help="Bookshelf catalog service",
    no_args_is_help=True,
)


def _parse_graceful_timeout(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_duration(value).total_seconds()
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def serve(
    graceful_timeout: Optional[str] = typer.Option(
        None,
        "--graceful-timeout",
        "-graceful-timeout",
        help="How long in-flight requests may run after SIGINT, e.g. 15s or 1m",
    ),
    host: Optional[str] = typer.Option(None, help="Address to bind (default from config)"),
    port: Optional[int] = typer.Option(None, help="Port to bind (default from config)"),
) -> None:
    """Migrate the schema and serve the HTTP API until interrupted."""
    config = get_config()
    overrides = {
        key: value
        for key, value in {
            "graceful_timeout": _parse_graceful_timeout(graceful_timeout),
            "host": host,
            "port": port,
        }.items()
        if value is not None
    }
    if overrides:
        config = config.model_copy(
            update={"app": config.app.model_copy(update=overrides)}
        )
        set_config(config)

    from bookshelf.api.server import build_server, run_server
    from bookshelf.api.utils.app_startup import configure_logging

    configure_logging()

    from bookshelf.api.http.app import create_app

    server = build_server(create_app(config=config), config.app)
    raise typer.Exit(code=run_server(server))


@app.command("init-db")
def init_db_command() -> None:
    """Create or reconcile the database schema, then exit."""
    from bookshelf.api.utils.app_startup import configure_logging
    from bookshelf.core.errors import FatalStartupError
    from bookshelf.runtime.init_db import init_db

    configure_logging()
    try:
        init_db()
    except FatalStartupError as e:
        logger.error("{}", e)
        console.print(f"[bold red]Schema migration failed:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    console.print("[bold green]Database schema is up to date[/bold green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
