"""Command line interface for the User Registry API."""

import typer
import uvicorn

from src.user_registry.runtime.context import get_config

app = typer.Typer(
    help="User Registry API - serve the API and manage its database",
    no_args_is_help=True,
    add_completion=False,
)


@app.command(name="serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address, defaults to app.host"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port, defaults to app.port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
) -> None:
    """Run the API under uvicorn."""
    config = get_config()
    uvicorn.run(
        "src.user_registry.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        log_config=None,  # loguru intercepts uvicorn's stdlib loggers
    )


@app.command(name="init-db")
def init_db() -> None:
    """Create all tables in the configured database."""
    from src.user_registry.runtime.init_db import init_db as _init_db

    _init_db()
    typer.echo("Database initialized.")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
