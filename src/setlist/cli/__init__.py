"""CLI commands using Typer."""

import typer

from setlist.cli.db import app as db_app
from setlist.cli.maintenance import app as maintenance_app
from setlist.cli.users import app as users_app

app = typer.Typer(name="setlist", help="Setlist manager CLI")

# Register sub-apps
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")
app.add_typer(maintenance_app, name="maintenance")


@app.command()
def version():
    """Show version information."""
    from setlist import __version__

    typer.echo(f"Setlist v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the development server."""
    import uvicorn

    from setlist.logging import get_uvicorn_log_config

    uvicorn.run(
        "setlist.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


@app.command()
def worker(
    concurrency: int = typer.Option(2, help="Number of concurrent tasks"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """Run the background task worker, including the cleanup cron."""
    from setlist.worker import run

    run(concurrency=concurrency, log_level="DEBUG" if verbose else None)


if __name__ == "__main__":
    app()
