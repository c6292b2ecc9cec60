"""Schema management: Alembic migrations, plus a direct create for local SQLite."""

import asyncio
import subprocess
import sys

import typer
from rich.console import Console

console = Console()
app = typer.Typer(help="Database schema commands")


def _alembic(*args: str) -> int:
    return subprocess.run([sys.executable, "-m", "alembic", *args], check=False).returncode


def _run_or_exit(action: str, *args: str) -> None:
    if _alembic(*args) != 0:
        console.print(f"[red]{action} failed[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{action} complete[/green]")


@app.command("migrate")
def migrate(revision: str = typer.Argument("head", help="Target revision")):
    """Upgrade the schema to a revision."""
    console.print(f"[dim]Upgrading to {revision}[/dim]")
    _run_or_exit("Migration", "upgrade", revision)


@app.command("rollback")
def rollback(revision: str = typer.Argument("-1", help="Target revision, -1 for one step")):
    """Downgrade the schema to a revision."""
    console.print(f"[dim]Downgrading to {revision}[/dim]")
    _run_or_exit("Rollback", "downgrade", revision)


@app.command("current")
def current():
    """Show the applied revision."""
    _alembic("current")


@app.command("history")
def history(limit: int = typer.Option(10, "--limit", "-l", help="Revisions to show")):
    """Show recent revisions."""
    _alembic("history", f"-r-{limit}:")


@app.command("init")
def init():
    """Create tables straight from the models, bypassing migrations."""
    from setlist.database import close_db, init_db

    async def _create():
        try:
            await init_db()
        finally:
            await close_db()

    asyncio.run(_create())
    console.print("[green]Tables created[/green]")
