"""Maintenance CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from setlist.tasks import queue
from setlist.tasks.maintenance import MAINTENANCE_TIMEOUT_SECONDS

console = Console()
app = typer.Typer(help="Maintenance and cleanup commands")


@app.command("cleanup-auth")
def cleanup_auth(
    dry_run: bool = typer.Option(True, "--dry-run/--execute", help="Only report, don't delete"),
    background: bool = typer.Option(False, "--background", "-b", help="Run in background worker"),
):
    """Delete expired magic links and sessions.

    By default runs in dry-run mode to show what would be deleted.
    Use --execute to actually delete expired credentials.
    """

    async def _cleanup():
        if background:
            # Queue as background job
            job = await queue.enqueue(
                "cleanup_expired_credentials",
                dry_run=dry_run,
                timeout=MAINTENANCE_TIMEOUT_SECONDS,
            )
            console.print(f"[green]Queued credential cleanup job:[/green] {job.id if job else 'unknown'}")
            if dry_run:
                console.print("[dim]Running in dry-run mode (will only report)[/dim]")
            else:
                console.print("[yellow]Running in execute mode (will delete rows)[/yellow]")
            return

        # Run directly
        from setlist.tasks.maintenance import cleanup_expired_credentials

        console.print("[cyan]Scanning for expired credentials...[/cyan]")

        result = await cleanup_expired_credentials(ctx={}, dry_run=dry_run)

        if not result.get("success"):
            console.print(f"[red]Error:[/red] {result.get('error')}")
            raise typer.Exit(1)

        table = Table(title="Credential Cleanup Results")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Expired Magic Links", str(result.get("magic_links_expired", 0)))
        table.add_row("Expired Sessions", str(result.get("sessions_expired", 0)))

        if not dry_run:
            table.add_row("Magic Links Deleted", str(result.get("magic_links_deleted", 0)))
            table.add_row("Sessions Deleted", str(result.get("sessions_deleted", 0)))

        console.print(table)

        if dry_run and (result.get("magic_links_expired", 0) or result.get("sessions_expired", 0)):
            console.print("\n[yellow]Dry run mode - nothing was deleted.[/yellow]")
            console.print("Run with --execute to delete expired credentials.")

    asyncio.run(_cleanup())
