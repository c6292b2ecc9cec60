"""User management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from setlist.database import get_session_context
from setlist.models import User, utcnow
from setlist.services import credentials
from setlist.services.magic_links import MagicLinkService, build_magic_link_url

console = Console()
app = typer.Typer(help="User management commands")


@app.command("list")
def list_users():
    """List all users."""

    async def _list():
        async with get_session_context() as session:
            stmt = select(User).order_by(User.email)
            result = await session.execute(stmt)
            users = result.scalars().all()

            table = Table(title="Users")
            table.add_column("ID", style="cyan")
            table.add_column("Email", style="green")
            table.add_column("Last Login", style="magenta")
            table.add_column("Created", style="dim")

            for user in users:
                last_login = user.last_login.strftime("%Y-%m-%d %H:%M") if user.last_login else "never"
                created = user.created_at.strftime("%Y-%m-%d") if user.created_at else "-"
                table.add_row(user.id, user.email, last_login, created)

            console.print(table)

    asyncio.run(_list())


@app.command("create")
def create_user(email: str = typer.Argument(..., help="User email")):
    """Create a new user."""

    async def _create():
        async with get_session_context() as session:
            if await credentials.get_user_by_email(session, email):
                console.print(f"[red]Error:[/red] User {email} already exists")
                raise typer.Exit(1)

            user = await credentials.create_user(session, email)
            await session.commit()
            console.print(f"[green]Created user:[/green] {email} ({user.id})")

    asyncio.run(_create())


@app.command("login-url")
def login_url(email: str = typer.Argument(..., help="User email")):
    """Generate a magic link login URL for an existing user."""

    async def _generate():
        async with get_session_context() as session:
            if not await credentials.get_user_by_email(session, email):
                console.print(f"[red]Error:[/red] User {email} not found")
                raise typer.Exit(1)

            service = MagicLinkService(session)
            token = await service.request_magic_link(email)
            await session.commit()

            console.print(f"[green]Login URL:[/green] {build_magic_link_url(token)}")
            console.print(f"[dim]Expires in {service.expiration}[/dim]")

    asyncio.run(_generate())


@app.command("sessions")
def list_sessions(email: str = typer.Argument(..., help="User email")):
    """List a user's sessions."""

    async def _list():
        async with get_session_context() as session:
            user = await credentials.get_user_by_email(session, email)
            if not user:
                console.print(f"[red]Error:[/red] User {email} not found")
                raise typer.Exit(1)

            now = utcnow()
            table = Table(title=f"Sessions for {email}")
            table.add_column("ID", style="cyan")
            table.add_column("Created", style="dim")
            table.add_column("Expires")
            table.add_column("Status")

            for user_session in await credentials.list_sessions_for_user(session, user.id):
                status = "[red]expired[/red]" if user_session.is_expired(now) else "[green]active[/green]"
                table.add_row(
                    user_session.id,
                    user_session.created_at.strftime("%Y-%m-%d %H:%M"),
                    user_session.expires_at.strftime("%Y-%m-%d %H:%M"),
                    status,
                )

            console.print(table)

    asyncio.run(_list())


@app.command("revoke-sessions")
def revoke_sessions(
    email: str = typer.Argument(..., help="User email"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Log a user out everywhere by deleting all of their sessions."""
    if not force and not typer.confirm(f"Revoke all sessions for {email}?"):
        console.print("[dim]Cancelled[/dim]")
        raise typer.Exit(0)

    async def _revoke():
        async with get_session_context() as session:
            user = await credentials.get_user_by_email(session, email)
            if not user:
                console.print(f"[red]Error:[/red] User {email} not found")
                raise typer.Exit(1)

            count = await credentials.delete_sessions_for_user(session, user.id)
            await session.commit()
            console.print(f"[green]Revoked {count} session(s) for:[/green] {email}")

    asyncio.run(_revoke())
