"""CLI commands for authentication."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from todolist_client.auth.storage import clear_token_cache, save_token_cache
from todolist_client.client import create_challenge_store, create_identity
from todolist_client.exceptions import AuthError, ConfigurationError
from todolist_client.settings import get_settings

auth_app = typer.Typer(name="auth", help="Manage authentication.")
console = Console()


@auth_app.command()
def status() -> None:
    """Show the signed-in account and stored claims challenges."""
    try:
        asyncio.run(_status_async())
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


async def _status_async() -> None:
    """Async implementation of status command."""
    settings = get_settings()
    identity = await create_identity(settings)
    account = await identity.get_active_account()

    if account:
        console.print(f"Signed in as [cyan]{account.username or account.home_account_id}[/cyan]")
    else:
        console.print("[yellow]Not signed in (run `todo auth login`)[/yellow]")

    challenges = await create_challenge_store(settings).items()
    table = Table(title="Stored Claims Challenges")
    table.add_column("Method", style="cyan")
    table.add_column("Challenge", style="yellow")
    for method, challenge in sorted(challenges.items()):
        shown = challenge if len(challenge) <= 48 else challenge[:45] + "..."
        table.add_row(method, shown)
    if not challenges:
        table.add_row("-", "None")

    console.print(table)


@auth_app.command()
def login() -> None:
    """Sign in interactively in the browser."""
    try:
        asyncio.run(_login_async())
    except (AuthError, ConfigurationError) as e:
        console.print(f"\n[red]Authentication failed: {e}[/red]")
        raise typer.Exit(1) from e


async def _login_async() -> None:
    settings = get_settings()
    identity = await create_identity(settings)

    console.print("\n[dim]Opening browser for authentication...[/dim]")
    account = await identity.sign_in(settings.api_scopes)
    await save_token_cache(identity.cache, settings.data_dir)

    name = account.username if account else "unknown account"
    console.print(f"\n[green bold]Signed in as {name}[/green bold]")


@auth_app.command()
def logout() -> None:
    """Sign out and forget stored claims challenges."""
    try:
        asyncio.run(_logout_async())
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    console.print("[green]Signed out[/green]")


async def _logout_async() -> None:
    settings = get_settings()
    identity = await create_identity(settings)
    await identity.sign_out()
    await clear_token_cache(settings.data_dir)
    await create_challenge_store(settings).clear()
