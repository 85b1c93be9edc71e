"""Account commands for hymnal.

Sign-in state is kept in the local preferences database between runs.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from hymnal.cli import common
from hymnal.services.auth import AuthError
from hymnal.services.favorites import FavoritesService
from hymnal.services.remote import RemoteDatabaseError

console = Console()
app = typer.Typer(help="Sign in, register and manage your account")


@app.command("login")
def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account e-mail"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Password"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Sign in with e-mail and password."""
    config = common.load_config(config_path)
    client = common.get_auth_client(config)
    try:
        session = client.sign_in(email, password)
    except (AuthError, RemoteDatabaseError) as e:
        common.fail(e)

    with common.get_store(config) as store:
        store.save_session(session)
        count = len(FavoritesService(store, common.get_db(config), session).get())

    console.print(f"[green]Welcome back, {session.label}![/green]")
    console.print(f"[dim]{count} favorite songs[/dim]")


@app.command("register")
def register(
    name: str = typer.Option(..., "--name", "-n", prompt="Full name", help="Display name"),
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account e-mail"),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password (at least 6 characters)",
    ),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Create an account."""
    config = common.load_config(config_path)
    client = common.get_auth_client(config)
    try:
        session = client.register(email, password, name)
    except (AuthError, RemoteDatabaseError) as e:
        common.fail(e)

    with common.get_store(config) as store:
        store.save_session(session)

    console.print(f"[green]Account created. Welcome, {session.label}![/green]")


@app.command("guest")
def guest(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Continue as a guest (favorites stay on this device)."""
    config = common.load_config(config_path)
    client = common.get_auth_client(config)
    try:
        session = client.sign_in_anonymously()
    except (AuthError, RemoteDatabaseError) as e:
        common.fail(e)

    with common.get_store(config) as store:
        store.save_session(session)

    console.print("[green]Signed in as guest[/green]")


@app.command("logout")
def logout(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Sign out and clear local favorites."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        if store.load_session() is None:
            console.print("[yellow]Not signed in.[/yellow]")
            return
        store.clear_session()
        FavoritesService(store).clear_local()

    console.print("[green]Signed out[/green]")


@app.command("whoami")
def whoami(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show the signed-in account and its role."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        session = store.load_session()

    if session is None:
        console.print("[yellow]Not signed in.[/yellow]")
        return

    status = common.get_role_resolver(config).resolve(session)
    console.print(
        Panel.fit(
            f"[cyan]Name:[/cyan] {session.label}\n"
            f"[cyan]E-mail:[/cyan] {session.email or '(not set)'}\n"
            f"[cyan]User ID:[/cyan] {session.uid}\n"
            f"[cyan]Account:[/cyan] {'Guest' if session.is_anonymous else 'Registered'}\n"
            f"[cyan]Role:[/cyan] {status.role.value}",
            title="Account",
            border_style="green",
        )
    )


@app.command("reset-password")
def reset_password(
    email: str = typer.Argument(..., help="Account e-mail"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Send a password reset e-mail."""
    config = common.load_config(config_path)
    client = common.get_auth_client(config)
    try:
        client.send_password_reset(email)
    except AuthError as e:
        common.fail(e)

    console.print(f"[green]Password reset e-mail sent to {email}[/green]")


@app.command("refresh")
def refresh(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Renew the stored sign-in token."""
    config = common.load_config(config_path)
    client = common.get_auth_client(config)
    with common.get_store(config) as store:
        session = common.require_session(store, allow_guest=True)
        try:
            session = client.refresh(session)
        except AuthError as e:
            common.fail(e)
        store.save_session(session)

    console.print("[green]Session refreshed[/green]")
