"""Role commands for hymnal-admin."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from hymnal.cli import common
from hymnal.db.models import Role
from hymnal.services.auth import AuthError
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.roles import InvalidRoleError

console = Console()
app = typer.Typer(help="Check and grant user roles")


@app.command("check")
def check_role(
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Ignore the cached role"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show the role of the signed-in user."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        session = common.require_session(store)

    resolver = common.get_role_resolver(config)
    status = resolver.force_refresh(session) if refresh else resolver.resolve(session)

    permissions = ", ".join(status.permissions) or "-"
    if status.is_super_admin:
        permissions = "all"

    console.print(
        Panel.fit(
            f"[cyan]User:[/cyan] {session.label}\n"
            f"[cyan]Role:[/cyan] {status.role.value}\n"
            f"[cyan]Admin:[/cyan] {'Yes' if status.is_admin else 'No'}\n"
            f"[cyan]Super Admin:[/cyan] {'Yes' if status.is_super_admin else 'No'}\n"
            f"[cyan]Permissions:[/cyan] {permissions}\n"
            f"[cyan]Source:[/cyan] {status.source}",
            title="Admin Status",
            border_style="green" if status.is_admin else "yellow",
        )
    )


@app.command("grant")
def grant_role(
    uid: str = typer.Argument(..., help="User ID to change"),
    role: str = typer.Argument(..., help="New role (user, admin, super_admin)"),
    permissions: Optional[list[str]] = typer.Option(
        None,
        "--permission",
        "-p",
        help="Admin permission (repeatable; defaults to the standard set)",
    ),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Grant a role to a user (super admins only)."""
    config = common.load_config(config_path)
    session, _ = common.require_admin(config, Role.SUPER_ADMIN)

    try:
        updates = common.get_role_resolver(config).grant_role(session, uid, role, permissions or None)
    except (InvalidRoleError, AuthError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Set role of {uid} to {updates['role']}[/green]")
    if updates.get("permissions"):
        console.print(f"[dim]Permissions: {', '.join(updates['permissions'])}[/dim]")
