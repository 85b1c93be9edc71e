"""Announcement commands for hymnal-admin."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hymnal.cli import common
from hymnal.services.announcements import ANNOUNCEMENT_TYPES, AnnouncementError, AnnouncementService
from hymnal.services.remote import RemoteDatabaseError

console = Console()
app = typer.Typer(help="Manage dashboard announcements")


@app.command("list")
def list_announcements(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """List all announcements, including inactive and expired ones."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        items = AnnouncementService(db).list_all()
    except RemoteDatabaseError as e:
        common.fail(e)

    if not items:
        console.print("[yellow]No announcements.[/yellow]")
        return

    table = Table(title="Announcements")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Type")
    table.add_column("Priority", justify="right")
    table.add_column("Status")
    table.add_column("Expires", style="dim")

    for item in items:
        if item.is_expired():
            status = "[red]expired[/red]"
        elif item.is_active:
            status = "[green]active[/green]"
        else:
            status = "[yellow]inactive[/yellow]"
        table.add_row(item.id, item.title, item.type, str(item.priority), status, item.expires_at or "-")

    console.print(table)


@app.command("create")
def create_announcement(
    title: str = typer.Option(..., "--title", "-t", help="Title"),
    content: str = typer.Option("", "--content", help="Body text"),
    type: str = typer.Option("text", "--type", help=f"Type ({'|'.join(ANNOUNCEMENT_TYPES)})"),
    image_url: str = typer.Option("", "--image-url", help="Image URL for image announcements"),
    priority: int = typer.Option(1, "--priority", "-p", help="Display order, lowest first"),
    expires_at: Optional[str] = typer.Option(None, "--expires", help="Expiry as ISO date/time"),
    inactive: bool = typer.Option(False, "--inactive", help="Create without showing it yet"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Create an announcement."""
    config = common.load_config(config_path)
    session, db = common.require_admin(config)
    try:
        announcement_id = AnnouncementService(db).create(
            title,
            content,
            created_by=session.email or session.uid,
            type=type,
            image_url=image_url,
            priority=priority,
            expires_at=expires_at,
            is_active=not inactive,
        )
    except (AnnouncementError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Created announcement {announcement_id}[/green]")


@app.command("toggle")
def toggle_announcement(
    announcement_id: str = typer.Argument(..., help="Announcement ID"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show or hide an announcement."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    service = AnnouncementService(db)
    try:
        current = service.get(announcement_id)
        if current is None:
            raise AnnouncementError(f"Announcement not found: {announcement_id}")
        service.set_active(announcement_id, not current.is_active)
    except (AnnouncementError, RemoteDatabaseError) as e:
        common.fail(e)

    state = "inactive" if current.is_active else "active"
    console.print(f"[green]Announcement {announcement_id} is now {state}[/green]")


@app.command("priority")
def set_priority(
    announcement_id: str = typer.Argument(..., help="Announcement ID"),
    priority: int = typer.Argument(..., help="Display order, lowest first"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Change the display order of an announcement."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        AnnouncementService(db).set_priority(announcement_id, priority)
    except (AnnouncementError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Priority of {announcement_id} set to {priority}[/green]")


@app.command("delete")
def delete_announcement(
    announcement_id: str = typer.Argument(..., help="Announcement ID"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete an announcement."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        AnnouncementService(db).delete(announcement_id)
    except RemoteDatabaseError as e:
        common.fail(e)

    console.print(f"[green]Deleted announcement {announcement_id}[/green]")


@app.command("cleanup")
def cleanup_announcements(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete expired announcements."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        count = AnnouncementService(db).cleanup_expired()
    except RemoteDatabaseError as e:
        common.fail(e)

    console.print(f"[green]Removed {count} expired announcements[/green]")
