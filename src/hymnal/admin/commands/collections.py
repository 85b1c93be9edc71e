"""Collection commands for hymnal-admin."""

from pathlib import Path

import typer
from rich.console import Console

from hymnal.cli import common
from hymnal.db.models import AccessLevel
from hymnal.services.collections import CollectionError, CollectionService
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.songs import SongValidationError

console = Console()
app = typer.Typer(help="Manage song collections")


@app.command("create")
def create_collection(
    name: str = typer.Argument(..., help="Collection name"),
    collection_id: str = typer.Option(None, "--id", help="Collection ID (derived from the name by default)"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    access: str = typer.Option(
        "public",
        "--access",
        "-a",
        help="Access level (public|registered|premium|admin|superadmin)",
    ),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Create a collection."""
    try:
        level = AccessLevel(access.lower())
    except ValueError:
        console.print(f"[red]Unknown access level: {access}[/red]")
        raise typer.Exit(1)

    config = common.load_config(config_path)
    session, db = common.require_admin(config)
    try:
        collection = CollectionService(db).create_collection(
            name,
            created_by=session.uid,
            description=description,
            access_level=level,
            collection_id=collection_id,
        )
    except (CollectionError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Created collection {collection.id}[/green]")


@app.command("delete")
def delete_collection(
    collection_id: str = typer.Argument(..., help="Collection ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete a collection and its songs."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)

    if not yes:
        typer.confirm(f"Delete collection {collection_id} and all its songs?", abort=True)

    try:
        CollectionService(db).delete_collection(collection_id)
    except RemoteDatabaseError as e:
        common.fail(e)

    console.print(f"[green]Deleted collection {collection_id}[/green]")


@app.command("add-song")
def add_song(
    collection_id: str = typer.Argument(..., help="Collection ID"),
    number: str = typer.Argument(..., help="Song number from the catalog"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Copy a catalog song into a collection."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)

    try:
        song = common.get_repository(config).get_song(number)
    except (FileNotFoundError, SongValidationError) as e:
        common.fail(e)
    if song is None:
        console.print(f"[red]Song not found: {number}[/red]")
        raise typer.Exit(1)

    try:
        count = CollectionService(db).add_song(collection_id, song)
    except (CollectionError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Added song {number} to {collection_id} ({count} songs)[/green]")


@app.command("remove-song")
def remove_song(
    collection_id: str = typer.Argument(..., help="Collection ID"),
    number: str = typer.Argument(..., help="Song number"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Remove a song from a collection."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        count = CollectionService(db).remove_song(collection_id, number)
    except (CollectionError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Removed song {number} from {collection_id} ({count} songs)[/green]")
