"""Collection commands for hymnal."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from hymnal.cli import common
from hymnal.cli.commands.songs import songs_table
from hymnal.services.catalog import apply_favorites
from hymnal.services.collections import CollectionError, CollectionService
from hymnal.services.remote import RemoteDatabaseError

console = Console()
app = typer.Typer(help="Browse song collections")


@app.command("list")
def list_collections(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """List collections you can open."""
    config = common.load_config(config_path)
    db = common.require_db(config)
    with common.get_store(config) as store:
        session = store.load_session()

    viewer = common.get_viewer(config, session)
    try:
        collections = CollectionService(db.with_token(session.id_token if session else None)).list_collections(viewer)
    except RemoteDatabaseError as e:
        common.fail(e)

    if not collections:
        console.print("[yellow]No collections available.[/yellow]")
        return

    table = Table(title="Collections")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Songs", justify="right")
    table.add_column("Access", style="magenta")
    table.add_column("Description", style="dim")

    for collection in collections:
        table.add_row(
            collection.id,
            collection.name,
            str(collection.song_count),
            collection.access_level.value,
            collection.description or "-",
        )

    console.print(table)


@app.command("show")
def show_collection(
    collection_id: str = typer.Argument(..., help="Collection ID"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show the songs of a collection."""
    config = common.load_config(config_path)
    db = common.require_db(config)
    with common.get_store(config) as store:
        session = store.load_session()
        favorites = store.get_favorites()

    viewer = common.get_viewer(config, session)
    service = CollectionService(db.with_token(session.id_token if session else None))
    try:
        collection = service.get_collection(collection_id)
        songs = service.get_collection_songs(collection_id, viewer)
    except (CollectionError, RemoteDatabaseError) as e:
        common.fail(e)

    if not songs:
        console.print(f"[yellow]{collection.name} has no songs yet.[/yellow]")
        return

    console.print(songs_table(apply_favorites(songs, favorites), title=collection.name))
