"""Favorite commands for hymnal."""

from pathlib import Path

import typer
from rich.console import Console

from hymnal.cli import common
from hymnal.cli.commands.songs import songs_table
from hymnal.core.config import HymnalConfig
from hymnal.db.local_client import LocalStore
from hymnal.services.auth import AuthError
from hymnal.services.catalog import apply_favorites
from hymnal.services.favorites import FavoritesService
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.songs import SongValidationError

console = Console()
app = typer.Typer(help="Manage favorite songs")


def get_service(config: HymnalConfig, store: LocalStore) -> FavoritesService:
    """Build the favorites service for the stored session."""
    return FavoritesService(store, common.get_db(config), store.load_session())


def require_song(config: HymnalConfig, number: str) -> None:
    try:
        song = common.get_repository(config).get_song(number)
    except (FileNotFoundError, SongValidationError) as e:
        common.fail(e)
    if song is None:
        console.print(f"[red]Song not found: {number}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_favorites(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """List favorite songs."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        numbers = get_service(config, store).get()

    if not numbers:
        console.print("[yellow]No favorite songs yet.[/yellow]")
        console.print("Add one with 'hymnal favorites add <number>'.")
        return

    try:
        songs = common.get_repository(config).get_songs().songs
    except (FileNotFoundError, SongValidationError) as e:
        common.fail(e)

    favorites = [s for s in apply_favorites(songs, numbers) if s.is_favorite]
    console.print(songs_table(favorites, title="Favorites"))

    known = {s.number for s in favorites}
    missing = [n for n in numbers if n not in known]
    if missing:
        console.print(f"[dim]Not in the current catalog: {', '.join(missing)}[/dim]")


@app.command("add")
def add_favorite(
    number: str = typer.Argument(..., help="Song number"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Add a song to favorites."""
    config = common.load_config(config_path)
    require_song(config, number)
    with common.get_store(config) as store:
        get_service(config, store).add(number)
    console.print(f"[green]Added song {number} to favorites[/green]")


@app.command("remove")
def remove_favorite(
    number: str = typer.Argument(..., help="Song number"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Remove a song from favorites."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        service = get_service(config, store)
        if not service.is_favorite(number):
            console.print(f"[yellow]Song {number} is not a favorite[/yellow]")
            return
        service.remove(number)
    console.print(f"[green]Removed song {number} from favorites[/green]")


@app.command("toggle")
def toggle_favorite(
    number: str = typer.Argument(..., help="Song number"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Add or remove a song from favorites."""
    config = common.load_config(config_path)
    require_song(config, number)
    with common.get_store(config) as store:
        is_favorite = get_service(config, store).toggle(number)

    if is_favorite:
        console.print(f"[green]Added song {number} to favorites[/green]")
    else:
        console.print(f"[green]Removed song {number} from favorites[/green]")


@app.command("sync")
def sync_favorites(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Upload local favorites and download the synced list."""
    config = common.load_config(config_path)
    common.require_db(config)
    with common.get_store(config) as store:
        try:
            numbers = get_service(config, store).sync_to_cloud()
        except (AuthError, RemoteDatabaseError) as e:
            common.fail(e)

    console.print(f"[green]Synced {len(numbers)} favorites[/green]")
