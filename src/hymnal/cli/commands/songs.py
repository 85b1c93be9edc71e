"""Song commands for hymnal.

Provides CLI commands for listing, searching and reading songs.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hymnal.cli import common
from hymnal.core.config import HymnalConfig
from hymnal.db.models import Session, Song
from hymnal.services.catalog import SortOrder, verse_of_the_day
from hymnal.services.collections import ACCESS_OK, FAVORITES_FILTER, Viewer, check_favorites_access
from hymnal.services.favorites import FavoritesService
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.settings import Preferences
from hymnal.services.songs import SongValidationError
from hymnal.state import BrowserState

console = Console()
app = typer.Typer(help="Browse and read songs")

# Rich justify values for the stored text alignment
JUSTIFY = {"left": "left", "center": "center", "right": "right", "justify": "full"}


def songs_table(songs: list[Song], title: str = "Songs") -> Table:
    """Build a table of songs with their favorite marker."""
    table = Table(title=title)
    table.add_column("No.", style="cyan", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Verses", style="dim", justify="right")
    table.add_column("Fav", style="yellow", justify="center")

    for song in songs:
        table.add_row(
            song.number,
            song.title,
            str(len(song.verses)),
            "*" if song.is_favorite else "",
        )
    return table


def load_state(config: HymnalConfig) -> tuple[BrowserState, bool, Optional[Session]]:
    """Load the catalog with favorites applied.

    Returns:
        (state, is_online, session)
    """
    try:
        result = common.get_repository(config).get_songs()
    except (FileNotFoundError, SongValidationError) as e:
        common.fail(e)

    with common.get_store(config) as store:
        session = store.load_session()
        favorites = FavoritesService(store, common.get_db(config), session).get()

    state = BrowserState()
    state.load(result.songs, favorites)
    return state, result.is_online, session


@app.command("list")
def list_songs(
    sort: str = typer.Option(
        "Number",
        "--sort",
        "-s",
        help="Sort order (Number|Alphabet)",
    ),
    favorites_only: bool = typer.Option(
        False,
        "--favorites",
        "-f",
        help="Show only favorite songs",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        help="Maximum number of songs to show",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """List songs in the hymnal."""
    try:
        order = SortOrder.parse(sort)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    config = common.load_config(config_path)
    state, is_online, session = load_state(config)
    if favorites_only:
        viewer = Viewer(
            is_signed_in=session is not None,
            is_anonymous=session is not None and session.is_anonymous,
        )
        if check_favorites_access(viewer) != ACCESS_OK:
            console.print("[yellow]Sign in with an account to use favorites.[/yellow]")
            raise typer.Exit(1)
        state.change_filter(FAVORITES_FILTER)
    state.change_filter(order.value)

    songs = state.filtered_songs[:limit] if limit else state.filtered_songs
    if not songs:
        console.print("[yellow]No songs found.[/yellow]")
        return

    console.print(songs_table(songs))
    if not is_online:
        console.print("[dim]Offline: showing the bundled song list[/dim]")
    console.print(f"\n[dim]Showing {len(songs)} of {len(state.filtered_songs)} songs[/dim]")


@app.command("search")
def search_songs(
    query: str = typer.Argument(..., help="Text to find in song numbers and titles"),
    sort: str = typer.Option("Number", "--sort", "-s", help="Sort order (Number|Alphabet)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Search songs by number or title."""
    state, _, _ = load_state(common.load_config(config_path))
    try:
        state.change_filter(SortOrder.parse(sort).value)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    state.set_search_query(query)
    songs = state.flush()

    if not songs:
        console.print(f"[yellow]No songs match '{query}'[/yellow]")
        return

    console.print(songs_table(songs, title=f"Search: {query}"))


@app.command("show")
def show_song(
    number: str = typer.Argument(..., help="Song number"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show the lyrics of a song."""
    config = common.load_config(config_path)
    state, _, _ = load_state(config)
    song = next((s for s in state.songs if s.number == number), None)
    if song is None:
        console.print(f"[red]Song not found: {number}[/red]")
        raise typer.Exit(1)

    with common.get_store(config) as store:
        prefs = Preferences(store)
        justify = JUSTIFY.get(prefs.text_align, "left")
        is_dark = prefs.is_dark_mode

    star = " [yellow]*[/yellow]" if song.is_favorite else ""
    console.print(f"\n[bold cyan]{song.number}[/bold cyan] [bold]{song.title}[/bold]{star}\n")

    border = "white" if is_dark else "blue"
    for verse in song.verses:
        console.print(
            Panel(
                Text(verse.lyrics, justify=justify),
                title=verse.number or None,
                title_align="left",
                border_style=border,
            )
        )

    if not song.verses:
        console.print("[dim]This song has no lyrics yet.[/dim]")
    if song.has_audio:
        console.print(f"[dim]Audio: {song.audio_url}[/dim]")


@app.command("random")
def random_verse(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show a random verse (verse of the day)."""
    config = common.load_config(config_path)
    try:
        songs = common.get_repository(config).get_songs().songs
    except (FileNotFoundError, SongValidationError, RemoteDatabaseError) as e:
        common.fail(e)

    verse = verse_of_the_day(songs)
    if not verse.location:
        console.print(f"[yellow]{verse.text}[/yellow]")
        return

    console.print(Panel(verse.text, title="Verse of the Day", subtitle=verse.location, border_style="green"))
