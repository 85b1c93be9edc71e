"""Song catalog commands for hymnal-admin."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from hymnal.cli import common
from hymnal.db.models import Song, Verse
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.songs import SongRepository, SongValidationError

console = Console()
app = typer.Typer(help="Edit the song catalog")


@app.command("add")
def add_song(
    number: str = typer.Option(..., "--number", "-n", help="Song number"),
    title: str = typer.Option(..., "--title", "-t", help="Song title"),
    verses: Optional[list[str]] = typer.Option(
        None,
        "--verse",
        "-V",
        help="Verse lyrics, in order (repeatable)",
    ),
    audio_url: Optional[str] = typer.Option(None, "--audio-url", help="Audio recording URL"),
    replace: bool = typer.Option(False, "--replace", help="Overwrite an existing song"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Add a song to the remote catalog."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)

    song = Song(
        number=number,
        title=title,
        verses=[Verse(number=str(i), lyrics=text) for i, text in enumerate(verses or [], 1)],
        audio_url=audio_url,
    )
    repo = SongRepository(db, config.songs_bundled_path)
    try:
        if replace:
            repo.update_song(number, song)
        else:
            repo.add_song(song)
    except (SongValidationError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Saved song {number}: {title}[/green]")


@app.command("delete")
def delete_song(
    number: str = typer.Argument(..., help="Song number"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete a song from the remote catalog."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)

    if not yes:
        typer.confirm(f"Delete song {number}?", abort=True)

    try:
        SongRepository(db, config.songs_bundled_path).delete_song(number)
    except RemoteDatabaseError as e:
        common.fail(e)

    console.print(f"[green]Deleted song {number}[/green]")


@app.command("upload")
def upload_songs(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON catalog (defaults to the bundled one)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Replace the remote catalog with a JSON file."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)

    if not yes:
        typer.confirm("This replaces every song in the database. Continue?", abort=True)

    try:
        count = SongRepository(db, config.songs_bundled_path).upload_bundled(file)
    except (FileNotFoundError, SongValidationError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Uploaded {count} songs[/green]")
