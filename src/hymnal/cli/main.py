"""Main entry point for the hymnal CLI.

Provides a Typer-based CLI for reading hymns, keeping favorites, and
managing the signed-in account and reading preferences.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from hymnal import __version__
from hymnal.cli import common
from hymnal.cli.commands import auth as auth_commands
from hymnal.cli.commands import collections as collection_commands
from hymnal.cli.commands import favorites as favorite_commands
from hymnal.cli.commands import settings as settings_commands
from hymnal.cli.commands import songs as song_commands
from hymnal.db.models import ISSUE_TYPES
from hymnal.services.announcements import AnnouncementService
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.reports import ReportError, ReportService
from hymnal.services.songs import SongValidationError

console = Console()

app = typer.Typer(
    name="hymnal",
    help="Read hymns and keep your favorites in sync",
    rich_markup_mode="rich",
)

app.add_typer(song_commands.app, name="songs", help="Browse and read songs")
app.add_typer(favorite_commands.app, name="favorites", help="Manage favorite songs")
app.add_typer(auth_commands.app, name="auth", help="Sign in and manage your account")
app.add_typer(settings_commands.app, name="settings", help="Reading preferences")
app.add_typer(collection_commands.app, name="collections", help="Browse song collections")

open_app = typer.Typer(help="Open external pages")
app.add_typer(open_app, name="open", help="Open external pages")


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"hymnal version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """hymnal: a hymn book for the terminal.

    ## Commands

    * [bold cyan]songs[/bold cyan] - List, search and read songs
    * [bold cyan]favorites[/bold cyan] - Keep favorite songs (synced when signed in)
    * [bold cyan]auth[/bold cyan] - Sign in, register, continue as guest
    * [bold cyan]settings[/bold cyan] - Font size, theme, alignment

    ## Getting Started

    1. Browse the hymnal:
       [dim]$ hymnal songs list[/dim]

    2. Read a song:
       [dim]$ hymnal songs show 001[/dim]
    """
    pass


@app.command("announcements")
def announcements(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show current announcements."""
    config = common.load_config(config_path)
    db = common.require_db(config)
    try:
        items = AnnouncementService(db).list_active()
    except RemoteDatabaseError as e:
        common.fail(e)

    if not items:
        console.print("[yellow]No announcements right now.[/yellow]")
        return

    for item in items:
        body = item.content if item.type == "text" else f"{item.content}\n[dim]{item.image_url}[/dim]"
        console.print(Panel(body, title=item.title, border_style="cyan"))


@app.command("report")
def report(
    number: str = typer.Argument(..., help="Song number"),
    issue: str = typer.Option(
        ...,
        "--issue",
        "-i",
        help=f"Issue type ({', '.join(ISSUE_TYPES)})",
    ),
    description: str = typer.Option(..., "--description", "-d", help="What is wrong"),
    verse: Optional[str] = typer.Option(None, "--verse", help="Verse with the problem"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Report a problem with a song's lyrics."""
    config = common.load_config(config_path)
    db = common.require_db(config)
    with common.get_store(config) as store:
        session = common.require_session(store)

    try:
        song = common.get_repository(config).get_song(number)
    except (FileNotFoundError, SongValidationError) as e:
        common.fail(e)
    if song is None:
        console.print(f"[red]Song not found: {number}[/red]")
        raise typer.Exit(1)

    try:
        report_id = ReportService(db.with_token(session.id_token)).submit(
            song, issue, description, session, specific_verse=verse
        )
    except (ReportError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Thank you! Report {report_id} submitted for song {number}[/green]")


@open_app.command("play-store")
def open_play_store(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Open the app's store page."""
    config = common.load_config(config_path)
    console.print(f"Opening {config.play_store_url}")
    typer.launch(config.play_store_url)


@open_app.command("donate")
def open_donate(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Open the donation page."""
    config = common.load_config(config_path)
    console.print(f"Opening {config.donation_url}")
    typer.launch(config.donation_url)


@app.command()
def config(
    action: str = typer.Argument(
        ...,
        help="Action to perform (show, set, path)",
    ),
    key: str = typer.Argument(
        None,
        help="Configuration key (for set action)",
    ),
    value: str = typer.Argument(
        None,
        help="Configuration value (for set action)",
    ),
) -> None:
    """Manage configuration.

    Show, set, or display the path to the configuration file.

    Examples:
        hymnal config show          # Show all configuration
        hymnal config set firebase.database_url https://my-app.firebaseio.com
        hymnal config path          # Show config file path
    """
    from hymnal.core.config import ensure_config_exists
    from hymnal.core.paths import get_config_path

    if action == "show":
        try:
            cfg = ensure_config_exists()
        except OSError as e:
            console.print(f"[red]Error loading config: {e}[/red]")
            raise typer.Exit(1)

        table = Panel.fit(
            f"[cyan]Database URL:[/cyan] {cfg.firebase_database_url or '(not set)'}\n"
            f"[cyan]API Key:[/cyan] {'(set)' if cfg.firebase_api_key else '(not set)'}\n"
            f"[cyan]Bundled Songs:[/cyan] {cfg.songs_bundled_path}\n"
            f"[cyan]Prefer Remote:[/cyan] {cfg.songs_prefer_remote}\n"
            f"[cyan]Role Timeout:[/cyan] {cfg.roles_timeout_seconds}s\n"
            f"[cyan]Local Database:[/cyan] {cfg.db_path}\n"
            f"[cyan]Log Level:[/cyan] {cfg.log_level}",
            title="Configuration",
            border_style="green",
        )
        console.print(table)

    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: hymnal config set <key> <value>[/red]")
            raise typer.Exit(1)

        try:
            cfg = ensure_config_exists()
            cfg.set(key, value)
            cfg.save()
            console.print(f"[green]Set {key} = {value}[/green]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    elif action == "path":
        console.print(get_config_path())

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: show, set, path")
        raise typer.Exit(1)


# Entry point for the CLI
def cli_entry() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli_entry()
