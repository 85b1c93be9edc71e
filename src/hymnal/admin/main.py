"""Main entry point for the hymnal-admin CLI.

Provides a Typer-based CLI for managing roles, the song catalog,
announcements, collections and song reports. Every command requires a
signed-in admin (see `hymnal auth login`).
"""

import typer
from rich.console import Console

from hymnal import __version__
from hymnal.admin.commands import announcements as announcement_commands
from hymnal.admin.commands import collections as collection_commands
from hymnal.admin.commands import reports as report_commands
from hymnal.admin.commands import roles as role_commands
from hymnal.admin.commands import songs as song_commands

console = Console()

app = typer.Typer(
    name="hymnal-admin",
    help="Administrative tools for hymnal",
    rich_markup_mode="rich",
)

app.add_typer(role_commands.app, name="roles", help="Check and grant roles")
app.add_typer(song_commands.app, name="songs", help="Edit the song catalog")
app.add_typer(announcement_commands.app, name="announcements", help="Manage announcements")
app.add_typer(collection_commands.app, name="collections", help="Manage collections")
app.add_typer(report_commands.app, name="reports", help="Review song reports")


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"hymnal-admin version {__version__}")
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
    """hymnal-admin: Administrative tools for hymnal.

    ## Commands

    * [bold cyan]roles[/bold cyan] - Check your role, grant roles (super admins)
    * [bold cyan]songs[/bold cyan] - Add, delete and upload songs
    * [bold cyan]announcements[/bold cyan] - Create and schedule announcements
    * [bold cyan]collections[/bold cyan] - Create collections and add songs
    * [bold cyan]reports[/bold cyan] - Review reported lyric problems
    """
    pass


def cli_entry() -> None:
    """Entry point for the admin CLI."""
    app()


if __name__ == "__main__":
    cli_entry()
