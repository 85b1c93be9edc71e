"""Reading preference commands for hymnal."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from hymnal.cli import common
from hymnal.services.settings import TEXT_ALIGNMENTS, PreferenceError, Preferences

console = Console()
app = typer.Typer(help="Font, theme and alignment settings")


@app.command("show")
def show_settings(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show reading preferences."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        prefs = Preferences(store)
        table = Table(title="Settings")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Font size", f"{prefs.font_size:g}")
        table.add_row("Theme", "Dark" if prefs.is_dark_mode else "Light")
        table.add_row("Font style", prefs.font_style)
        table.add_row("Text alignment", prefs.text_align)

    console.print(table)


@app.command("font-size")
def font_size(
    size: float = typer.Argument(..., help="Font size (12-30)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Set the lyrics font size."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        try:
            Preferences(store).set_font_size(size)
        except PreferenceError as e:
            common.fail(e)
    console.print(f"[green]Font size set to {size:g}[/green]")


@app.command("theme")
def theme(
    mode: str = typer.Argument("toggle", help="light, dark or toggle"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Switch between light and dark theme."""
    mode = mode.lower()
    if mode not in ("light", "dark", "toggle"):
        console.print(f"[red]Unknown theme: {mode}[/red]")
        console.print("Valid themes: light, dark, toggle")
        raise typer.Exit(1)

    config = common.load_config(config_path)
    with common.get_store(config) as store:
        prefs = Preferences(store)
        if mode == "toggle":
            dark = prefs.toggle_theme()
        else:
            dark = mode == "dark"
            prefs.set_dark_mode(dark)

    console.print(f"[green]Theme set to {'dark' if dark else 'light'}[/green]")


@app.command("font-style")
def font_style(
    style: str = typer.Argument(..., help="Font family name"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Set the lyrics font family."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        try:
            Preferences(store).set_font_style(style)
        except PreferenceError as e:
            common.fail(e)
    console.print(f"[green]Font style set to {style}[/green]")


@app.command("align")
def align(
    value: str = typer.Argument(..., help=f"Text alignment ({'|'.join(TEXT_ALIGNMENTS)})"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Set the lyrics text alignment."""
    config = common.load_config(config_path)
    with common.get_store(config) as store:
        try:
            Preferences(store).set_text_align(value)
        except PreferenceError as e:
            common.fail(e)
    console.print(f"[green]Text alignment set to {value.lower()}[/green]")
