"""Song report commands for hymnal-admin."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hymnal.cli import common
from hymnal.db.models import REPORT_STATUSES
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.reports import ReportError, ReportService

console = Console()
app = typer.Typer(help="Review song reports")


@app.command("list")
def list_reports(
    status: Optional[str] = typer.Option(
        None,
        "--status",
        "-s",
        help=f"Filter by status ({'|'.join(REPORT_STATUSES)})",
    ),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """List song reports, newest first."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        reports = ReportService(db).list(status)
    except RemoteDatabaseError as e:
        common.fail(e)

    if not reports:
        console.print("[yellow]No reports found.[/yellow]")
        return

    table = Table(title="Song Reports")
    table.add_column("ID", style="dim")
    table.add_column("Song", style="cyan")
    table.add_column("Issue", style="magenta")
    table.add_column("Description")
    table.add_column("Reporter", style="dim")
    table.add_column("Status")

    for report in reports:
        song = f"{report.song_number} {report.song_title}"
        if report.specific_verse:
            song += f" (verse {report.specific_verse})"
        table.add_row(
            report.id,
            song,
            report.issue_type,
            report.description,
            report.reporter_email or report.reporter_name,
            report.status,
        )

    console.print(table)
    pending = sum(1 for r in reports if r.is_pending)
    console.print(f"\n[dim]{len(reports)} reports, {pending} pending[/dim]")


@app.command("resolve")
def resolve_report(
    report_id: str = typer.Argument(..., help="Report ID"),
    status: str = typer.Option("resolved", "--status", "-s", help="resolved or dismissed"),
    response: Optional[str] = typer.Option(None, "--response", "-r", help="Reply to the reporter"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Mark a report resolved or dismissed."""
    config = common.load_config(config_path)
    _, db = common.require_admin(config)
    try:
        ReportService(db).resolve(report_id, status, response)
    except (ReportError, RemoteDatabaseError) as e:
        common.fail(e)

    console.print(f"[green]Report {report_id} marked {status}[/green]")
