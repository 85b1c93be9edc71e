"""User reports about problems in song lyrics."""

from datetime import datetime
from typing import Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.models import ISSUE_TYPES, REPORT_STATUSES, Session, Song, SongReport
from hymnal.services.remote import RealtimeDatabaseClient

logger = get_logger(__name__)

REPORTS_PATH = "song_reports"


class ReportError(Exception):
    """Report could not be submitted or updated."""


class ReportService:
    def __init__(self, db: RealtimeDatabaseClient):
        self.db = db

    def submit(
        self,
        song: Song,
        issue_type: str,
        description: str,
        reporter: Session,
        specific_verse: Optional[str] = None,
    ) -> str:
        """Submit a report for a song.

        Args:
            song: Song being reported
            issue_type: One of ISSUE_TYPES
            description: What is wrong
            reporter: Session of the reporting user
            specific_verse: Verse number the problem is in (optional)

        Returns:
            The report id

        Raises:
            ReportError: On an unknown issue type or empty description
        """
        if issue_type not in ISSUE_TYPES:
            raise ReportError(f"Invalid issue type: {issue_type}. Use one of: {', '.join(ISSUE_TYPES)}")
        if not description.strip():
            raise ReportError("Please describe the issue")

        report = SongReport(
            id="",
            song_number=song.number,
            song_title=song.title,
            reporter_email=reporter.email,
            reporter_name=reporter.display_name or reporter.label,
            issue_type=issue_type,
            description=description.strip(),
            specific_verse=specific_verse,
            created_at=datetime.now().isoformat(),
        )
        report_id = self.db.push(REPORTS_PATH, report.to_dict())
        self.db.update(f"{REPORTS_PATH}/{report_id}", {"id": report_id})
        logger.info("Report %s submitted for song %s", report_id, song.number)
        return report_id

    def list(self, status: Optional[str] = None) -> list[SongReport]:
        """Reports, newest first, optionally filtered by status."""
        data = self.db.get(REPORTS_PATH) or {}
        if not isinstance(data, dict):
            return []
        reports = [SongReport.from_dict(key, value) for key, value in data.items() if isinstance(value, dict)]
        if status:
            reports = [r for r in reports if r.status == status]
        reports.sort(key=lambda r: r.created_at, reverse=True)
        return reports

    def get(self, report_id: str) -> Optional[SongReport]:
        data = self.db.get(f"{REPORTS_PATH}/{report_id}")
        if not isinstance(data, dict):
            return None
        return SongReport.from_dict(report_id, data)

    def resolve(self, report_id: str, status: str = "resolved", admin_response: Optional[str] = None) -> None:
        """Close a report.

        Raises:
            ReportError: If the report doesn't exist or the status is invalid
        """
        if status not in REPORT_STATUSES or status == "pending":
            raise ReportError(f"Invalid status: {status}. Use resolved or dismissed")
        if self.get(report_id) is None:
            raise ReportError(f"Report not found: {report_id}")

        self.db.update(
            f"{REPORTS_PATH}/{report_id}",
            {
                "status": status,
                "adminResponse": admin_response,
                "resolvedAt": datetime.now().isoformat(),
            },
        )
        logger.info("Report %s marked %s", report_id, status)
