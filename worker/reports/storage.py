"""Filesystem storage for reports and screenshots.

Layout under the base path::

    reports/<id>.json        single or comparison report
    screenshots/<id>.png     one per analyzed page, keyed by its report id

Saves are all-or-nothing: every artifact is staged under a temporary name
and only renamed into place once all of them were written. Screenshots are
renamed before the report body, so a visible report always has its images.
"""

import json
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import structlog

from api.exceptions import PersistenceError
from worker.capture.url import validate_identifier
from worker.reports.contract import (
    AnyReport,
    ComparisonReport,
    Report,
    ReportMetadata,
    report_from_dict,
)

logger = structlog.get_logger(__name__)


class ReportStorage:
    """Storage manager for analysis reports."""

    def __init__(self, base_path: Path | str):
        """
        Initialize storage.

        Args:
            base_path: Base directory for report and screenshot files
        """
        self.base_path = Path(base_path)
        self.reports_dir = self.base_path / "reports"
        self.screenshots_dir = self.base_path / "screenshots"

    def ensure_directories(self) -> None:
        """Create the storage directories if needed."""
        try:
            self.reports_dir.mkdir(parents=True, exist_ok=True)
            self.screenshots_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Storage directory unavailable: {e}") from e

    def is_writable(self) -> bool:
        """Check that both storage directories exist and accept writes."""
        try:
            self.ensure_directories()
        except PersistenceError:
            return False
        return os.access(self.reports_dir, os.W_OK) and os.access(self.screenshots_dir, os.W_OK)

    def _report_path(self, report_id: str) -> Path:
        return self.reports_dir / f"{report_id}.json"

    def _screenshot_path(self, report_id: str) -> Path:
        return self.screenshots_dir / f"{report_id}.png"

    def _commit(self, report_id: str, artifacts: list[tuple[Path, bytes]]) -> None:
        """Write artifacts atomically as a group, or leave nothing behind."""
        self.ensure_directories()

        staged: list[tuple[Path, Path]] = []
        committed: list[Path] = []
        try:
            for target, data in artifacts:
                temp = target.with_name(f".{target.name}.{uuid4().hex}.tmp")
                staged.append((temp, target))
                temp.write_bytes(data)
            for temp, target in staged:
                os.replace(temp, target)
                committed.append(target)
        except OSError as e:
            for temp, _ in staged:
                temp.unlink(missing_ok=True)
            for target in committed:
                target.unlink(missing_ok=True)
            logger.error("report_store_failed", report_id=report_id, error=str(e))
            raise PersistenceError(f"Failed to store report: {e}", identifier=report_id) from e

    @staticmethod
    def _encode(payload: dict[str, Any]) -> bytes:
        return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")

    def save_report(self, report: Report, screenshot: bytes) -> str:
        """
        Store a single report and its screenshot.

        Returns:
            The report ID

        Raises:
            PersistenceError: If any artifact could not be written
        """
        self._commit(
            report.id,
            [
                (self._screenshot_path(report.id), screenshot),
                (self._report_path(report.id), self._encode(report.to_dict())),
            ],
        )
        logger.info("report_stored", report_id=report.id, url=report.url)
        return report.id

    def save_comparison(self, comparison: ComparisonReport, screenshots: dict[str, bytes]) -> str:
        """
        Store a comparison report and one screenshot per component report.

        Args:
            comparison: The comparison report
            screenshots: PNG bytes keyed by component report id

        Raises:
            PersistenceError: If a screenshot is missing or any write fails
        """
        artifacts: list[tuple[Path, bytes]] = []
        for report in comparison.reports:
            if report.id not in screenshots:
                raise PersistenceError(
                    f"Missing screenshot for report {report.id}", identifier=comparison.id
                )
            artifacts.append((self._screenshot_path(report.id), screenshots[report.id]))
        artifacts.append((self._report_path(comparison.id), self._encode(comparison.to_dict())))

        self._commit(comparison.id, artifacts)
        logger.info(
            "comparison_stored",
            report_id=comparison.id,
            url_a=comparison.report_a.url,
            url_b=comparison.report_b.url,
        )
        return comparison.id

    def _read(self, path: Path) -> AnyReport:
        try:
            return report_from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(
                f"Stored report is unreadable: {path.name}", identifier=path.stem
            ) from e

    def load(self, report_id: str) -> AnyReport | None:
        """
        Load a report of either kind.

        Returns:
            The report, or None if not found

        Raises:
            ValidationError: If the id is malformed
            PersistenceError: If the stored file cannot be parsed
        """
        validate_identifier(report_id)
        path = self._report_path(report_id)
        if not path.exists():
            return None
        return self._read(path)

    def load_screenshot(self, report_id: str) -> bytes | None:
        """Load the PNG captured for a report, or None if not found."""
        validate_identifier(report_id, resource="screenshot")
        path = self._screenshot_path(report_id)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Screenshot is unreadable: {e}", identifier=report_id) from e

    def list_reports(self) -> list[ReportMetadata]:
        """List metadata for every stored report, newest first."""
        if not self.reports_dir.exists():
            return []

        entries: list[ReportMetadata] = []
        for path in self.reports_dir.glob("*.json"):
            try:
                entries.append(self._read(path).metadata())
            except PersistenceError:
                logger.warning("report_unreadable", path=str(path))

        entries.sort(key=lambda m: _sort_timestamp(m.created_at), reverse=True)
        return entries


def _sort_timestamp(created_at: datetime) -> float:
    # Naive timestamps are treated as UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at.timestamp()
