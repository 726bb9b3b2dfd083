"""
Marker store for the report map

Keeps the on-map marker set consistent with report lifecycle events and
with the one-time load of unexpired reports.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.constants import SEVERITY_STYLES
from litterbugs.core.geo import Coordinate
from litterbugs.reports.models import Report, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerStyle:
    """Icon styling for a marker."""
    color: str
    icon: str


def marker_style(severity: Optional[Severity]) -> MarkerStyle:
    """
    Marker style for a severity.

    Low and High have their own colours; Medium, unset and unknown
    severities share the default.
    """
    key = severity.value.lower() if severity else "medium"
    color, icon = SEVERITY_STYLES.get(key, SEVERITY_STYLES["medium"])
    return MarkerStyle(color=color, icon=icon)


@dataclass
class Marker:
    """Map projection of a persisted report."""
    id: str
    coordinate: Coordinate
    report: Report

    @property
    def style(self) -> MarkerStyle:
        return marker_style(self.report.severity)

    @classmethod
    def from_report(cls, report: Report) -> "Marker":
        return cls(id=report.id, coordinate=report.coordinate, report=report)


class MarkerStore:
    """
    In-memory set of visible markers, one per report id.

    Render order is insertion order and carries no meaning.
    """

    def __init__(self):
        self._markers: Dict[str, Marker] = {}

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, report_id: str) -> bool:
        return report_id in self._markers

    @property
    def markers(self) -> List[Marker]:
        return list(self._markers.values())

    def get(self, report_id: str) -> Optional[Marker]:
        return self._markers.get(report_id)

    async def load(
        self,
        gateway: BackendGateway,
        now: Optional[datetime] = None
    ) -> int:
        """
        Replace the marker set with the backend's unexpired reports.

        Rows without both coordinates, and any row already expired at
        ``now``, are left out.

        Returns:
            Number of markers loaded
        """
        now = now or datetime.now(timezone.utc)
        reports = await gateway.list_unexpired(now)
        self.replace_all(reports, now)
        return len(self._markers)

    def replace_all(self, reports: List[Report], now: datetime) -> None:
        markers: Dict[str, Marker] = {}
        skipped = 0
        for report in reports:
            if not report.has_coordinates or report.is_expired(now):
                skipped += 1
                continue
            markers[report.id] = Marker.from_report(report)

        self._markers = markers
        logger.info(f"Loaded {len(markers)} markers ({skipped} skipped)")

    def insert(self, report: Report) -> Optional[Marker]:
        """
        Add a marker for a newly created report.

        An id that is already present is refreshed in place instead of
        being duplicated. Reports without coordinates get no marker.
        """
        if not report.has_coordinates:
            logger.warning(f"Report {report.id} has no coordinates, not shown")
            return None

        existing = self._markers.get(report.id)
        if existing is not None:
            existing.report = report
            return existing

        marker = Marker.from_report(report)
        self._markers[report.id] = marker
        return marker

    def update(self, report: Report) -> Optional[Marker]:
        """Replace the report behind an existing marker; its coordinate stays put."""
        marker = self._markers.get(report.id)
        if marker is None:
            logger.debug(f"Update for unknown marker {report.id} ignored")
            return None
        marker.report = report
        return marker

    def remove(self, report_id: str) -> bool:
        return self._markers.pop(report_id, None) is not None

    def clear(self) -> None:
        self._markers = {}
