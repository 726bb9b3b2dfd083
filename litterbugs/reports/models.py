"""
Report data model for Litterbugs.

A Report is the persisted entity rendered on the map; a Draft is the
client-only composition buffer used to create or edit one.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from litterbugs.core.config import settings
from litterbugs.core.constants import LITTER_LABELS, NOTES_LABELS
from litterbugs.core.errors import DraftLockedError
from litterbugs.core.geo import Coordinate, is_coordinate_value

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Tri-level severity that drives marker colour."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Severity"]:
        """Case-insensitive lookup; blank or unknown values give None."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        wanted = str(value).strip().lower()
        for severity in cls:
            if severity.value.lower() == wanted:
                return severity
        logger.debug(f"Unknown severity value: {value!r}")
        return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _label_list(value: Any) -> Optional[List[str]]:
    if not value:
        return None
    return [str(item) for item in value]


@dataclass
class Report:
    """
    Persisted litter report.

    ``id`` and the coordinates never change after creation. Coordinates are
    optional here only because rows coming back from a store may lack them;
    such rows are never turned into markers.
    """
    id: str
    latitude: Optional[float]
    longitude: Optional[float]
    title: str = ""
    litter_types: Optional[List[str]] = None
    types: Optional[str] = None
    notes_presets: Optional[List[str]] = None
    notes_other: Optional[str] = None
    severity: Optional[Severity] = None
    user_id: Optional[str] = None
    photo_paths: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @property
    def has_coordinates(self) -> bool:
        return is_coordinate_value(self.latitude) and is_coordinate_value(self.longitude)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(float(self.latitude), float(self.longitude))

    def is_expired(self, now: datetime) -> bool:
        """True once ``expires_at`` is at or before ``now``."""
        return self.expires_at is not None and self.expires_at <= now

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        """Guest-created reports (no owner) are owned by nobody."""
        return user_id is not None and self.user_id == user_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        """Create Report from a store row."""
        latitude = data.get("latitude")
        longitude = data.get("longitude")
        return cls(
            id=str(data["id"]),
            latitude=latitude if is_coordinate_value(latitude) else None,
            longitude=longitude if is_coordinate_value(longitude) else None,
            title=data.get("title") or "",
            litter_types=_label_list(data.get("litter_types")),
            types=data.get("types"),
            notes_presets=_label_list(data.get("notes_presets")),
            notes_other=data.get("notes_other"),
            severity=Severity.parse(data.get("severity")),
            user_id=data.get("user_id"),
            photo_paths=list(data.get("photo_paths") or []),
            created_at=_parse_timestamp(data.get("created_at")),
            expires_at=_parse_timestamp(data.get("expires_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "litter_types": self.litter_types,
            "types": self.types,
            "notes_presets": self.notes_presets,
            "notes_other": self.notes_other,
            "severity": self.severity.value if self.severity else None,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "user_id": self.user_id,
            "photo_paths": list(self.photo_paths),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


@dataclass
class Draft:
    """
    Unsaved report composition.

    Holds the chip selections, free-text supplements and device-local photo
    references. ``editing_id`` is set when the draft edits an existing report.
    """
    coordinate: Optional[Coordinate] = None
    editing_id: Optional[str] = None
    title: str = ""
    selected_types: List[str] = field(default_factory=list)
    types: str = ""
    selected_notes: List[str] = field(default_factory=list)
    notes: str = ""
    severity: Optional[Severity] = None
    photos: List[str] = field(default_factory=list)
    locked: bool = False

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @classmethod
    def for_new_report(cls, coordinate: Coordinate) -> "Draft":
        """Empty draft at a pressed map coordinate."""
        return cls(coordinate=coordinate)

    @classmethod
    def from_report(cls, report: Report) -> "Draft":
        """Draft pre-populated from an existing report. Photos are not re-edited."""
        return cls(
            coordinate=report.coordinate if report.has_coordinates else None,
            editing_id=report.id,
            title=report.title or "",
            selected_types=list(report.litter_types or []),
            types=report.types or "",
            selected_notes=list(report.notes_presets or []),
            notes=report.notes_other or "",
            severity=report.severity,
        )

    def _check_unlocked(self) -> None:
        if self.locked:
            raise DraftLockedError()

    def set_title(self, title: str) -> None:
        self._check_unlocked()
        self.title = title

    def set_types_text(self, text: str) -> None:
        self._check_unlocked()
        self.types = text

    def set_notes_text(self, text: str) -> None:
        self._check_unlocked()
        self.notes = text

    def set_severity(self, severity: Optional[str]) -> None:
        self._check_unlocked()
        self.severity = Severity.parse(severity)

    def toggle_type(self, label: str) -> bool:
        """
        Select or deselect a litter type chip.

        Returns:
            True if the label is selected afterwards
        """
        self._check_unlocked()
        if label not in LITTER_LABELS:
            raise ValueError(f"Unknown litter type: {label}")
        return _toggle(self.selected_types, label)

    def toggle_note(self, label: str) -> bool:
        """Select or deselect a preset note chip."""
        self._check_unlocked()
        if label not in NOTES_LABELS:
            raise ValueError(f"Unknown note preset: {label}")
        return _toggle(self.selected_notes, label)

    def add_photo(self, uri: str, limit: Optional[int] = None) -> None:
        """
        Attach a device-local photo.

        The newest photos win: once the cap is exceeded the oldest
        selection is dropped.
        """
        self._check_unlocked()
        cap = limit if limit is not None else settings.max_photos_per_report
        self.photos = (self.photos + [uri])[-cap:] if cap > 0 else []

    def remove_photo(self, index: int) -> None:
        self._check_unlocked()
        self.photos = [p for i, p in enumerate(self.photos) if i != index]

    def build_fields(self, default_title: Optional[str] = None) -> Dict[str, Any]:
        """
        Mutable report fields from the current draft values.

        Blank text becomes None, empty selections become None, and a blank
        title is replaced by the default title.
        """
        return {
            "title": self.title.strip() or (default_title or settings.default_report_title),
            "litter_types": list(self.selected_types) or None,
            "types": self.types.strip() or None,
            "notes_presets": list(self.selected_notes) or None,
            "notes_other": self.notes.strip() or None,
            "severity": self.severity.value if self.severity else None,
        }

    def create_payload(
        self,
        user_id: Optional[str],
        default_title: Optional[str] = None
    ) -> Dict[str, Any]:
        """Insert payload: every field plus coordinates and owner."""
        if self.coordinate is None:
            raise ValueError("A new report needs a coordinate")
        payload = self.build_fields(default_title)
        payload.update({
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "user_id": user_id,
        })
        return payload

    def update_payload(self, default_title: Optional[str] = None) -> Dict[str, Any]:
        """Update payload: the full mutable field set, never coordinates or owner."""
        return self.build_fields(default_title)


def _toggle(selection: List[str], label: str) -> bool:
    if label in selection:
        selection.remove(label)
        return False
    selection.append(label)
    return True
