"""
In-memory collaborators for tests
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.errors import (
    LitterbugsError,
    NotFoundError,
    PermissionDeniedError,
    UploadError,
)
from litterbugs.core.geo import Coordinate
from litterbugs.reports.models import Report
from litterbugs.screen.collaborators import LocationProvider, Notifier, PhotoPicker

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeGateway(BackendGateway):
    """Gateway that records every call and enforces ownership like the server."""

    def __init__(self, caller: Callable[[], Optional[str]] = lambda: None):
        self.caller = caller
        self.rows: Dict[str, dict] = {}
        self.blobs: Dict[str, bytes] = {}
        self.calls: List[tuple] = []

        self.fail_insert: Optional[LitterbugsError] = None
        self.fail_update: Optional[LitterbugsError] = None
        self.fail_delete: Optional[LitterbugsError] = None
        self.fail_list: Optional[LitterbugsError] = None
        self.fail_upload_indices: set = set()

        self.insert_gate: Optional[asyncio.Event] = None
        self.url_gates: Dict[str, asyncio.Event] = {}

        self._next_id = 1
        self._uploads = 0
        self._signatures = 0

    def add_row(self, **row) -> dict:
        row.setdefault("title", "Litter report")
        row.setdefault("photo_paths", [])
        row.setdefault("created_at", (NOW - timedelta(days=1)).isoformat())
        # Relative to the wall clock, since callers may load with the real time
        row.setdefault(
            "expires_at", (datetime.now(timezone.utc) + timedelta(days=29)).isoformat()
        )
        self.rows[row["id"]] = row
        return row

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def list_unexpired(self, now: datetime) -> List[Report]:
        self.calls.append(("list", now))
        if self.fail_list:
            raise self.fail_list
        return [Report.from_dict(row) for row in self.rows.values()]

    async def insert(self, payload: dict) -> Report:
        self.calls.append(("insert", dict(payload)))
        if self.insert_gate is not None:
            await self.insert_gate.wait()
        if self.fail_insert:
            raise self.fail_insert

        report_id = f"r{self._next_id}"
        self._next_id += 1
        row = dict(payload)
        row.update({
            "id": report_id,
            "photo_paths": [],
            "created_at": NOW.isoformat(),
            "expires_at": (NOW + timedelta(days=30)).isoformat(),
        })
        self.rows[report_id] = row
        return Report.from_dict(row)

    def _check_owner(self, report_id: str, payload: Optional[dict] = None) -> dict:
        row = self.rows.get(report_id)
        if row is None:
            raise NotFoundError(f"Report {report_id} not found")
        caller = self.caller()
        if caller is not None and row.get("user_id") == caller:
            return row
        if row.get("user_id") is None and payload is not None:
            if set(payload) == {"photo_paths"} and not row.get("photo_paths"):
                return row
        raise PermissionDeniedError()

    async def update(self, report_id: str, payload: dict) -> Report:
        self.calls.append(("update", report_id, dict(payload)))
        if self.fail_update:
            raise self.fail_update
        row = self._check_owner(report_id, payload)
        row.update(payload)
        return Report.from_dict(row)

    async def delete(self, report_id: str) -> None:
        self.calls.append(("delete", report_id))
        if self.fail_delete:
            raise self.fail_delete
        self._check_owner(report_id)
        del self.rows[report_id]

    async def upload_blob(self, path: str, data: bytes, content_type: str) -> None:
        index = self._uploads
        self._uploads += 1
        self.calls.append(("upload", path, content_type))
        if index in self.fail_upload_indices:
            raise UploadError(f"Upload of {path} failed")
        if path in self.blobs:
            raise UploadError(f"{path} already exists")
        self.blobs[path] = data

    async def signed_read_url(self, path: str, ttl_seconds: int) -> str:
        self.calls.append(("sign", path, ttl_seconds))
        gate = self.url_gates.get(path)
        if gate is not None:
            await gate.wait()
        if path not in self.blobs:
            raise NotFoundError(f"No stored photo at {path}")
        self._signatures += 1
        return f"https://cdn.test/{path}?ttl={ttl_seconds}&sig={self._signatures}"


class FakeLocation(LocationProvider):
    def __init__(self, coordinate: Optional[Coordinate] = None, error: Optional[Exception] = None):
        self.coordinate = coordinate
        self.error = error

    async def current_coordinate(self) -> Coordinate:
        if self.error is not None:
            raise self.error
        return self.coordinate


class FakePicker(PhotoPicker):
    def __init__(self, uris: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.uris = list(uris or [])
        self.error = error

    async def pick(self) -> Optional[str]:
        if self.error is not None:
            raise self.error
        return self.uris.pop(0) if self.uris else None


class RecordingNotifier(Notifier):
    def __init__(self):
        self.alerts: List[tuple] = []

    def alert(self, title: str, message: str) -> None:
        self.alerts.append((title, message))

    @property
    def titles(self) -> List[str]:
        return [title for title, _ in self.alerts]


def fake_reader(uri: str) -> bytes:
    """Photo reader that fails for URIs containing 'missing'."""
    if "missing" in uri:
        raise FileNotFoundError(uri)
    return f"bytes:{uri}".encode("utf-8")
