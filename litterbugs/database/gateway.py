"""
SQL-backed gateway for self-hosted Litterbugs deployments.

Rows and photo bytes live in the same database. Ownership is checked
against the caller identity the gateway was built with, mirroring the
row-level security policies of the hosted backend.
"""

import asyncio
import hashlib
import hmac
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.config import settings
from litterbugs.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    UploadError,
    ValidationError,
)
from litterbugs.core.geo import is_coordinate_value
from litterbugs.reports.models import Report, Severity
from .connection import DatabaseConnection
from .models import ReportRow, StoredPhoto

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = frozenset({
    "title", "litter_types", "types", "notes_presets",
    "notes_other", "severity", "photo_paths",
})

CREATE_FIELDS = MUTABLE_FIELDS | {"latitude", "longitude", "user_id"}


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def _aware_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


def _to_report(row: ReportRow) -> Report:
    data = row.to_dict()
    data["created_at"] = _aware_utc(data["created_at"])
    data["expires_at"] = _aware_utc(data["expires_at"])
    return Report.from_dict(data)


def _check_fields(payload: Dict[str, Any], allowed: frozenset) -> None:
    unknown = set(payload) - allowed
    if unknown:
        raise ValidationError(f"Unexpected fields: {', '.join(sorted(unknown))}")

    severity = payload.get("severity")
    if severity is not None and Severity.parse(severity) is None:
        raise ValidationError(f"Invalid severity: {severity}")

    for key in ("litter_types", "notes_presets", "photo_paths"):
        value = payload.get(key)
        if value is not None and not isinstance(value, list):
            raise ValidationError(f"{key} must be a list")


def sign_path(secret: str, path: str, expires: int) -> str:
    """HMAC signature binding a storage path to its expiry (epoch seconds)."""
    message = f"{path}:{expires}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signed_path(
    secret: str,
    path: str,
    expires: int,
    signature: str,
    now: Optional[datetime] = None
) -> bool:
    """Check a signed read link produced by ``SqlGateway.signed_read_url``."""
    now = now or datetime.now(timezone.utc)
    if expires <= int(now.timestamp()):
        return False
    return hmac.compare_digest(sign_path(secret, path, expires), signature)


class SqlGateway(BackendGateway):
    """
    Backend gateway over a SQLAlchemy database.

    Synchronous session work runs on a worker thread so callers on the
    event loop are never blocked.
    """

    def __init__(
        self,
        db: DatabaseConnection,
        caller: Callable[[], Optional[str]],
        signing_secret: Optional[str] = None,
        public_url: Optional[str] = None,
        report_ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize SQL gateway.

        Args:
            db: Database connection
            caller: Returns the identity performing requests (None for guests)
            signing_secret: Secret for signed read URLs
            public_url: Base URL the photo server is reachable at
            report_ttl: Time from creation until a report expires
            clock: Source of the current time
        """
        self.db = db
        self.caller = caller
        self.public_url = (public_url or settings.storage_public_url).rstrip("/")
        self.report_ttl = report_ttl or timedelta(days=settings.report_ttl_days)
        self.clock = clock

        self.signing_secret = signing_secret or settings.storage_signing_secret
        if not self.signing_secret:
            logger.warning("No storage signing secret configured, using a per-process secret")
            self.signing_secret = secrets.token_hex(32)

    async def list_unexpired(self, now: datetime) -> List[Report]:
        return await asyncio.to_thread(self._list_unexpired, now)

    async def insert(self, payload: Dict[str, Any]) -> Report:
        return await asyncio.to_thread(self._insert, payload)

    async def update(self, report_id: str, payload: Dict[str, Any]) -> Report:
        return await asyncio.to_thread(self._update, report_id, payload)

    async def delete(self, report_id: str) -> None:
        await asyncio.to_thread(self._delete, report_id)

    async def upload_blob(self, path: str, data: bytes, content_type: str) -> None:
        await asyncio.to_thread(self._upload_blob, path, data, content_type)

    async def signed_read_url(self, path: str, ttl_seconds: int) -> str:
        return await asyncio.to_thread(self._signed_read_url, path, ttl_seconds)

    async def close(self) -> None:
        self.db.close()

    def _list_unexpired(self, now: datetime) -> List[Report]:
        try:
            with self.db.get_session() as session:
                rows = session.scalars(
                    select(ReportRow).where(ReportRow.expires_at > _naive_utc(now))
                ).all()
                reports = [_to_report(row) for row in rows]
        except SQLAlchemyError as e:
            raise TransientError(f"Could not load reports: {e}") from e

        logger.info(f"Fetched {len(reports)} unexpired reports")
        return reports

    def _insert(self, payload: Dict[str, Any]) -> Report:
        _check_fields(payload, CREATE_FIELDS)

        latitude = payload.get("latitude")
        longitude = payload.get("longitude")
        if not (is_coordinate_value(latitude) and is_coordinate_value(longitude)):
            raise ValidationError("latitude and longitude are required")
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise ValidationError("Coordinates out of range")

        owner = payload.get("user_id")
        if owner is not None and owner != self.caller():
            raise PermissionDeniedError("Reports can only be created for yourself")

        created_at = _naive_utc(self.clock())
        row = ReportRow(
            id=uuid.uuid4().hex,
            title=payload.get("title") or settings.default_report_title,
            litter_types=payload.get("litter_types"),
            types=payload.get("types"),
            notes_presets=payload.get("notes_presets"),
            notes_other=payload.get("notes_other"),
            severity=payload.get("severity"),
            latitude=float(latitude),
            longitude=float(longitude),
            user_id=owner,
            photo_paths=list(payload.get("photo_paths") or []),
            created_at=created_at,
            expires_at=created_at + self.report_ttl,
        )

        try:
            with self.db.get_session() as session:
                session.add(row)
                session.flush()
                report = _to_report(row)
        except IntegrityError as e:
            raise ValidationError(f"Report rejected: {e.orig}") from e
        except SQLAlchemyError as e:
            raise TransientError(f"Could not save report: {e}") from e

        logger.info(f"Inserted report {report.id}")
        return report

    def _owned_row(
        self,
        session,
        report_id: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> ReportRow:
        row = session.get(ReportRow, report_id)
        if row is None:
            raise NotFoundError(f"Report {report_id} not found")

        caller = self.caller()
        if caller is not None and row.user_id == caller:
            return row

        # Guest reports accept their photo paths once, right after creation
        if row.user_id is None and payload is not None:
            if set(payload) == {"photo_paths"} and not row.photo_paths:
                return row
        raise PermissionDeniedError()

    def _update(self, report_id: str, payload: Dict[str, Any]) -> Report:
        _check_fields(payload, MUTABLE_FIELDS)

        try:
            with self.db.get_session() as session:
                row = self._owned_row(session, report_id, payload)
                for key, value in payload.items():
                    if key == "title":
                        value = value or settings.default_report_title
                    elif key == "photo_paths":
                        value = list(value or [])
                    setattr(row, key, value)
                session.flush()
                report = _to_report(row)
        except IntegrityError as e:
            raise ValidationError(f"Report rejected: {e.orig}") from e
        except SQLAlchemyError as e:
            raise TransientError(f"Could not update report: {e}") from e

        logger.info(f"Updated report {report_id}")
        return report

    def _delete(self, report_id: str) -> None:
        try:
            with self.db.get_session() as session:
                row = self._owned_row(session, report_id)
                session.delete(row)
        except SQLAlchemyError as e:
            raise TransientError(f"Could not delete report: {e}") from e

        logger.info(f"Deleted report {report_id}")

    def _upload_blob(self, path: str, data: bytes, content_type: str) -> None:
        try:
            with self.db.get_session() as session:
                if session.get(StoredPhoto, path) is not None:
                    raise UploadError(f"{path} already exists")
                session.add(StoredPhoto(
                    path=path,
                    content_type=content_type,
                    data=data,
                    created_at=_naive_utc(self.clock()),
                ))
        except SQLAlchemyError as e:
            raise UploadError(f"Upload of {path} failed: {e}") from e

        logger.info(f"Uploaded {len(data)} bytes to {path}")

    def _signed_read_url(self, path: str, ttl_seconds: int) -> str:
        try:
            with self.db.get_session() as session:
                exists = session.get(StoredPhoto, path) is not None
        except SQLAlchemyError as e:
            raise TransientError(f"Could not look up {path}: {e}") from e

        if not exists:
            raise NotFoundError(f"No stored photo at {path}")

        expires = int(self.clock().timestamp()) + ttl_seconds
        signature = sign_path(self.signing_secret, path, expires)
        return f"{self.public_url}/{quote(path)}?expires={expires}&signature={signature}"

    def read_blob(self, path: str) -> StoredPhoto:
        """Fetch stored photo bytes (for the server answering signed links)."""
        with self.db.get_session() as session:
            photo = session.get(StoredPhoto, path)
            if photo is None:
                raise NotFoundError(f"No stored photo at {path}")
            session.expunge(photo)
            return photo
