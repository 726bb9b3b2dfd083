"""
Supabase gateway for Litterbugs

Talks to a hosted Supabase project over its REST surfaces:
- PostgREST (``/rest/v1``) for report rows
- Storage (``/storage/v1``) for report photos and signed URLs

Row-level security on the project decides who may update or delete a
report; this client only maps the outcome into the error taxonomy.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.config import settings
from litterbugs.core.errors import (
    LitterbugsError,
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    UploadError,
    ValidationError,
)
from litterbugs.reports.models import Report

logger = logging.getLogger(__name__)


def _utc_iso(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat()


def _error_message(response: httpx.Response) -> str:
    """Pull the server's explanation out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


def error_for_response(response: httpx.Response) -> LitterbugsError:
    """Map an HTTP error status to the report-core error taxonomy."""
    status = response.status_code
    message = _error_message(response)

    if status in (400, 409, 422):
        return ValidationError(message)
    if status in (401, 403):
        return PermissionDeniedError(message)
    if status == 404:
        return NotFoundError(message)
    return TransientError(message)


class SupabaseGateway(BackendGateway):
    """
    Backend gateway for a Supabase project.

    Usage:
        async with SupabaseGateway(url, anon_key) as gateway:
            reports = await gateway.list_unexpired(datetime.now(timezone.utc))
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        access_token: Optional[Callable[[], Optional[str]]] = None,
        table: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Supabase gateway.

        Args:
            url: Project URL (https://<ref>.supabase.co)
            anon_key: Public anon API key
            access_token: Returns the signed-in user's JWT, or None for anon access
            table: Reports table name
            bucket: Storage bucket holding report photos
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not url or not anon_key:
            raise ValueError("Supabase URL and anon key are required")

        self.base_url = url.rstrip("/")
        self.anon_key = anon_key
        self.table = table or settings.reports_table
        self.bucket = bucket or settings.photo_bucket
        self.timeout = timeout or settings.http_timeout_seconds
        self._access_token = access_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        access_token: Optional[Callable[[], Optional[str]]] = None
    ) -> "SupabaseGateway":
        """Build a gateway from the configured project URL and key."""
        return cls(
            url=settings.supabase_url or "",
            anon_key=settings.supabase_anon_key or "",
            access_token=access_token,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        token = self._access_token() if self._access_token else None
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, headers=self._headers(headers), **kwargs
            )
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransientError(f"Could not reach the server: {e}") from e

        if response.is_error:
            error = error_for_response(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {error.message}")
            raise error

        return response

    @property
    def _rows_path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def list_unexpired(self, now: datetime) -> List[Report]:
        response = await self._request(
            "GET",
            self._rows_path,
            params={"select": "*", "expires_at": f"gt.{_utc_iso(now)}"},
        )
        rows = response.json()
        logger.info(f"Fetched {len(rows)} unexpired reports")
        return [Report.from_dict(row) for row in rows]

    async def insert(self, payload: Dict[str, Any]) -> Report:
        response = await self._request(
            "POST",
            self._rows_path,
            headers={"Prefer": "return=representation"},
            json=payload,
        )
        rows = response.json()
        if not rows:
            raise ValidationError("The report was not accepted by the server")
        report = Report.from_dict(rows[0])
        logger.info(f"Inserted report {report.id}")
        return report

    async def update(self, report_id: str, payload: Dict[str, Any]) -> Report:
        response = await self._request(
            "PATCH",
            self._rows_path,
            headers={"Prefer": "return=representation"},
            params={"id": f"eq.{report_id}"},
            json=payload,
        )
        rows = response.json()
        if not rows:
            raise await self._missing_or_forbidden(report_id)
        logger.info(f"Updated report {report_id}")
        return Report.from_dict(rows[0])

    async def delete(self, report_id: str) -> None:
        response = await self._request(
            "DELETE",
            self._rows_path,
            headers={"Prefer": "return=representation"},
            params={"id": f"eq.{report_id}"},
        )
        if not response.json():
            raise await self._missing_or_forbidden(report_id)
        logger.info(f"Deleted report {report_id}")

    async def _missing_or_forbidden(self, report_id: str) -> LitterbugsError:
        """
        Explain an empty write result.

        Row-level security filters rows the caller may not touch, so a write
        that matched nothing is either an unknown id or someone else's row.
        """
        response = await self._request(
            "GET",
            self._rows_path,
            params={"select": "id", "id": f"eq.{report_id}"},
        )
        if response.json():
            return PermissionDeniedError()
        return NotFoundError(f"Report {report_id} not found")

    async def upload_blob(self, path: str, data: bytes, content_type: str) -> None:
        try:
            await self._request(
                "POST",
                f"/storage/v1/object/{self.bucket}/{path}",
                headers={"Content-Type": content_type, "x-upsert": "false"},
                content=data,
            )
        except LitterbugsError as e:
            raise UploadError(f"Upload of {path} failed: {e.message}") from e
        logger.info(f"Uploaded {len(data)} bytes to {path}")

    async def signed_read_url(self, path: str, ttl_seconds: int) -> str:
        try:
            response = await self._request(
                "POST",
                f"/storage/v1/object/sign/{self.bucket}/{path}",
                json={"expiresIn": ttl_seconds},
            )
        except (ValidationError, NotFoundError) as e:
            raise NotFoundError(f"No stored photo at {path}") from e

        body = response.json()
        signed = body.get("signedURL") or body.get("signedUrl")
        if not signed:
            raise NotFoundError(f"No signed URL returned for {path}")
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/storage/v1{signed}"
