"""
Backend gateway contract.

A minimal abstraction over a remote data and object store: report row
CRUD with an expiry filter, blob upload without overwrite, and signed read
URLs. Implementations translate their transport failures into the
``litterbugs.core.errors`` taxonomy.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List

from litterbugs.reports.models import Report


class BackendGateway(ABC):
    """
    Abstract report and photo store.

    Ownership is enforced here (server-side), never only by the client.
    """

    @abstractmethod
    async def list_unexpired(self, now: datetime) -> List[Report]:
        """
        Reports whose ``expires_at`` is after ``now``.

        Raises:
            TransientError: network or server failure
        """

    @abstractmethod
    async def insert(self, payload: Dict[str, Any]) -> Report:
        """
        Create a report; the store assigns id and timestamps.

        Raises:
            ValidationError: the store rejected the payload
        """

    @abstractmethod
    async def update(self, report_id: str, payload: Dict[str, Any]) -> Report:
        """
        Replace mutable fields of a report.

        Raises:
            NotFoundError: unknown id
            PermissionDeniedError: caller does not own the report
        """

    @abstractmethod
    async def delete(self, report_id: str) -> None:
        """
        Remove a report.

        Raises:
            NotFoundError: unknown id
            PermissionDeniedError: caller does not own the report
        """

    @abstractmethod
    async def upload_blob(self, path: str, data: bytes, content_type: str) -> None:
        """
        Store bytes at a new path. Existing paths are never overwritten.

        Raises:
            UploadError: write failed or the path already exists
        """

    @abstractmethod
    async def signed_read_url(self, path: str, ttl_seconds: int) -> str:
        """
        Time-limited read URL for a stored blob.

        Raises:
            NotFoundError: no blob at ``path``
        """

    async def close(self) -> None:
        """Release transport resources."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
