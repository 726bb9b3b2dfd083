"""
Photo pipeline for report attachments

Moves device-local images into object storage under collision-resistant,
owner-scoped paths, and resolves stored paths back into short-lived
display URLs.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.config import settings
from litterbugs.core.errors import LitterbugsError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"
DEFAULT_CONTENT_TYPE = "image/jpeg"

CONTENT_TYPES: Dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "heic": "image/heic",
    "heif": "image/heif",
}


def photo_extension(uri: str) -> str:
    """Lower-cased file extension of a local photo reference."""
    name = urlparse(uri).path.rsplit("/", 1)[-1] or uri
    if "." not in name:
        return DEFAULT_EXTENSION
    return name.rsplit(".", 1)[-1].lower() or DEFAULT_EXTENSION


def content_type_for(extension: str) -> str:
    """MIME type for an extension; unknown extensions are sent as JPEG."""
    return CONTENT_TYPES.get(extension.lower(), DEFAULT_CONTENT_TYPE)


def build_photo_path(
    owner: Optional[str],
    report_id: str,
    epoch_millis: int,
    index: int,
    extension: str,
    guest_segment: Optional[str] = None
) -> str:
    """
    Storage path for one uploaded photo.

    Format: ``{owner or guest}/{report_id}/{epoch_millis}-{index}.{extension}``
    """
    owner_segment = owner or guest_segment or settings.guest_owner_segment
    return f"{owner_segment}/{report_id}/{epoch_millis}-{index}.{extension}"


def read_local_photo(uri: str) -> bytes:
    """Read a device-local photo given a path or ``file://`` URI."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path)).read_bytes()
    return Path(uri).read_bytes()


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class PhotoPipeline:
    """
    Uploads report photos and resolves them for display.

    Uploads are sequential and partial-failure tolerant: a photo that cannot
    be read or stored is logged and skipped. Display URLs are requested
    fresh every time; nothing is cached.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        reader: Callable[[str], bytes] = read_local_photo,
        clock_millis: Callable[[], int] = _epoch_millis,
        ttl_seconds: Optional[int] = None,
        guest_segment: Optional[str] = None
    ):
        """
        Initialize photo pipeline.

        Args:
            gateway: Backend holding the photo bucket
            reader: Loads bytes for a device-local photo reference
            clock_millis: Current time in epoch milliseconds
            ttl_seconds: Validity of signed display URLs
            guest_segment: Owner path segment for guest uploads
        """
        self.gateway = gateway
        self.reader = reader
        self.clock_millis = clock_millis
        self.ttl_seconds = ttl_seconds or settings.signed_url_ttl_seconds
        self.guest_segment = guest_segment or settings.guest_owner_segment

    async def upload_all(
        self,
        photo_uris: Sequence[str],
        report_id: str,
        owner: Optional[str]
    ) -> List[str]:
        """
        Upload photos for a report in selection order.

        Args:
            photo_uris: Device-local photo references
            report_id: Id of the report the photos belong to
            owner: Creator identity, None for guests

        Returns:
            Storage paths of the photos that were stored
        """
        batch_millis = self.clock_millis()
        uploaded: List[str] = []

        for index, uri in enumerate(photo_uris):
            extension = photo_extension(uri)
            path = build_photo_path(
                owner, report_id, batch_millis, index, extension, self.guest_segment
            )
            try:
                data = await asyncio.to_thread(self.reader, uri)
                await self.gateway.upload_blob(path, data, content_type_for(extension))
            except (OSError, LitterbugsError) as e:
                logger.warning(f"Photo {index} for report {report_id} skipped: {e}")
                continue
            except Exception as e:
                logger.warning(
                    f"Photo {index} for report {report_id} skipped: {e!r}", exc_info=True
                )
                continue
            uploaded.append(path)

        logger.info(f"Uploaded {len(uploaded)}/{len(photo_uris)} photos for report {report_id}")
        return uploaded

    async def resolve_urls(self, paths: Sequence[str]) -> List[str]:
        """
        Signed display URLs for stored photos, in path order.

        Paths that cannot be resolved are left out; if none resolve the
        result is empty.
        """
        if not paths:
            return []

        results = await asyncio.gather(
            *(self.gateway.signed_read_url(path, self.ttl_seconds) for path in paths),
            return_exceptions=True,
        )

        urls = []
        for path, result in zip(paths, results):
            if isinstance(result, LitterbugsError):
                logger.warning(f"Signed URL for {path} failed: {result}")
                continue
            if isinstance(result, Exception):
                logger.warning(f"Signed URL for {path} failed: {result!r}", exc_info=result)
                continue
            if isinstance(result, BaseException):
                raise result
            urls.append(result)
        return urls


class ResolutionTracker:
    """
    Keys in-flight photo resolutions to the report being viewed.

    Every selection starts a new token; a result may only be applied while
    its token is still current.
    """

    def __init__(self):
        self._counter = 0
        self._current: Optional[tuple] = None

    def begin(self, report_id: str) -> tuple:
        self._counter += 1
        self._current = (report_id, self._counter)
        return self._current

    def is_current(self, token: tuple) -> bool:
        return token == self._current

    def invalidate(self) -> None:
        self._current = None
