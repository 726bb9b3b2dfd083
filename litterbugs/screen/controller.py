"""
Map interaction controller

Routes map gestures to the report lifecycle and marker store, and owns
the screen mode. Exactly one of browsing, drafting (or submitting) and
viewing a report's details is active at a time.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.config import settings
from litterbugs.core.constants import MESSAGES
from litterbugs.core.errors import (
    DevicePermissionError,
    LitterbugsError,
    user_message,
)
from litterbugs.core.geo import Coordinate, Region
from litterbugs.core.identity import IdentityEvent, IdentityEventType, IdentityProvider
from litterbugs.markers.store import Marker, MarkerStore
from litterbugs.photos.pipeline import PhotoPipeline, ResolutionTracker
from litterbugs.reports.lifecycle import (
    DraftState,
    ReportLifecycleManager,
    SubmitOutcome,
    SubmitStatus,
)
from litterbugs.reports.models import Draft, Report
from litterbugs.screen.collaborators import LocationProvider, Notifier, PhotoPicker
from litterbugs.screen.map_types import MapType, map_type_color, next_map_type

logger = logging.getLogger(__name__)


class ScreenMode(Enum):
    BROWSING = "browsing"
    DRAFTING = "drafting"
    SUBMITTING = "submitting"
    VIEWING = "viewing"


@dataclass
class DetailsView:
    """Details sheet for the selected report."""
    report: Report
    can_modify: bool = False
    photo_urls: List[str] = field(default_factory=list)
    photos_loading: bool = True


@dataclass
class MapSnapshot:
    """Everything the map renderer needs for one frame."""
    region: Region
    map_type: MapType
    markers: List[Marker]
    draft_coordinate: Optional[Coordinate] = None


class MapController:
    """
    Screen-level coordinator for the report map.

    Usage:
        controller = MapController(gateway, identity, location, notifier)
        await controller.mount()
        draft = controller.on_map_press(Coordinate(35.60, -82.55))
        draft.toggle_type("Bottles")
        await controller.confirm_save()
    """

    def __init__(
        self,
        gateway: BackendGateway,
        identity: IdentityProvider,
        location: LocationProvider,
        notifier: Notifier,
        picker: Optional[PhotoPicker] = None,
        photos: Optional[PhotoPipeline] = None,
        store: Optional[MarkerStore] = None,
        platform: Optional[str] = None
    ):
        """
        Initialize the controller.

        Args:
            gateway: Report and photo store
            identity: Current-user source and identity event stream
            location: Device location service
            notifier: Shows alerts to the user
            picker: Device photo library
            photos: Photo pipeline (built from the gateway if omitted)
            store: Marker store (a fresh one if omitted)
            platform: "ios" or "android"; terrain maps are Android only
        """
        self.gateway = gateway
        self.identity = identity
        self.location = location
        self.notifier = notifier
        self.picker = picker
        self.photos = photos or PhotoPipeline(gateway)
        self.store = store or MarkerStore()
        self.platform = platform or settings.platform
        self.lifecycle = ReportLifecycleManager(gateway, self.photos, self.store, identity)

        self.region = Region.fallback()
        self.map_type = MapType.STANDARD
        self.current_user_id: Optional[str] = None

        self._details: Optional[DetailsView] = None
        self._resolutions = ResolutionTracker()
        self._unsubscribe = identity.subscribe(self._on_identity_event)

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    @property
    def mode(self) -> ScreenMode:
        state = self.lifecycle.state
        if state == DraftState.SUBMITTING:
            return ScreenMode.SUBMITTING
        if state != DraftState.NO_DRAFT:
            return ScreenMode.DRAFTING
        if self._details is not None:
            return ScreenMode.VIEWING
        return ScreenMode.BROWSING

    @property
    def details(self) -> Optional[DetailsView]:
        return self._details

    @property
    def draft(self) -> Optional[Draft]:
        return self.lifecycle.draft

    # ------------------------------------------------------------------
    # Mount
    # ------------------------------------------------------------------

    async def mount(self) -> None:
        """Read the identity, locate the user and load unexpired reports."""
        self.current_user_id = await self.identity.current_user_id()
        await asyncio.gather(self._locate_on_mount(), self._load_markers())

    async def _locate_on_mount(self) -> None:
        try:
            coordinate = await self.location.current_coordinate()
        except LitterbugsError as e:
            logger.info(f"Location unavailable on mount, using fallback region: {e}")
            return
        self.region = Region.around(coordinate)

    async def _load_markers(self) -> None:
        try:
            count = await self.store.load(self.gateway)
        except LitterbugsError as e:
            logger.error(f"Loading reports failed: {e}")
            return
        logger.info(f"Map mounted with {count} markers")

    # ------------------------------------------------------------------
    # Map gestures
    # ------------------------------------------------------------------

    def on_region_change(self, region: Region) -> None:
        self.region = region

    def on_map_press(self, coordinate: Coordinate) -> Optional[Draft]:
        """Open a new draft, unless details or another draft is showing."""
        if self.mode != ScreenMode.BROWSING:
            logger.debug(f"Map press ignored while {self.mode.value}")
            return None
        return self.lifecycle.open_new_draft(coordinate)

    async def on_marker_press(self, report_id: str) -> Optional[DetailsView]:
        """
        Show a report's details and resolve its photos.

        Photo URLs are only applied if the same report is still selected
        when they arrive.
        """
        if self.lifecycle.state != DraftState.NO_DRAFT:
            return None

        marker = self.store.get(report_id)
        if marker is None:
            logger.warning(f"Marker {report_id} not found")
            return None

        report = marker.report
        details = DetailsView(report=report, can_modify=self._owns(report))
        self._details = details
        token = self._resolutions.begin(report.id)

        urls = await self.photos.resolve_urls(report.photo_paths)

        if not self._resolutions.is_current(token) or self._details is not details:
            logger.debug(f"Discarding stale photo resolution for report {report.id}")
            return details

        details.photo_urls = urls
        details.photos_loading = False
        return details

    def close_details(self) -> None:
        self._details = None
        self._resolutions.invalidate()

    def _owns(self, report: Report) -> bool:
        return report.is_owned_by(self.current_user_id)

    # ------------------------------------------------------------------
    # Draft composition
    # ------------------------------------------------------------------

    def cancel_draft(self) -> bool:
        return self.lifecycle.cancel()

    async def pick_photo(self) -> bool:
        """
        Attach a photo from the device library to the open draft.

        Returns:
            True if a photo was added
        """
        draft = self.lifecycle.draft
        if draft is None or self.lifecycle.is_submitting or self.picker is None:
            return False

        try:
            uri = await self.picker.pick()
        except DevicePermissionError:
            self.notifier.show(MESSAGES["photo_permission"])
            return False
        except (LitterbugsError, OSError) as e:
            logger.warning(f"Photo picker failed: {e}")
            self.notifier.show(MESSAGES["picker_error"])
            return False

        if not uri:
            return False
        draft.add_photo(uri)
        return True

    def remove_photo(self, index: int) -> None:
        draft = self.lifecycle.draft
        if draft is not None:
            draft.remove_photo(index)

    async def confirm_save(self) -> SubmitOutcome:
        """Save the open draft after the user confirmed."""
        try:
            outcome = await self.lifecycle.submit()
        except Exception:
            logger.exception("Unexpected save error")
            self.notifier.show(MESSAGES["save_error"])
            return SubmitOutcome(SubmitStatus.FAILED)

        if outcome.status == SubmitStatus.SAVED:
            self.notifier.show(MESSAGES["report_saved"])
        elif outcome.status == SubmitStatus.FAILED:
            self.notifier.show(user_message(outcome.error, "Save failed"))
        return outcome

    # ------------------------------------------------------------------
    # Details actions (owner only)
    # ------------------------------------------------------------------

    def begin_edit(self) -> Optional[Draft]:
        """Switch from the details sheet to an edit draft of that report."""
        details = self._details
        if details is None or not details.can_modify:
            return None

        self.close_details()
        return self.lifecycle.open_edit_draft(details.report)

    async def confirm_delete(self) -> bool:
        """Delete the report shown in the details sheet."""
        details = self._details
        if details is None or not details.can_modify:
            return False

        try:
            result = await self.lifecycle.delete(details.report)
        except Exception:
            logger.exception("Unexpected delete error")
            self.notifier.show(MESSAGES["delete_error"])
            return False

        if not result.ok:
            self.notifier.show(user_message(result.error, "Delete failed"))
            return False

        if self._details is details:
            self.close_details()
        return True

    # ------------------------------------------------------------------
    # Map chrome
    # ------------------------------------------------------------------

    def cycle_map_type(self) -> MapType:
        self.map_type = next_map_type(self.map_type, self.platform)
        return self.map_type

    @property
    def map_type_color(self) -> str:
        return map_type_color(self.map_type)

    async def recenter(self) -> bool:
        """Center the map on a fresh device location."""
        try:
            coordinate = await self.location.current_coordinate()
        except DevicePermissionError:
            self.notifier.show(MESSAGES["location_permission"])
            return False
        except LitterbugsError as e:
            logger.info(f"Center error: {e}")
            self.notifier.show(MESSAGES["location_error"])
            return False

        self.region = Region.around(coordinate)
        return True

    def snapshot(self) -> MapSnapshot:
        draft = self.lifecycle.draft
        draft_coordinate = None
        if draft is not None and not draft.is_editing:
            draft_coordinate = draft.coordinate
        return MapSnapshot(
            region=self.region,
            map_type=self.map_type,
            markers=self.store.markers,
            draft_coordinate=draft_coordinate,
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def _on_identity_event(self, event: IdentityEvent) -> None:
        if event.type == IdentityEventType.SIGNED_OUT:
            self.teardown()
            return

        self.current_user_id = event.user_id
        if event.type == IdentityEventType.GUEST:
            self.notifier.show(MESSAGES["guest_mode"])
        if self._details is not None:
            self._details.can_modify = self._owns(self._details.report)

    def teardown(self) -> None:
        """Drop all screen state (the user signed out)."""
        self.lifecycle.reset()
        self.close_details()
        self.store.clear()
        self.current_user_id = None
        self._unsubscribe()
        logger.info("Map screen torn down")
