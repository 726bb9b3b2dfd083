"""
Report lifecycle manager

Owns the create/edit/delete state machine for a single report:

    NO_DRAFT -> DRAFT_NEW | DRAFT_EDITING -> SUBMITTING -> NO_DRAFT (saved)
                                                       -> DRAFT_* (failed)

A submission is a chain of fallible steps (write row, upload photos,
attach photo paths). The chain stops at the first step that fails, and the
draft is kept intact so the user can retry.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from litterbugs.backend.gateway import BackendGateway
from litterbugs.core.errors import DraftLockedError, LitterbugsError, TransientError
from litterbugs.core.geo import Coordinate
from litterbugs.core.identity import IdentityProvider
from litterbugs.markers.store import MarkerStore
from litterbugs.photos.pipeline import PhotoPipeline
from litterbugs.reports.models import Draft, Report

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DraftState(Enum):
    """Where the single report being composed stands."""
    NO_DRAFT = "no_draft"
    DRAFT_NEW = "draft_new"
    DRAFT_EDITING = "draft_editing"
    SUBMITTING = "submitting"


class SubmitStatus(Enum):
    SAVED = "saved"
    FAILED = "failed"
    IGNORED = "ignored"


@dataclass
class StepResult(Generic[T]):
    """Value of a step that succeeded, or the error that stopped it."""
    value: Optional[T] = None
    error: Optional[LitterbugsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "StepResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: LitterbugsError) -> "StepResult":
        return cls(error=error)


@dataclass
class SubmitOutcome:
    """Result of a save confirmation."""
    status: SubmitStatus
    report: Optional[Report] = None
    error: Optional[LitterbugsError] = None
    photos_selected: int = 0
    photos_attached: int = 0

    @property
    def saved(self) -> bool:
        return self.status == SubmitStatus.SAVED


class ReportLifecycleManager:
    """
    Create, edit and delete reports.

    Successful writes are published to the marker store; nothing else in
    the core writes to it.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        photos: PhotoPipeline,
        store: MarkerStore,
        identity: IdentityProvider,
        default_title: Optional[str] = None
    ):
        """
        Initialize lifecycle manager.

        Args:
            gateway: Report and photo store
            photos: Pipeline used for photo uploads on create
            store: Marker store receiving saved reports
            identity: Source of the current user id
            default_title: Title used when the draft title is blank
        """
        self.gateway = gateway
        self.photos = photos
        self.store = store
        self.identity = identity
        self.default_title = default_title

        self._state = DraftState.NO_DRAFT
        self._draft: Optional[Draft] = None
        self._generation = 0

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def draft(self) -> Optional[Draft]:
        return self._draft

    @property
    def is_submitting(self) -> bool:
        return self._state == DraftState.SUBMITTING

    def open_new_draft(self, coordinate: Coordinate) -> Optional[Draft]:
        """Start an empty draft at a pressed coordinate."""
        if self._state != DraftState.NO_DRAFT:
            logger.debug(f"New draft refused in state {self._state.value}")
            return None

        self._draft = Draft.for_new_report(coordinate)
        self._state = DraftState.DRAFT_NEW
        logger.info(f"Draft opened at ({coordinate.latitude}, {coordinate.longitude})")
        return self._draft

    def open_edit_draft(self, report: Report) -> Optional[Draft]:
        """Start a draft pre-filled from a report the user is viewing."""
        if self._state != DraftState.NO_DRAFT:
            logger.debug(f"Edit draft refused in state {self._state.value}")
            return None

        self._draft = Draft.from_report(report)
        self._state = DraftState.DRAFT_EDITING
        logger.info(f"Editing report {report.id}")
        return self._draft

    def cancel(self) -> bool:
        """
        Discard the draft.

        Returns:
            False while a submission is in flight, True otherwise
        """
        if self._state == DraftState.SUBMITTING:
            return False
        self._draft = None
        self._state = DraftState.NO_DRAFT
        return True

    def reset(self) -> None:
        """
        Drop the draft unconditionally (the session ended).

        A submission still in flight finishes its writes but no longer
        publishes to the marker store or touches the draft state.
        """
        if self._state == DraftState.SUBMITTING:
            logger.info("Reset while a submission is in flight")
        self._generation += 1
        self._draft = None
        self._state = DraftState.NO_DRAFT

    async def submit(self) -> SubmitOutcome:
        """
        Save the open draft.

        A second call while one is in flight does nothing. On failure the
        draft stays open and unchanged.
        """
        if self._state == DraftState.SUBMITTING:
            logger.info("Submission already in flight, ignoring")
            return SubmitOutcome(SubmitStatus.IGNORED)

        draft = self._draft
        if draft is None or (not draft.is_editing and draft.coordinate is None):
            return SubmitOutcome(SubmitStatus.IGNORED)

        previous_state = self._state
        generation = self._generation
        self._state = DraftState.SUBMITTING
        draft.locked = True
        try:
            owner = await self.identity.current_user_id()

            written = await self._write(draft, owner)
            if not written.ok:
                logger.warning(f"Save failed: {written.error}")
                return SubmitOutcome(
                    SubmitStatus.FAILED,
                    error=written.error,
                    photos_selected=len(draft.photos),
                )
            report = written.value

            attached = 0
            if not draft.is_editing and draft.photos:
                with_photos = await self._attach_photos(report, draft.photos, owner)
                if with_photos.ok:
                    report = with_photos.value
                    attached = len(report.photo_paths)
                else:
                    logger.error(
                        f"Photos for report {report.id} could not be attached: {with_photos.error}"
                    )

            if generation != self._generation:
                logger.info(f"Report {report.id} saved after reset, not published")
            else:
                self._publish(report, editing=draft.is_editing)
                self._draft = None
                self._state = DraftState.NO_DRAFT
                logger.info(f"Report {report.id} saved")
            return SubmitOutcome(
                SubmitStatus.SAVED,
                report=report,
                photos_selected=len(draft.photos),
                photos_attached=attached,
            )
        finally:
            draft.locked = False
            if generation == self._generation and self._state == DraftState.SUBMITTING:
                self._state = previous_state

    async def _write(self, draft: Draft, owner: Optional[str]) -> StepResult[Report]:
        try:
            if draft.is_editing:
                report = await self.gateway.update(
                    draft.editing_id, draft.update_payload(self.default_title)
                )
            else:
                report = await self.gateway.insert(
                    draft.create_payload(owner, self.default_title)
                )
        except LitterbugsError as e:
            return StepResult.failure(e)
        return StepResult.success(report)

    async def _attach_photos(
        self,
        report: Report,
        photo_uris: list,
        owner: Optional[str]
    ) -> StepResult[Report]:
        # The row already exists here, so no failure may escape the save
        try:
            paths = await self.photos.upload_all(photo_uris, report.id, owner)
            if not paths:
                return StepResult.success(report)
            updated = await self.gateway.update(report.id, {"photo_paths": paths})
        except LitterbugsError as e:
            return StepResult.failure(e)
        except Exception as e:
            logger.exception(f"Unexpected error attaching photos to report {report.id}")
            return StepResult.failure(TransientError(f"Photos could not be attached: {e}"))
        return StepResult.success(updated)

    def _publish(self, report: Report, editing: bool) -> None:
        if editing:
            self.store.update(report)
        else:
            self.store.insert(report)

    async def delete(self, report: Report) -> StepResult[str]:
        """
        Delete a report and drop its marker.

        The gateway decides whether the caller owns the report; on any
        failure the marker stays in place.
        """
        if self._state == DraftState.SUBMITTING:
            return StepResult.failure(DraftLockedError())

        try:
            await self.gateway.delete(report.id)
        except LitterbugsError as e:
            logger.warning(f"Delete of report {report.id} failed: {e}")
            return StepResult.failure(e)

        self.store.remove(report.id)
        logger.info(f"Report {report.id} deleted")
        return StepResult.success(report.id)
