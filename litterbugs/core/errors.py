"""
Litterbugs - Error Taxonomy
Failures raised by gateways, the photo pipeline and device collaborators.
"""

from typing import Optional, Tuple


class LitterbugsError(Exception):
    """Base class for all report-core failures."""

    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LitterbugsError):
    """The store rejected a malformed payload (user-correctable)."""

    default_message = "The report could not be saved as entered."


class PermissionDeniedError(LitterbugsError):
    """The caller does not own the report it tried to change."""

    default_message = "Only the person who created this report can change it."


class NotFoundError(LitterbugsError):
    """The report or stored object no longer exists."""

    default_message = "This report no longer exists."


class TransientError(LitterbugsError):
    """Network or server failure; repeating the action may succeed."""

    default_message = "Could not reach the server. Please try again."


class UploadError(TransientError):
    """A photo could not be written to object storage."""

    default_message = "A photo could not be uploaded."


class DevicePermissionError(LitterbugsError):
    """Location or photo library access was refused on the device."""

    default_message = "Please allow access in Settings to continue."


class LocationUnavailableError(LitterbugsError):
    """The device could not produce a location fix."""

    default_message = "Unable to find your location."


class DraftLockedError(LitterbugsError):
    """The draft cannot change while it is being submitted."""

    default_message = "Please wait until the report finishes saving."


def user_message(error: LitterbugsError, title: str) -> Tuple[str, str]:
    """
    Build the alert shown for a failed user action.

    Args:
        error: Failure raised by a gateway, pipeline or device collaborator
        title: Alert title naming the action (e.g. "Save failed")

    Returns:
        (title, message) tuple
    """
    if isinstance(error, DevicePermissionError):
        return "Permission required", error.message
    return title, error.message
