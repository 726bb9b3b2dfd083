"""
Litterbugs - Core Utilities
Central configuration, catalogs, errors and geographic types.
"""

from litterbugs.core.config import settings, get_settings
from litterbugs.core.constants import (
    LITTER_OPTIONS,
    NOTES_OPTIONS,
    FALLBACK_REGION,
    SEVERITY_STYLES,
)
from litterbugs.core.errors import (
    LitterbugsError,
    ValidationError,
    PermissionDeniedError,
    NotFoundError,
    TransientError,
    UploadError,
    DevicePermissionError,
    LocationUnavailableError,
    DraftLockedError,
    user_message,
)
from litterbugs.core.geo import Coordinate, Region

__all__ = [
    "settings",
    "get_settings",
    "LITTER_OPTIONS",
    "NOTES_OPTIONS",
    "FALLBACK_REGION",
    "SEVERITY_STYLES",
    "LitterbugsError",
    "ValidationError",
    "PermissionDeniedError",
    "NotFoundError",
    "TransientError",
    "UploadError",
    "DevicePermissionError",
    "LocationUnavailableError",
    "DraftLockedError",
    "user_message",
    "Coordinate",
    "Region",
]
