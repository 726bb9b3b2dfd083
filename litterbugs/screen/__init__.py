"""
Litterbugs - Screen Module
Map interaction controller and its device/UI collaborators.
"""

from litterbugs.screen.collaborators import (
    LocationProvider,
    Notifier,
    PhotoPicker,
)
from litterbugs.screen.controller import (
    DetailsView,
    MapController,
    MapSnapshot,
    ScreenMode,
)
from litterbugs.screen.map_types import MapType, map_type_color, next_map_type

__all__ = [
    "LocationProvider",
    "Notifier",
    "PhotoPicker",
    "DetailsView",
    "MapController",
    "MapSnapshot",
    "ScreenMode",
    "MapType",
    "map_type_color",
    "next_map_type",
]
