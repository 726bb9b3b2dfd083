"""
Litterbugs - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# REPORT CATALOGS
# =============================================================================

# Litter type chips (label, icon)
LITTER_OPTIONS: List[Tuple[str, str]] = [
    ("Takeout cups", "cafe-outline"),
    ("Bottles", "water-outline"),
    ("Cans", "beer-outline"),
    ("Paper products", "document-text-outline"),
    ("Food wrappers", "fast-food-outline"),
    ("Fast food bags", "bag-handle-outline"),
    ("Plastic bags", "bag-handle-outline"),
    ("Trash bags", "trash-outline"),
    ("PPE", "medkit-outline"),
    ("Construction debris", "construct-outline"),
    ("Furniture", "bed-outline"),
    ("Strewn plastic", "layers-outline"),
    ("Textiles", "shirt-outline"),
    ("Pet waste", "paw-outline"),
    ("Tires", "disc-outline"),
    ("Vehicular debris", "car-outline"),
]

# Preset note chips (label, icon)
NOTES_OPTIONS: List[Tuple[str, str]] = [
    ("Scattered", "layers-outline"),
    ("In a pile", "construct-outline"),
    ("Bagged but left", "bag-handle-outline"),
    ("Near roadside", "car-outline"),
    ("In Public Park", "paw-outline"),
    ("In ditch", "water-outline"),
    ("Along trail", "walk-outline"),
    ("Near waterway", "water-outline"),
    ("Blocking path", "close-circle-outline"),
    ("Broken glass", "alert-circle-outline"),
    ("Hard to access", "warning-outline"),
    ("Use Caution", "warning-outline"),
]

LITTER_LABELS: Tuple[str, ...] = tuple(label for label, _ in LITTER_OPTIONS)
NOTES_LABELS: Tuple[str, ...] = tuple(label for label, _ in NOTES_OPTIONS)

# =============================================================================
# MAP
# =============================================================================

# Boone, NC area (latitude, longitude, latitude_delta, longitude_delta)
FALLBACK_REGION: Tuple[float, float, float, float] = (35.6009, -82.5540, 0.08, 0.08)

# Zoom applied once the device location is known
USER_REGION_DELTA: float = 0.02

# Marker styles by severity (background colour, icon)
SEVERITY_STYLES: Dict[str, Tuple[str, str]] = {
    "low": ("#43A047", "trash-outline"),
    "medium": ("#FF8A00", "trash-outline"),
    "high": ("#E53935", "warning-outline"),
}

DRAFT_PIN_COLOR: str = "#FFC42E"

# Map type toggle button colour
MAP_TYPE_COLORS: Dict[str, str] = {
    "standard": "#B39DDB",
    "satellite": "#A5D6A7",
    "hybrid": "#FBC02D",
    "terrain": "#66BB6A",
}

DEFAULT_MAP_TYPE_COLOR: str = "#2F7D32"

# =============================================================================
# USER-FACING MESSAGES (title, body)
# =============================================================================

MESSAGES: Dict[str, Tuple[str, str]] = {
    "report_saved": (
        "Report saved",
        "Thanks for helping keep the community clean!",
    ),
    "save_error": (
        "Error",
        "Something went wrong saving your report.",
    ),
    "delete_error": (
        "Error",
        "Something went wrong deleting your report.",
    ),
    "location_error": (
        "Location Error",
        "Unable to find your location.",
    ),
    "photo_permission": (
        "Permission required",
        "Please allow photo access in Settings to attach pictures.",
    ),
    "location_permission": (
        "Permission required",
        "Please allow location access in Settings to center the map.",
    ),
    "picker_error": (
        "Error",
        "Unable to open the photo library right now.",
    ),
    "guest_mode": (
        "Guest Mode",
        "As a guest, you may create and view litter reports anonymously.\n\n"
        "To edit or delete your reports, you must sign in. Anonymous users "
        "cannot edit or delete their reports once created.",
    ),
}
