"""
Map type cycling for the layer toggle button.
"""

from enum import Enum

from litterbugs.core.constants import DEFAULT_MAP_TYPE_COLOR, MAP_TYPE_COLORS


class MapType(str, Enum):
    STANDARD = "standard"
    SATELLITE = "satellite"
    HYBRID = "hybrid"
    TERRAIN = "terrain"  # Android only


def next_map_type(current: MapType, platform: str = "ios") -> MapType:
    """
    Next map type in the cycle.

    standard -> satellite -> hybrid -> terrain (Android only) -> standard
    """
    if current == MapType.STANDARD:
        return MapType.SATELLITE
    if current == MapType.SATELLITE:
        return MapType.HYBRID
    if current == MapType.HYBRID:
        return MapType.TERRAIN if platform == "android" else MapType.STANDARD
    return MapType.STANDARD


def map_type_color(map_type: MapType) -> str:
    """Colour of the layer toggle icon for the active map type."""
    return MAP_TYPE_COLORS.get(map_type.value, DEFAULT_MAP_TYPE_COLOR)
