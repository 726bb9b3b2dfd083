"""
Geographic value types shared by the map, drafts and markers.
"""

from dataclasses import dataclass

from litterbugs.core.constants import FALLBACK_REGION, USER_REGION_DELTA


@dataclass(frozen=True)
class Coordinate:
    """A point in decimal degrees."""
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class Region:
    """Visible map area: a center plus latitude/longitude span."""
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def fallback(cls) -> "Region":
        """Default region shown before the device location is known."""
        return cls(*FALLBACK_REGION)

    @classmethod
    def around(cls, coordinate: Coordinate, delta: float = USER_REGION_DELTA) -> "Region":
        """Region centered on a coordinate with a square span."""
        return cls(coordinate.latitude, coordinate.longitude, delta, delta)


def is_coordinate_value(value) -> bool:
    """True for numeric latitude/longitude values (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)
