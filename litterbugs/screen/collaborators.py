"""
Device and UI collaborators used by the map screen.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from litterbugs.core.geo import Coordinate


class LocationProvider(ABC):
    """Device location service."""

    @abstractmethod
    async def current_coordinate(self) -> Coordinate:
        """
        Current device position.

        Raises:
            DevicePermissionError: location access refused
            LocationUnavailableError: no fix available
        """


class PhotoPicker(ABC):
    """Device photo library."""

    @abstractmethod
    async def pick(self) -> Optional[str]:
        """
        Let the user choose one photo.

        Returns:
            Device-local URI, or None when the user backs out

        Raises:
            DevicePermissionError: library access refused
        """


class Notifier(ABC):
    """Shows blocking messages to the user."""

    @abstractmethod
    def alert(self, title: str, message: str) -> None:
        """Display an alert."""

    def show(self, message: Tuple[str, str]) -> None:
        self.alert(*message)
