"""Device-location provider.

The server has no GPS; the "current location" is whatever the provider
reports, which defaults to the configured home coordinates.
"""
import logging
from typing import Optional

from config.settings import Settings
from models.location import Coordinates

logger = logging.getLogger(__name__)


class LocationProvider:
    """Current-location lookup with a configurable fallback point."""

    def __init__(self, settings: Settings):
        self.default = Coordinates(
            latitude=settings.DEFAULT_LATITUDE,
            longitude=settings.DEFAULT_LONGITUDE,
        )
        self.default_name = settings.DEFAULT_LOCATION_NAME
        self._current: Optional[Coordinates] = None

    def update(self, coordinates: Coordinates) -> None:
        """Record the latest position reported by the client device."""
        self._current = coordinates

    async def current_location(self) -> Optional[Coordinates]:
        if self._current is None:
            logger.debug("No device position reported, using default location")
            return self.default
        return self._current
