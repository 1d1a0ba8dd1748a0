"""Place name -> coordinates via the language model."""
import logging
from typing import Optional

from pydantic import BaseModel

from config.settings import Settings
from core.fallback import call_with_fallback
from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import GEOCODING_PROMPT
from integrations.location.provider import LocationProvider
from models.location import Coordinates

logger = logging.getLogger(__name__)

# Compared with whitespace removed
CURRENT_LOCATION_PHRASES = frozenset(
    {"현재위치", "현위치", "내위치", "지금위치", "여기", "여기서", "지금여기", "내가있는곳"}
)


def is_current_location(place_name: str) -> bool:
    return "".join(place_name.split()) in CURRENT_LOCATION_PHRASES


class GeocodeReply(BaseModel):
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class GeocodingResolver:
    """Resolves free-text Korean place names. Returns None when not found."""

    def __init__(self, llm: GeminiClient, location: LocationProvider, settings: Settings):
        self.llm = llm
        self.location = location
        self.model = settings.GEMINI_GEOCODING_MODEL
        self.timeout = settings.LLM_GEOCODE_TIMEOUT

    async def resolve(self, place_name: Optional[str]) -> Optional[Coordinates]:
        if not place_name or not place_name.strip():
            return None
        if is_current_location(place_name):
            return await self.location.current_location()

        async def remote() -> Optional[Coordinates]:
            reply = await self.llm.generate_structured(
                prompt=GEOCODING_PROMPT.format(place_name=place_name.strip()),
                schema=GeocodeReply,
                model=self.model,
                timeout_s=self.timeout,
            )
            if reply.latitude is None or reply.longitude is None:
                logger.info(f"Geocoder could not place '{place_name}'")
                return None
            if reply.latitude == 0 and reply.longitude == 0:
                return None
            coords = Coordinates(latitude=reply.latitude, longitude=reply.longitude)
            logger.info(f"Geocoded '{place_name}' -> {reply.name} ({coords.latitude}, {coords.longitude})")
            return coords

        return await call_with_fallback(remote, lambda: None, label="geocoding")
