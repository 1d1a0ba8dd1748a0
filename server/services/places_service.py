"""Nearby place search and display helpers."""
import logging
import math
from typing import Optional

from config.settings import Settings
from integrations.kakao.client import KakaoLocalClient, PlacesError
from integrations.location.provider import LocationProvider
from models.location import Coordinates
from models.place import PlaceInfo, category_for_keyword

logger = logging.getLogger(__name__)

WALKING_SPEED_M_PER_MIN = 80


def format_distance(meters: int) -> str:
    if meters < 1000:
        return f"{meters}m"
    return f"{meters / 1000:.1f}km"


def estimate_walking_time(meters: int) -> str:
    minutes = math.ceil(meters / WALKING_SPEED_M_PER_MIN)
    if minutes < 60:
        return f"도보 {minutes}분"
    return f"도보 {minutes // 60}시간 {minutes % 60}분"


def format_place_list(keyword: str, places: list[PlaceInfo]) -> str:
    if not places:
        return f"주변에서 '{keyword}'을(를) 찾지 못했어요. 😅 다른 키워드로 검색해 보세요."

    lines = [f"📍 주변 '{keyword}' 검색 결과 {len(places)}곳을 찾았어요.", ""]
    for index, place in enumerate(places, start=1):
        lines.append(
            f"{index}. {place.icon} {place.name} · {format_distance(place.distance)} "
            f"({estimate_walking_time(place.distance)})"
        )
        address = place.road_address or place.address
        if address:
            lines.append(f"   {address}")
    return "\n".join(lines)


class PlacesService:
    def __init__(self, kakao: KakaoLocalClient, location: LocationProvider, settings: Settings):
        self.kakao = kakao
        self.location = location
        self.min_results = settings.NEARBY_MIN_RESULTS
        self.max_results = settings.NEARBY_MAX_RESULTS

    async def smart_nearby_search(
        self,
        keyword: str,
        category: Optional[str] = None,
        origin: Optional[Coordinates] = None,
    ) -> list[PlaceInfo]:
        """
        Keyword search around the current location, topped up with a category
        search when it returns too few results. Deduplicated by place id and
        truncated. Raises PlacesError when the keyword search itself fails.
        """
        origin = origin or await self.location.current_location()
        if origin is None:
            raise PlacesError("Current location unavailable")

        results = await self.kakao.search_keyword(keyword, origin)

        if len(results) < self.min_results:
            code = category or category_for_keyword(keyword)
            if code:
                try:
                    extra = await self.kakao.search_category(code, origin)
                except PlacesError as e:
                    logger.warning(f"Category top-up search failed, keeping keyword results: {e}")
                    extra = []
                seen = {place.id for place in results}
                for place in extra:
                    if place.id not in seen:
                        seen.add(place.id)
                        results.append(place)

        return results[: self.max_results]
