"""Kakao Local API client (keyword and category place search)."""
import httpx
import logging
from typing import Optional

from config.settings import Settings
from models.location import Coordinates
from models.place import PlaceInfo

logger = logging.getLogger(__name__)


class PlacesError(Exception):
    """The places backend could not answer."""


class KakaoLocalClient:
    """Wrapper for the Kakao Local search endpoints, results sorted by distance."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.KAKAO_REST_API_KEY
        self.radius = settings.NEARBY_RADIUS_M
        self.page_size = settings.NEARBY_PAGE_SIZE

        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"KakaoAK {self.api_key}"

        self.client = httpx.AsyncClient(
            base_url=settings.KAKAO_BASE_URL.rstrip("/"),
            headers=headers,
            timeout=settings.HTTP_TIMEOUT,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def search_keyword(
        self,
        keyword: str,
        origin: Coordinates,
        radius: Optional[int] = None,
        category: Optional[str] = None,
    ) -> list[PlaceInfo]:
        """Search places by free-text keyword around ``origin``."""
        params = self._base_params(origin, radius)
        params["query"] = keyword
        if category:
            params["category_group_code"] = category
        places = await self._search("/search/keyword.json", params)
        logger.info(f"Keyword search '{keyword}': {len(places)} places")
        return places

    async def search_category(
        self,
        category_code: str,
        origin: Coordinates,
        radius: Optional[int] = None,
    ) -> list[PlaceInfo]:
        """Search places by category group code around ``origin``."""
        params = self._base_params(origin, radius)
        params["category_group_code"] = category_code
        places = await self._search("/search/category.json", params)
        logger.info(f"Category search {category_code}: {len(places)} places")
        return places

    def _base_params(self, origin: Coordinates, radius: Optional[int]) -> dict[str, str]:
        return {
            "x": str(origin.longitude),
            "y": str(origin.latitude),
            "radius": str(radius or self.radius),
            "sort": "distance",
            "size": str(self.page_size),
        }

    async def _search(self, path: str, params: dict[str, str]) -> list[PlaceInfo]:
        if not self.api_key:
            raise PlacesError("Kakao REST API key is not configured")

        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            documents = response.json().get("documents", [])
        except httpx.HTTPStatusError as e:
            raise PlacesError(f"Kakao API error: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise PlacesError(f"Kakao API request failed: {e}") from e

        places = []
        for document in documents:
            try:
                places.append(PlaceInfo.from_kakao(document))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed place document: {e}")
        return places

    async def close(self):
        await self.client.aclose()
