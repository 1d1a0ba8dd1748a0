"""Place search data models"""
from typing import Any, Optional

from pydantic import BaseModel


# Kakao category group code -> (display name, icon)
PLACE_CATEGORIES: dict[str, tuple[str, str]] = {
    "CS2": ("편의점", "🏪"),
    "FD6": ("음식점", "🍽️"),
    "CE7": ("카페", "☕"),
    "HP8": ("병원", "🏥"),
    "PM9": ("약국", "💊"),
    "OL7": ("주유소", "⛽"),
    "SW8": ("지하철역", "🚇"),
    "BK9": ("은행", "🏦"),
    "CT1": ("문화시설", "🎭"),
    "AT4": ("관광명소", "🗽"),
    "AD5": ("숙박", "🏨"),
    "MT1": ("대형마트", "🛒"),
    "SC4": ("학교", "🏫"),
    "AC5": ("학원", "📚"),
    "PK6": ("주차장", "🅿️"),
}

# Search words that map onto a category for supplementary searches
KEYWORD_CATEGORIES: dict[str, str] = {
    "편의점": "CS2",
    "마트": "MT1",
    "음식점": "FD6",
    "맛집": "FD6",
    "식당": "FD6",
    "카페": "CE7",
    "병원": "HP8",
    "약국": "PM9",
    "주유소": "OL7",
    "지하철": "SW8",
    "은행": "BK9",
    "주차장": "PK6",
}


def category_name(code: Optional[str]) -> str:
    if code and code in PLACE_CATEGORIES:
        return PLACE_CATEGORIES[code][0]
    return "기타"


def category_icon(code: Optional[str]) -> str:
    if code and code in PLACE_CATEGORIES:
        return PLACE_CATEGORIES[code][1]
    return "📍"


def category_for_keyword(text: str) -> Optional[str]:
    """First category whose keyword appears in ``text``."""
    for keyword, code in KEYWORD_CATEGORIES.items():
        if keyword in text:
            return code
    return None


class PlaceInfo(BaseModel):
    """A point of interest returned by the places backend."""
    id: str
    name: str
    category_code: str = ""
    category_path: str = ""  # e.g. "가정,생활 > 편의점 > GS25"
    address: str = ""
    road_address: str = ""
    latitude: float
    longitude: float
    phone: Optional[str] = None
    place_url: Optional[str] = None
    distance: int = 0  # metres from the search origin

    @property
    def category_name(self) -> str:
        return category_name(self.category_code)

    @property
    def icon(self) -> str:
        return category_icon(self.category_code)

    @classmethod
    def from_kakao(cls, document: dict[str, Any]) -> "PlaceInfo":
        """Build from a Kakao Local ``documents`` entry (x = lng, y = lat, strings)."""
        distance = document.get("distance") or "0"
        return cls(
            id=str(document["id"]),
            name=document.get("place_name", ""),
            category_code=document.get("category_group_code") or "",
            category_path=document.get("category_name") or "",
            address=document.get("address_name") or "",
            road_address=document.get("road_address_name") or "",
            latitude=float(document["y"]),
            longitude=float(document["x"]),
            phone=document.get("phone") or None,
            place_url=document.get("place_url") or None,
            distance=int(distance) if str(distance).isdigit() else 0,
        )
