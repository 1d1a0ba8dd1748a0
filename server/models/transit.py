"""Transit route data models"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field

from models.location import Coordinates


class TransitMode(str, Enum):
    SUBWAY = "subway"
    BUS = "bus"
    WALK = "walk"

    @property
    def label(self) -> str:
        return {TransitMode.SUBWAY: "지하철", TransitMode.BUS: "버스", TransitMode.WALK: "도보"}[self]

    @property
    def icon(self) -> str:
        return {TransitMode.SUBWAY: "🚇", TransitMode.BUS: "🚌", TransitMode.WALK: "🚶"}[self]


class TransitLeg(BaseModel):
    """One homogeneous-mode segment of a route."""
    mode: TransitMode
    section_time: int = 0  # minutes
    distance: int = 0  # metres
    station_count: int = 0
    start_name: str = ""
    end_name: str = ""
    line: Optional[str] = None  # "2호선", "472번"; None for walking legs
    start: Optional[Coordinates] = None
    end: Optional[Coordinates] = None

    @property
    def way(self) -> str:
        if self.mode == TransitMode.SUBWAY:
            return f"{self.line} 탑승"
        if self.mode == TransitMode.BUS:
            return f"{self.line} 버스 탑승"
        return "도보 이동"


class TransitRoute(BaseModel):
    """A trip as an ordered list of legs.

    Every aggregate except the fare is computed from ``legs``, so the summary
    can never disagree with the legs it describes.
    """
    legs: list[TransitLeg]
    first_start_station: str
    last_end_station: str
    payment: int = 0  # KRW
    title: Optional[str] = None

    @computed_field
    @property
    def total_time(self) -> int:
        return sum(leg.section_time for leg in self.legs)

    @computed_field
    @property
    def total_walk(self) -> int:
        return sum(leg.distance for leg in self.legs if leg.mode == TransitMode.WALK)

    @computed_field
    @property
    def bus_count(self) -> int:
        return sum(1 for leg in self.legs if leg.mode == TransitMode.BUS)

    @computed_field
    @property
    def subway_count(self) -> int:
        return sum(1 for leg in self.legs if leg.mode == TransitMode.SUBWAY)

    @computed_field
    @property
    def bus_station_count(self) -> int:
        return sum(leg.station_count for leg in self.legs if leg.mode == TransitMode.BUS)

    @computed_field
    @property
    def subway_station_count(self) -> int:
        return sum(leg.station_count for leg in self.legs if leg.mode == TransitMode.SUBWAY)

    @computed_field
    @property
    def total_station_count(self) -> int:
        return self.bus_station_count + self.subway_station_count

    @computed_field
    @property
    def transfer_count(self) -> int:
        return max(0, self.bus_count + self.subway_count - 1)
