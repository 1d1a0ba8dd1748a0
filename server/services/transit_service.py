"""Transit route suggestions from the routing model."""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from core.fallback import call_with_fallback
from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import TRANSIT_ROUTE_PROMPT
from models.location import Coordinates
from models.transit import TransitLeg, TransitMode, TransitRoute
from services.places_service import WALKING_SPEED_M_PER_MIN

logger = logging.getLogger(__name__)

DEFAULT_FARE = 1370


class RouteStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = "도보"
    line: Optional[str] = None
    from_: str = Field("", alias="from")
    to: str = ""
    time: int = 0
    stations: int = 0


class RouteSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    total_time: int = Field(0, alias="totalTime")
    total_cost: Optional[int] = Field(None, alias="totalCost")
    main_transport: Optional[str] = Field(None, alias="mainTransport")
    steps: list[RouteStep] = []


class RoutingReply(BaseModel):
    routes: list[RouteSuggestion] = []


def step_mode(step_type: str) -> TransitMode:
    if "지하철" in step_type:
        return TransitMode.SUBWAY
    if "버스" in step_type:
        return TransitMode.BUS
    return TransitMode.WALK


def to_transit_route(
    suggestion: RouteSuggestion,
    start: Coordinates,
    end: Coordinates,
    start_name: str,
    end_name: str,
) -> TransitRoute:
    """Convert one suggested route into legs. Raises ValueError without steps."""
    if not suggestion.steps:
        raise ValueError("Route suggestion has no steps")

    legs = []
    last = len(suggestion.steps) - 1
    for index, step in enumerate(suggestion.steps):
        mode = step_mode(step.type)
        legs.append(
            TransitLeg(
                mode=mode,
                section_time=max(step.time, 0),
                distance=max(step.time, 0) * WALKING_SPEED_M_PER_MIN if mode == TransitMode.WALK else 0,
                station_count=max(step.stations, 0) if mode != TransitMode.WALK else 0,
                start_name=step.from_ or (start_name if index == 0 else ""),
                end_name=step.to or (end_name if index == last else ""),
                line=(step.line or mode.label) if mode != TransitMode.WALK else None,
                start=start if index == 0 else None,
                end=end if index == last else None,
            )
        )

    return TransitRoute(
        legs=legs,
        first_start_station=legs[0].start_name or start_name,
        last_end_station=legs[-1].end_name or end_name,
        payment=suggestion.total_cost or DEFAULT_FARE,
        title=suggestion.title,
    )


def format_duration(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    if hours and rest:
        return f"{hours}시간 {rest}분"
    if hours:
        return f"{hours}시간"
    return f"{rest}분"


def format_cost(won: int) -> str:
    return f"{won:,}원"


def format_route_summary(route: TransitRoute, start_name: str, end_name: str) -> str:
    lines = [
        f"🚉 {start_name} → {end_name} 경로를 찾았어요!",
        "",
        f"⏱️ 총 {format_duration(route.total_time)} · 💰 {format_cost(route.payment)}"
        f" · 환승 {route.transfer_count}회",
        "",
    ]
    for leg in route.legs:
        if leg.mode == TransitMode.WALK:
            lines.append(f"{leg.mode.icon} 도보 {leg.section_time}분")
        else:
            stations = f", {leg.station_count}개 역" if leg.station_count else ""
            lines.append(
                f"{leg.mode.icon} {leg.way}: {leg.start_name} → {leg.end_name} "
                f"({leg.section_time}분{stations})"
            )
    return "\n".join(lines)


class TransitService:
    def __init__(self, llm: GeminiClient, settings: Settings):
        self.llm = llm
        self.model = settings.GEMINI_ROUTING_MODEL
        self.timeout = settings.LLM_ROUTING_TIMEOUT

    async def find_route(
        self,
        start_name: str,
        start: Coordinates,
        end_name: str,
        end: Coordinates,
    ) -> Optional[TransitRoute]:
        """The first usable suggested route, or None."""

        async def remote() -> Optional[TransitRoute]:
            reply = await self.llm.generate_structured(
                prompt=TRANSIT_ROUTE_PROMPT.format(
                    start_name=start_name,
                    end_name=end_name,
                    start_latitude=start.latitude,
                    start_longitude=start.longitude,
                    end_latitude=end.latitude,
                    end_longitude=end.longitude,
                ),
                schema=RoutingReply,
                model=self.model,
                timeout_s=self.timeout,
            )
            for suggestion in reply.routes:
                try:
                    return to_transit_route(suggestion, start, end, start_name, end_name)
                except ValueError as e:
                    logger.warning(f"Skipping unusable route suggestion: {e}")
            logger.info(f"No usable route from '{start_name}' to '{end_name}'")
            return None

        return await call_with_fallback(remote, lambda: None, label="transit routing")
