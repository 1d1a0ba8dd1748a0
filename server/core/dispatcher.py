"""Action Dispatcher: one handler per intent kind."""
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from core.deletion_matcher import DeletionMatcher
from core.geocoder import GeocodingResolver, is_current_location
from database.repositories.schedule_repo import ScheduleRepository
from integrations.kakao.client import PlacesError
from integrations.kma.client import WeatherError
from integrations.location.provider import LocationProvider
from models.intent import (
    AddIntent,
    ClearIntent,
    Intent,
    ListIntent,
    NearbyIntent,
    NoneIntent,
    NotificationTestIntent,
    RemoveIntent,
    TransitIntent,
    UpdateIntent,
    WeatherIntent,
)
from models.location import Coordinates
from models.message import DispatchResult
from models.schedule import Schedule
from services.chat_service import ChatService
from services.notification_service import NotificationService
from services.places_service import PlacesService, format_place_list
from services.transit_service import TransitService, format_route_summary
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)

WEEKDAYS = "월화수목금토일"

ADD_NEEDS_DATE_TEXT = (
    "일정 날짜와 시간을 이해하지 못했어요. 😅\n"
    '"내일 오후 3시에 팀 회의"처럼 날짜와 시간을 함께 말씀해 주세요.'
)
EMPTY_LIST_TEXT = "등록된 일정이 없습니다. 📭\n자연스럽게 말씀하시면 일정을 추가해 드릴게요!"
UPDATE_COMING_SOON_TEXT = (
    "일정 수정 기능은 곧 제공될 예정입니다. 🛠️\n"
    "지금은 기존 일정을 삭제한 뒤 새로 추가해 주세요."
)
TRANSIT_NEEDS_ENDPOINTS_TEXT = '출발지와 도착지를 알려주세요. 예: "강남역에서 서울역까지 어떻게 가?"'
ROUTE_NOT_FOUND_TEXT = "경로를 찾을 수 없습니다. 잠시 후 다시 시도해주세요. 😅"
PLACES_UNAVAILABLE_TEXT = "주변 장소를 검색할 수 없습니다. 잠시 후 다시 시도해주세요. 😅"
NOTIFICATION_TEST_TITLE = "🌦️ 날씨 알림"
NOTIFICATION_TEST_FALLBACK_BODY = "알림 테스트입니다. 🔔 알림이 정상적으로 동작하고 있어요!"


def format_when(date: datetime) -> str:
    return f"{date:%Y년 %m월 %d일} ({WEEKDAYS[date.weekday()]}) {date:%H:%M}"


def format_schedule_line(schedule: Schedule) -> str:
    location = f" 📍 {schedule.location}" if schedule.location else ""
    return f"{schedule.title} - {format_when(schedule.date)}{location}"


def location_not_found_text(place_name: str) -> str:
    return (
        f"'{place_name}'의 위치를 찾을 수 없습니다. 😅\n"
        "역 이름이나 건물명처럼 좀 더 구체적인 장소로 말씀해 주세요."
    )


class ActionDispatcher:
    """
    Executes a classified intent against the stores and external services.

    Each dispatch reads and writes the stores independently; nothing is
    cached between calls. Backend failures that have a user-facing answer
    are handled here; anything else propagates to the agent.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        deletion_matcher: DeletionMatcher,
        geocoder: GeocodingResolver,
        location: LocationProvider,
        notifications: NotificationService,
        chat: ChatService,
        weather: WeatherService,
        places: PlacesService,
        transit: TransitService,
    ):
        self.schedules = schedules
        self.deletion_matcher = deletion_matcher
        self.geocoder = geocoder
        self.location = location
        self.notifications = notifications
        self.chat = chat
        self.weather = weather
        self.places = places
        self.transit = transit

        self._handlers: dict[type, Callable[[Intent, str], Awaitable[DispatchResult]]] = {
            AddIntent: self._add,
            RemoveIntent: self._remove,
            ListIntent: self._list,
            UpdateIntent: self._update,
            ClearIntent: self._clear,
            TransitIntent: self._transit,
            WeatherIntent: self._weather,
            NotificationTestIntent: self._notification_test,
            NearbyIntent: self._nearby,
            NoneIntent: self._chat,
        }

    async def dispatch(self, intent: Intent, text: str) -> DispatchResult:
        handler = self._handlers[type(intent)]
        logger.info(f"Dispatching '{intent.action}'")
        return await handler(intent, text)

    async def create_schedule(
        self,
        title: str,
        date: datetime,
        location: Optional[str] = None,
    ) -> Schedule:
        """Persist a schedule and request its reminder."""
        schedule = Schedule(title=title, date=date, location=location)
        await self.schedules.add(schedule)
        await self.notifications.schedule_reminder(schedule)
        logger.info(f"Created schedule {schedule.id} at {schedule.date.isoformat()}")
        return schedule

    async def _add(self, intent: AddIntent, text: str) -> DispatchResult:
        draft = intent.schedule
        if draft.date is None:
            return DispatchResult(text=ADD_NEEDS_DATE_TEXT)

        schedule = await self.create_schedule(
            title=draft.title.strip() or text,
            date=draft.date,
            location=draft.location,
        )
        reply = f"일정이 추가되었습니다! 📅\n\n📌 {schedule.title}\n⏰ {format_when(schedule.date)}"
        if schedule.location:
            reply += f"\n📍 {schedule.location}"
        return DispatchResult(text=reply)

    async def _remove(self, intent: RemoveIntent, text: str) -> DispatchResult:
        schedules = await self.schedules.load()
        decision = await self.deletion_matcher.match_for_deletion(text, schedules)
        if not decision.should_delete:
            return DispatchResult(text=decision.reason)

        removed = await self.schedules.remove_ids(s.id for s in decision.matched)
        self.notifications.cancel([s.id for s in removed])
        lines = [f"🗑️ 일정 {len(removed)}개를 삭제했습니다.", ""]
        lines.extend(f"• {format_schedule_line(s)}" for s in removed)
        return DispatchResult(text="\n".join(lines))

    async def _list(self, intent: ListIntent, text: str) -> DispatchResult:
        schedules = sorted(await self.schedules.load(), key=lambda s: s.date)
        if not schedules:
            return DispatchResult(text=EMPTY_LIST_TEXT)

        lines = [f"📅 등록된 일정 {len(schedules)}개", ""]
        lines.extend(f"{i}. {format_schedule_line(s)}" for i, s in enumerate(schedules, start=1))
        return DispatchResult(text="\n".join(lines))

    async def _update(self, intent: UpdateIntent, text: str) -> DispatchResult:
        return DispatchResult(text=UPDATE_COMING_SOON_TEXT)

    async def _clear(self, intent: ClearIntent, text: str) -> DispatchResult:
        cleared = await self.schedules.clear()
        self.notifications.cancel_all()
        return DispatchResult(text=f"🗑️ 모든 일정({cleared}개)을 삭제했습니다.")

    async def _resolve_endpoint(
        self,
        name: Optional[str],
        latitude: float,
        longitude: float,
    ) -> Optional[Coordinates]:
        if latitude or longitude:
            return Coordinates(latitude=latitude, longitude=longitude)
        if not name or is_current_location(name):
            return await self.location.current_location()
        return await self.geocoder.resolve(name)

    async def _transit(self, intent: TransitIntent, text: str) -> DispatchResult:
        if not intent.end_name and not intent.end_resolved:
            return DispatchResult(text=TRANSIT_NEEDS_ENDPOINTS_TEXT)

        start_name = intent.start_name or "현재 위치"
        end_name = intent.end_name or "도착지"

        start = await self._resolve_endpoint(
            intent.start_name, intent.start_latitude, intent.start_longitude
        )
        if start is None:
            return DispatchResult(text=location_not_found_text(start_name))

        end = await self._resolve_endpoint(
            intent.end_name, intent.end_latitude, intent.end_longitude
        )
        if end is None:
            return DispatchResult(text=location_not_found_text(end_name))

        route = await self.transit.find_route(start_name, start, end_name, end)
        if route is None:
            return DispatchResult(text=ROUTE_NOT_FOUND_TEXT)

        return DispatchResult(
            text=format_route_summary(route, start_name, end_name),
            transit_routes=[route],
        )

    async def _weather(self, intent: WeatherIntent, text: str) -> DispatchResult:
        return DispatchResult(text=await self.weather.smart_response(text))

    async def _notification_test(self, intent: NotificationTestIntent, text: str) -> DispatchResult:
        try:
            body = await self.weather.morning_message()
        except WeatherError as e:
            logger.warning(f"Weather unavailable for test notification: {e}")
            body = NOTIFICATION_TEST_FALLBACK_BODY

        await self.notifications.send_now(NOTIFICATION_TEST_TITLE, body)
        return DispatchResult(text=f"🔔 테스트 알림을 보냈습니다.\n\n{body}")

    async def _nearby(self, intent: NearbyIntent, text: str) -> DispatchResult:
        try:
            places = await self.places.smart_nearby_search(intent.keyword, intent.category)
        except PlacesError as e:
            logger.error(f"Nearby search for '{intent.keyword}' failed: {e}")
            return DispatchResult(text=PLACES_UNAVAILABLE_TEXT)

        return DispatchResult(
            text=format_place_list(intent.keyword, places),
            places=places or None,
        )

    async def _chat(self, intent: NoneIntent, text: str) -> DispatchResult:
        if intent.message:
            return DispatchResult(text=intent.message)
        return DispatchResult(text=await self.chat.reply(text))
