"""
Shared singleton dependencies for the application.

All expensive objects (HTTP clients, stores, the agent and its lock) are
created once at startup from the Settings object and reused across
requests. Route modules obtain them through the getters below, which also
serve as FastAPI dependency-override points in tests.
"""
import logging
from typing import Optional

from config.settings import Settings
from core.agent import AssistantAgent
from core.deletion_matcher import DeletionMatcher
from core.dispatcher import ActionDispatcher
from core.geocoder import GeocodingResolver
from core.intent_classifier import IntentClassifier
from database.blob_store import BlobStore
from database.client import create_blob_store
from database.repositories.message_repo import MessageRepository
from database.repositories.schedule_repo import ScheduleRepository
from integrations.gemini.client import GeminiClient
from integrations.kakao.client import KakaoLocalClient
from integrations.kma.client import KmaWeatherClient
from integrations.location.provider import LocationProvider
from services.chat_service import ChatService
from services.notification_service import (
    InMemoryNotificationSink,
    NotificationService,
    NotificationSink,
)
from services.places_service import PlacesService
from services.transit_service import TransitService
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)

# Module-level singletons: initialized once via init_dependencies()
_settings: Optional[Settings] = None
_gemini_client: Optional[GeminiClient] = None
_kakao_client: Optional[KakaoLocalClient] = None
_kma_client: Optional[KmaWeatherClient] = None
_location: Optional[LocationProvider] = None
_schedule_repo: Optional[ScheduleRepository] = None
_message_repo: Optional[MessageRepository] = None
_notifications: Optional[NotificationService] = None
_dispatcher: Optional[ActionDispatcher] = None
_agent: Optional[AssistantAgent] = None


def init_dependencies(
    settings: Settings,
    store: Optional[BlobStore] = None,
    sink: Optional[NotificationSink] = None,
) -> None:
    """
    Initialize all shared singletons. Called once at application startup.

    ``store`` and ``sink`` replace the configured backends when given.
    """
    global _settings, _gemini_client, _kakao_client, _kma_client, _location
    global _schedule_repo, _message_repo, _notifications, _dispatcher, _agent

    logger.info("Initializing shared dependencies...")
    _settings = settings

    # HTTP clients: one httpx.AsyncClient each, reused for all requests
    _gemini_client = GeminiClient(settings)
    _kakao_client = KakaoLocalClient(settings)
    _kma_client = KmaWeatherClient(settings)
    _location = LocationProvider(settings)

    store = store or create_blob_store(settings)
    _schedule_repo = ScheduleRepository(store)
    _message_repo = MessageRepository(store)
    _notifications = NotificationService(sink or InMemoryNotificationSink(), settings)

    _dispatcher = ActionDispatcher(
        schedules=_schedule_repo,
        deletion_matcher=DeletionMatcher(_gemini_client, settings),
        geocoder=GeocodingResolver(_gemini_client, _location, settings),
        location=_location,
        notifications=_notifications,
        chat=ChatService(_gemini_client, settings),
        weather=WeatherService(_kma_client, _gemini_client, _location, settings),
        places=PlacesService(_kakao_client, _location, settings),
        transit=TransitService(_gemini_client, settings),
    )
    _agent = AssistantAgent(
        classifier=IntentClassifier(_gemini_client, settings),
        dispatcher=_dispatcher,
        messages=_message_repo,
        settings=settings,
    )

    logger.info(
        f"Dependencies initialized (llm={'on' if settings.gemini_configured else 'fallback only'}, "
        f"places={'on' if _kakao_client.configured else 'off'}, "
        f"store={'supabase' if settings.supabase_configured else 'memory'})"
    )


async def shutdown_dependencies() -> None:
    """Clean up resources on shutdown."""
    for name, client in (
        ("GeminiClient", _gemini_client),
        ("KakaoLocalClient", _kakao_client),
        ("KmaWeatherClient", _kma_client),
    ):
        if client:
            await client.close()
            logger.info(f"{name} closed")


def _require(value, name: str):
    if value is None:
        raise RuntimeError(f"{name} not initialized. Call init_dependencies() first.")
    return value


def get_app_settings() -> Settings:
    return _require(_settings, "Settings")


def get_agent() -> AssistantAgent:
    return _require(_agent, "AssistantAgent")


def get_dispatcher() -> ActionDispatcher:
    return _require(_dispatcher, "ActionDispatcher")


def get_schedule_repo() -> ScheduleRepository:
    return _require(_schedule_repo, "ScheduleRepository")


def get_message_repo() -> MessageRepository:
    return _require(_message_repo, "MessageRepository")


def get_notification_service() -> NotificationService:
    return _require(_notifications, "NotificationService")


def get_location_provider() -> LocationProvider:
    return _require(_location, "LocationProvider")
