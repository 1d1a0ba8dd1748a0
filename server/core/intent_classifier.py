"""Remote intent classification with offline fallback."""
import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import dateparser
from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from core.fallback import call_with_fallback
from core.fallback_parser import fallback_classify
from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import INTENT_CLASSIFICATION_PROMPT
from models.intent import (
    INTENT_KINDS,
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
from models.place import PLACE_CATEGORIES, category_for_keyword
from models.schedule import ScheduleDraft

logger = logging.getLogger(__name__)

WEEKDAYS = "월화수목금토일"


class IntentDecodeError(ValueError):
    """Model reply parsed as JSON but does not describe a known intent."""


class _RemoteSchedule(BaseModel):
    title: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None


class _RemoteTransit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_name: Optional[str] = Field(None, alias="startName")
    end_name: Optional[str] = Field(None, alias="endName")


class _RemoteNearby(BaseModel):
    keyword: Optional[str] = None
    category: Optional[str] = None


class RemoteIntentReply(BaseModel):
    """Wire shape of the classification reply. Unknown keys are ignored."""
    action: str
    schedule: Optional[_RemoteSchedule] = None
    query: Optional[str] = None
    transit: Optional[_RemoteTransit] = None
    nearby: Optional[_RemoteNearby] = None
    message: Optional[str] = None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == "null":
        return None
    return value


def parse_model_date(value: Optional[str], now: datetime) -> Optional[datetime]:
    """Absolute instant from the model's date string, in ``now``'s zone.

    Returns None when the string is missing or unparseable.
    """
    value = _blank_to_none(value)
    if value is None:
        return None

    parsed = dateparser.parse(
        value,
        languages=["ko", "en"],
        settings={
            "RELATIVE_BASE": now.replace(tzinfo=None),
            "PREFER_DATES_FROM": "future",
        },
    )
    if parsed is None:
        logger.warning(f"Unparseable schedule date from model: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=now.tzinfo)
    return parsed


def to_intent(reply: RemoteIntentReply, text: str, now: datetime) -> Intent:
    """Decode a model reply into exactly one Intent variant.

    Raises IntentDecodeError for unknown actions or missing required payloads.
    """
    action = reply.action.strip().lower()
    if action not in INTENT_KINDS:
        raise IntentDecodeError(f"Unknown intent action: {reply.action!r}")

    message = _blank_to_none(reply.message)
    query = _blank_to_none(reply.query)

    if action == "add":
        schedule = reply.schedule or _RemoteSchedule()
        return AddIntent(
            schedule=ScheduleDraft(
                title=_blank_to_none(schedule.title) or text,
                date=parse_model_date(schedule.date, now),
                location=_blank_to_none(schedule.location),
            ),
            message=message,
        )
    if action == "remove":
        return RemoveIntent(query=query, message=message)
    if action == "list":
        return ListIntent(query=query, message=message)
    if action == "update":
        return UpdateIntent(query=query, message=message)
    if action == "clear":
        return ClearIntent(message=message)
    if action == "transit":
        transit = reply.transit or _RemoteTransit()
        return TransitIntent(
            start_name=_blank_to_none(transit.start_name),
            end_name=_blank_to_none(transit.end_name),
            message=message,
        )
    if action == "weather":
        return WeatherIntent(message=message)
    if action == "notification_test":
        return NotificationTestIntent(message=message)
    if action == "nearby":
        nearby = reply.nearby or _RemoteNearby()
        keyword = _blank_to_none(nearby.keyword)
        if keyword is None:
            raise IntentDecodeError("nearby reply without a search keyword")
        category = _blank_to_none(nearby.category)
        if category not in PLACE_CATEGORIES:
            category = category_for_keyword(keyword)
        return NearbyIntent(keyword=keyword, category=category, message=message)
    return NoneIntent(message=message)


class IntentClassifier:
    """
    Sends the utterance to the language model and decodes the reply.

    Any failure (missing key, network, timeout, malformed JSON, unknown
    action) degrades to the offline parser. classify() never raises.
    """

    def __init__(self, llm: GeminiClient, settings: Settings):
        self.llm = llm
        self.tz = ZoneInfo(settings.TIMEZONE)
        self.model = settings.GEMINI_CHAT_MODEL
        self.timeout = settings.LLM_CLASSIFY_TIMEOUT

    async def classify(self, text: str, now: Optional[datetime] = None) -> Intent:
        now = now or datetime.now(self.tz)

        async def remote() -> Intent:
            prompt = INTENT_CLASSIFICATION_PROMPT.format(
                now=f"{now:%Y-%m-%d %H:%M} ({WEEKDAYS[now.weekday()]}요일)",
                text=text,
            )
            reply = await self.llm.generate_structured(
                prompt=prompt,
                schema=RemoteIntentReply,
                model=self.model,
                timeout_s=self.timeout,
            )
            intent = to_intent(reply, text, now)
            logger.info(f"Model classified input as '{intent.action}'")
            return intent

        return await call_with_fallback(
            remote,
            lambda: fallback_classify(text, now),
            label="intent classification",
        )
