"""Intent data models.

An Intent is the canonical classification of one user utterance. Each kind
is its own model and the union is discriminated on ``action``, so a value
carries exactly one kind's payload and nothing else.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.schedule import ScheduleDraft


class _IntentBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: Optional[str] = None  # text to show the user as-is


class AddIntent(_IntentBase):
    action: Literal["add"] = "add"
    schedule: ScheduleDraft


class RemoveIntent(_IntentBase):
    action: Literal["remove"] = "remove"
    query: Optional[str] = None


class ListIntent(_IntentBase):
    action: Literal["list"] = "list"
    query: Optional[str] = None


class UpdateIntent(_IntentBase):
    action: Literal["update"] = "update"
    query: Optional[str] = None


class ClearIntent(_IntentBase):
    action: Literal["clear"] = "clear"


class TransitIntent(_IntentBase):
    """Route request. Zero coordinates mean "not resolved yet"."""
    action: Literal["transit"] = "transit"
    start_latitude: float = 0.0
    start_longitude: float = 0.0
    end_latitude: float = 0.0
    end_longitude: float = 0.0
    start_name: Optional[str] = None
    end_name: Optional[str] = None

    @property
    def start_resolved(self) -> bool:
        return bool(self.start_latitude or self.start_longitude)

    @property
    def end_resolved(self) -> bool:
        return bool(self.end_latitude or self.end_longitude)


class WeatherIntent(_IntentBase):
    action: Literal["weather"] = "weather"


class NotificationTestIntent(_IntentBase):
    action: Literal["notification_test"] = "notification_test"


class NearbyIntent(_IntentBase):
    action: Literal["nearby"] = "nearby"
    keyword: str
    category: Optional[str] = None  # Kakao category group code


class NoneIntent(_IntentBase):
    action: Literal["none"] = "none"


Intent = Annotated[
    Union[
        AddIntent,
        RemoveIntent,
        ListIntent,
        UpdateIntent,
        ClearIntent,
        TransitIntent,
        WeatherIntent,
        NotificationTestIntent,
        NearbyIntent,
        NoneIntent,
    ],
    Field(discriminator="action"),
]

INTENT_KINDS = (
    "add",
    "remove",
    "list",
    "update",
    "clear",
    "transit",
    "weather",
    "notification_test",
    "nearby",
    "none",
)
