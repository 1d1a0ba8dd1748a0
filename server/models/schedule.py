"""Schedule data models"""
from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


def new_schedule_id() -> str:
    return uuid4().hex


class Schedule(BaseModel):
    """A persisted schedule entry. ``date`` is always an absolute instant."""
    id: str = Field(default_factory=new_schedule_id)
    title: str
    date: datetime
    location: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("location")
    @classmethod
    def _blank_location_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class ScheduleDraft(BaseModel):
    """Schedule fields extracted from an utterance, before an id is assigned.

    ``date`` is None when no instant could be resolved.
    """
    title: str = ""
    date: Optional[datetime] = None
    location: Optional[str] = None
