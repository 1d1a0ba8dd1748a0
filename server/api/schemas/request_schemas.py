"""API request schemas"""
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ChatMessageRequest(BaseModel):
    """One user utterance, optionally with the device's current position."""
    text: str = Field(..., min_length=1, max_length=2000)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text must not be blank")
        return v


class CreateScheduleRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    date: datetime
    location: Optional[str] = Field(None, max_length=200)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("date must include a timezone offset")
        return v
