"""API response schemas"""
from pydantic import BaseModel
from typing import List, Optional

from models.message import Message
from models.schedule import Schedule


class TranscriptResponse(BaseModel):
    messages: List[Message]


class ScheduleListResponse(BaseModel):
    schedules: List[Schedule]


class DeleteResponse(BaseModel):
    deleted: int


class ErrorResponse(BaseModel):
    detail: str
    error_code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    backends: dict[str, bool]
