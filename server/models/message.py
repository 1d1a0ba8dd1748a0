"""Chat transcript data models"""
from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from models.place import PlaceInfo
from models.transit import TransitRoute


class Message(BaseModel):
    """One transcript entry. Created once, never edited."""
    id: str = Field(default_factory=lambda: uuid4().hex)
    text: str
    is_user: bool
    timestamp: datetime
    transit_routes: Optional[list[TransitRoute]] = None
    places: Optional[list[PlaceInfo]] = None


class DispatchResult(BaseModel):
    """What the dispatcher hands back for one intent."""
    text: str
    transit_routes: Optional[list[TransitRoute]] = None
    places: Optional[list[PlaceInfo]] = None
