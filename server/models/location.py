"""Geographic coordinate model"""
from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """WGS84 point"""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
