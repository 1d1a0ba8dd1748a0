"""Application configuration settings."""
from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import model_validator
from typing import List, Optional

# Get the server directory path
SERVER_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and handed to each component constructor.
    """

    # LLM Configuration (Gemini generateContent)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    GEMINI_CHAT_MODEL: str = "gemini-1.5-flash"
    GEMINI_ROUTING_MODEL: str = "gemini-2.5-flash"
    GEMINI_GEOCODING_MODEL: str = "gemini-1.5-flash"

    # Per-phase LLM timeouts (seconds)
    LLM_CLASSIFY_TIMEOUT: float = 8.0
    LLM_GEOCODE_TIMEOUT: float = 6.0
    LLM_DELETION_TIMEOUT: float = 8.0
    LLM_CHAT_TIMEOUT: float = 15.0
    LLM_ROUTING_TIMEOUT: float = 20.0

    # Timeout for the places / weather backends
    HTTP_TIMEOUT: float = 10.0

    # Kakao Local (places)
    KAKAO_REST_API_KEY: Optional[str] = None
    KAKAO_BASE_URL: str = "https://dapi.kakao.com/v2/local"
    NEARBY_RADIUS_M: int = 1000
    NEARBY_PAGE_SIZE: int = 15
    NEARBY_MIN_RESULTS: int = 5
    NEARBY_MAX_RESULTS: int = 10

    # Korea Meteorological Administration
    KMA_API_KEY: Optional[str] = None
    KMA_MID_API_KEY: Optional[str] = None
    KMA_BASE_URL: str = "https://apis.data.go.kr/1360000"
    KMA_MID_STN_ID: str = "108"
    KMA_MID_REG_ID: str = "11A00101"

    # Device location stand-in and local calendar
    DEFAULT_LATITUDE: float = 37.5665
    DEFAULT_LONGITUDE: float = 126.9780
    DEFAULT_LOCATION_NAME: str = "서울"
    TIMEZONE: str = "Asia/Seoul"

    # Assistant behaviour
    DELETION_CONFIDENCE_THRESHOLD: float = 0.7
    REMINDER_LEAD_MINUTES: int = 60

    # Blob store (Supabase table); in-process store when unset
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    BLOB_TABLE: str = "kv_store"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8081",
    ]

    @model_validator(mode="after")
    def _validate_thresholds(self) -> "Settings":
        if not 0.0 <= self.DELETION_CONFIDENCE_THRESHOLD <= 1.0:
            raise ValueError("DELETION_CONFIDENCE_THRESHOLD must be within [0, 1]")
        if self.REMINDER_LEAD_MINUTES < 0:
            raise ValueError("REMINDER_LEAD_MINUTES must not be negative")
        return self

    @property
    def gemini_configured(self) -> bool:
        return bool(self.GEMINI_API_KEY) and self.GEMINI_API_KEY != "your_gemini_api_key"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)

    class Config:
        env_file = str(SERVER_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Settings for the running process, constructed on first use."""
    return Settings()
