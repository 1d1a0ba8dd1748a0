"""Shared test fixtures and configuration."""
import sys
import os
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

# Ensure the server package is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set required environment variables BEFORE any application module is imported.
# No backend is configured, so nothing reaches the network.
os.environ.setdefault("TIMEZONE", "Asia/Seoul")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from config.settings import Settings  # noqa: E402

KST = ZoneInfo("Asia/Seoul")


def make_settings(**overrides) -> Settings:
    """Settings isolated from any local .env file and real credentials."""
    values = dict(
        GEMINI_API_KEY=None,
        KAKAO_REST_API_KEY=None,
        KMA_API_KEY=None,
        KMA_MID_API_KEY=None,
        SUPABASE_URL=None,
        SUPABASE_KEY=None,
        TIMEZONE="Asia/Seoul",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def now() -> datetime:
    """Wednesday 2025-09-10 10:30 KST."""
    return datetime(2025, 9, 10, 10, 30, tzinfo=KST)
