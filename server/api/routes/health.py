"""Health check routes"""
from fastapi import APIRouter, Depends
import logging

from api.schemas.response_schemas import HealthResponse
from config.settings import Settings
from core.dependencies import get_app_settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Liveness plus which external backends are configured"""
    return HealthResponse(
        status="ok",
        service="biseo-api",
        backends={
            "llm": settings.gemini_configured,
            "places": bool(settings.KAKAO_REST_API_KEY),
            "weather": bool(settings.KMA_API_KEY),
            "database": settings.supabase_configured,
        },
    )
