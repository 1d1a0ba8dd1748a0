"""Main application entry point"""
import uvicorn
import logging
from api.app import create_app
from config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# ASGI app for `uvicorn main:app`
app = create_app(settings)


def _status(enabled: bool) -> str:
    return "on" if enabled else "off"


def main():
    """Start the API server"""

    llm = settings.GEMINI_CHAT_MODEL if settings.gemini_configured else "offline parser only"
    logger.info(f"""
    ╔════════════════════════════════════════╗
    ║          Biseo Server Starting         ║
    ╠════════════════════════════════════════╣
      Address:  http://{settings.HOST}:{settings.PORT}
      Docs:     http://{settings.HOST}:{settings.PORT}/docs
      LLM:      {llm}
      Places:   {_status(bool(settings.KAKAO_REST_API_KEY))}
      Weather:  {_status(bool(settings.KMA_API_KEY))}
      Storage:  {"supabase" if settings.supabase_configured else "memory"}
      Timezone: {settings.TIMEZONE}
    ╚════════════════════════════════════════╝
    """)

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
