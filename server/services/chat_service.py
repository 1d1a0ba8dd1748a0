"""Open-ended chat with the language model."""
import logging

from config.settings import Settings
from core.fallback import call_with_fallback
from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import CHAT_PROMPT

logger = logging.getLogger(__name__)

CHAT_UNAVAILABLE_TEXT = "죄송합니다. 현재 AI 서비스에 연결할 수 없습니다. 잠시 후 다시 시도해주세요."


class ChatService:
    """Friendly-assistant replies; an apology when the model is unreachable."""

    def __init__(self, llm: GeminiClient, settings: Settings):
        self.llm = llm
        self.model = settings.GEMINI_CHAT_MODEL
        self.timeout = settings.LLM_CHAT_TIMEOUT

    async def reply(self, message: str) -> str:
        async def remote() -> str:
            text = await self.llm.generate(
                prompt=CHAT_PROMPT.format(message=message),
                model=self.model,
                temperature=0.7,
                timeout_s=self.timeout,
            )
            return text.strip()

        return await call_with_fallback(remote, lambda: CHAT_UNAVAILABLE_TEXT, label="chat")
