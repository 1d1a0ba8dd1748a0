"""Assistant agent: classify -> dispatch -> record, one message at a time."""
import asyncio
import time
import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config.settings import Settings
from core.dispatcher import ActionDispatcher
from core.intent_classifier import IntentClassifier
from database.repositories.message_repo import MessageRepository
from models.message import Message

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "죄송합니다. 메시지 처리 중 오류가 발생했습니다. 다시 시도해주세요."


class AssistantAgent:
    """
    Runs the per-message pipeline:
    record user message → classify → dispatch → record assistant reply

    A lock serialises messages, so the transcript always alternates one user
    message with exactly one assistant reply.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        dispatcher: ActionDispatcher,
        messages: MessageRepository,
        settings: Settings,
    ):
        self.classifier = classifier
        self.dispatcher = dispatcher
        self.messages = messages
        self.tz = ZoneInfo(settings.TIMEZONE)
        self._lock = asyncio.Lock()

    async def handle_message(self, text: str, now: Optional[datetime] = None) -> Message:
        """
        Process one user utterance and return the assistant reply.

        Never raises: any failure in classification or dispatch becomes the
        generic apology, which is still appended to the transcript. When the
        transcript itself cannot be read, nothing is recorded.
        """
        async with self._lock:
            start_time = time.time()
            now = now or datetime.now(self.tz)

            try:
                await self.messages.append(Message(text=text, is_user=True, timestamp=now))
            except Exception as e:
                # Transcript unreadable: reply without recording either side
                logger.error(f"Error recording user message (code={_classify_error(e)}): {e}")
                return Message(text=GENERIC_ERROR_TEXT, is_user=False, timestamp=datetime.now(self.tz))

            try:
                intent = await self.classifier.classify(text, now)
                result = await self.dispatcher.dispatch(intent, text)
                reply = Message(
                    text=result.text,
                    is_user=False,
                    timestamp=datetime.now(self.tz),
                    transit_routes=result.transit_routes,
                    places=result.places,
                )
            except Exception as e:
                error_code = _classify_error(e)
                logger.error(f"Error handling message (code={error_code}): {e}", exc_info=True)
                reply = Message(text=GENERIC_ERROR_TEXT, is_user=False, timestamp=datetime.now(self.tz))

            try:
                await self.messages.append(reply)
            except Exception as e:
                logger.error(f"Error recording assistant reply (code={_classify_error(e)}): {e}")

            elapsed = int((time.time() - start_time) * 1000)
            logger.info(f"Message handled in {elapsed}ms")
            return reply


def _classify_error(exc: Exception) -> str:
    """Return a machine-readable error code for the exception."""
    if isinstance(exc, TimeoutError):
        return "llm_timeout"
    if isinstance(exc, (ConnectionError, OSError)):
        return "connection_error"
    msg = str(exc).lower()
    if "timeout" in msg:
        return "llm_timeout"
    if "connection" in msg or "unreachable" in msg:
        return "connection_error"
    if "json" in msg or "parse" in msg:
        return "parse_error"
    return "internal_error"
