"""Chat transcript repository over the blob store."""
import asyncio
from datetime import datetime
from typing import Optional
from pydantic import TypeAdapter, ValidationError
import logging

from database.blob_store import BlobStore
from models.message import Message

logger = logging.getLogger(__name__)

MESSAGES_KEY = "messages"

WELCOME_TEXT = (
    "안녕하세요! 저는 여러분의 AI 어시스턴트입니다. 😊\n\n"
    "일정을 추가하고 싶으시면 자연스럽게 말씀해 주세요!\n"
    '예: "내일 오후 3시에 팀 회의", "다음 주 금요일 저녁 7시에 친구와 저녁식사"\n\n'
    "그 외에도 궁금한 것이 있으면 언제든 물어보세요!"
)

_MESSAGE_LIST = TypeAdapter(list[Message])


def welcome_message(now: Optional[datetime] = None) -> Message:
    return Message(text=WELCOME_TEXT, is_user=False, timestamp=now or datetime.now().astimezone())


class MessageRepository:
    """Append-only transcript; ``replace`` is the only way to rewrite it.

    ``append`` reads strictly: if the stored transcript cannot be read the
    error propagates and nothing is written.
    """

    def __init__(self, store: BlobStore):
        self.store = store
        self._lock = asyncio.Lock()

    async def load(self) -> list[Message]:
        """Stored transcript, or just the welcome message when empty or unreadable."""
        try:
            return await self._load_strict()
        except Exception as e:
            logger.error(f"Error loading messages, starting fresh: {e}")
            return [welcome_message()]

    async def _load_strict(self) -> list[Message]:
        raw = await self.store.get(MESSAGES_KEY)
        messages = []
        if raw:
            try:
                messages = _MESSAGE_LIST.validate_json(raw)
            except ValidationError as e:
                logger.error(f"Stored transcript is unreadable, replacing it: {e}")
        return messages or [welcome_message()]

    async def replace(self, messages: list[Message]) -> None:
        try:
            await self.store.set(MESSAGES_KEY, _MESSAGE_LIST.dump_json(messages).decode("utf-8"))
        except Exception as e:
            logger.error(f"Error saving {len(messages)} messages: {e}")

    async def append(self, *messages: Message) -> list[Message]:
        async with self._lock:
            transcript = await self._load_strict()
            transcript.extend(messages)
            await self.replace(transcript)
            return transcript

    async def reset(self) -> list[Message]:
        transcript = [welcome_message()]
        async with self._lock:
            await self.replace(transcript)
        return transcript
