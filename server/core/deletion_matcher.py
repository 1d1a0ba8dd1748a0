"""Model-assisted matching of a deletion request against stored schedules."""
import logging

from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from core.fallback import call_with_fallback
from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import DELETION_MATCH_PROMPT
from models.schedule import Schedule

logger = logging.getLogger(__name__)

NO_SCHEDULES_REASON = "등록된 일정이 없습니다"
ANALYSIS_FAILED_REASON = "일정 분석에 실패했습니다. 삭제할 일정 이름을 정확히 말씀해 주세요."
NO_MATCH_REASON = "삭제할 일정을 찾지 못했습니다. 일정 이름을 정확히 말씀해 주세요."


class DeletionReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    should_delete: bool = Field(False, alias="shouldDelete")
    matched_indices: list[int] = Field(default_factory=list, alias="matchedIndices")
    reason: str = ""
    confidence: float = 0.0


class DeletionDecision(BaseModel):
    """Outcome of matching. ``matched`` is empty unless deletion is approved."""
    should_delete: bool
    matched: list[Schedule] = []
    reason: str
    confidence: float = 0.0


def format_schedule_list(schedules: list[Schedule]) -> str:
    lines = []
    for index, schedule in enumerate(schedules, start=1):
        location = schedule.location or "장소 없음"
        lines.append(f"{index}. {schedule.title} | {schedule.date:%Y-%m-%d %H:%M} | {location}")
    return "\n".join(lines)


class DeletionMatcher:
    """
    Asks the model which schedules the utterance refers to and gates the
    answer on confidence. Only in-range 1-based indices survive.
    """

    def __init__(self, llm: GeminiClient, settings: Settings):
        self.llm = llm
        self.model = settings.GEMINI_CHAT_MODEL
        self.timeout = settings.LLM_DELETION_TIMEOUT
        self.threshold = settings.DELETION_CONFIDENCE_THRESHOLD

    async def match_for_deletion(self, utterance: str, schedules: list[Schedule]) -> DeletionDecision:
        if not schedules:
            return DeletionDecision(should_delete=False, reason=NO_SCHEDULES_REASON)

        async def remote() -> DeletionDecision:
            reply = await self.llm.generate_structured(
                prompt=DELETION_MATCH_PROMPT.format(
                    schedules=format_schedule_list(schedules),
                    utterance=utterance,
                ),
                schema=DeletionReply,
                model=self.model,
                timeout_s=self.timeout,
            )
            return self._decide(reply, schedules)

        return await call_with_fallback(
            remote,
            lambda: DeletionDecision(should_delete=False, reason=ANALYSIS_FAILED_REASON),
            label="deletion matching",
        )

    def _decide(self, reply: DeletionReply, schedules: list[Schedule]) -> DeletionDecision:
        seen: set[int] = set()
        indices = []
        for index in reply.matched_indices:
            if 1 <= index <= len(schedules) and index not in seen:
                seen.add(index)
                indices.append(index)
        dropped = len(reply.matched_indices) - len(indices)
        if dropped:
            logger.warning(f"Discarded {dropped} out-of-range or duplicate schedule indices")

        approved = reply.should_delete and reply.confidence >= self.threshold and bool(indices)
        logger.info(
            f"Deletion decision: approved={approved} confidence={reply.confidence:.2f} "
            f"indices={indices}"
        )
        if not approved:
            reason = reply.reason.strip()
            if not reason or (reply.should_delete and reply.confidence >= self.threshold):
                reason = NO_MATCH_REASON
            return DeletionDecision(should_delete=False, reason=reason, confidence=reply.confidence)

        return DeletionDecision(
            should_delete=True,
            matched=[schedules[i - 1] for i in indices],
            reason=reply.reason.strip(),
            confidence=reply.confidence,
        )
