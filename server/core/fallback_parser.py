"""Deterministic, offline intent parser.

Used whenever the language model is unreachable or answers with something
that does not decode. The rules are an ordered tuple of
``(predicate, builder)`` pairs evaluated once, first match wins, so
precedence is explicit: notification test > weather > nearby > transit >
clear > remove > list > update > chit-chat > add.
"""
import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from models.intent import (
    AddIntent,
    ClearIntent,
    Intent,
    ListIntent,
    NearbyIntent,
    NoneIntent,
    NotificationTestIntent,
    RemoveIntent,
    TransitIntent,
    UpdateIntent,
    WeatherIntent,
)
from models.place import category_for_keyword
from models.schedule import ScheduleDraft

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_KEYWORD = "편의점"
DEFAULT_HOUR = 9


def _compile_any(keywords: Iterable[str], *extra: str) -> re.Pattern:
    """
    One compiled alternation over literal keywords plus optional raw
    patterns. Korean particles attach directly to nouns, so there are no
    word boundaries here.
    """
    parts = [re.escape(kw) for kw in keywords]
    parts.extend(extra)
    return re.compile("|".join(parts), re.IGNORECASE)


# ---------------------------------------------------------------------------
# Keyword sets
# ---------------------------------------------------------------------------

_NOTIFICATION_TEST_RE = re.compile(r"알림\s*(?:테스트|시험)|테스트\s*알림")

# "비" / "눈" only count as weather when they start a word: "준비 오후" is not rain
_WEATHER_RE = _compile_any(
    ["날씨", "기온", "우산", "미세먼지", "강수", "습도", "일기예보", "추워", "더워", "쌀쌀"],
    r"(?<![가-힣])(?:비|눈)(?:가|이)?\s*(?:와|오|올|내)",
)

_NEARBY_RE = _compile_any(["근처", "주변", "가까운", "가까이"])

_PLACE_WORDS = (
    "편의점", "대형마트", "마트", "음식점", "맛집", "식당", "카페", "병원",
    "약국", "주유소", "지하철역", "은행", "주차장", "서점", "빵집", "pc방",
)

_TRANSIT_RE = _compile_any(
    ["가는 길", "가는길", "가려면", "어떻게 가", "경로", "길찾기", "길 찾기",
     "길 알려", "대중교통", "환승", "지하철로", "버스로"],
)

_DELETE_RE = _compile_any(["삭제", "지워", "지우", "취소", "없애", "빼줘", "빼 줘"])

_ALL_RE = _compile_any(
    ["모든", "모두", "전부", "전체", "싹 다"],
    r"(?:^|\s)다\s*(?:지워|지우|삭제|취소|없애)",
)

_LIST_RE = _compile_any(["보여줘", "보여 줘", "보여주", "목록", "리스트", "조회"])

# Only a listing request when a schedule noun is also present
_LIST_ASK_RE = _compile_any(["알려줘", "알려 줘", "뭐 있", "뭐있", "뭐야", "확인", "있어?", "있나"])
_SCHEDULE_NOUN_RE = _compile_any(["일정", "약속", "스케줄", "스케쥴"])

_UPDATE_RE = _compile_any(
    ["수정", "변경", "바꿔", "바꾸", "옮겨", "옮기", "미뤄", "미루", "연기", "당겨"],
)

# Day names, months, time-of-day words, meeting nouns and "N시"
_SCHEDULE_CUE_RE = re.compile(
    r"\d{1,2}\s*월|\d{1,2}\s*시|오늘|내일|모레|글피|이번\s*주|다음\s*주|주말|"
    r"[월화수목금토일]요일|오전|오후|저녁|아침|점심|정오|새벽|밤|"
    r"회의|미팅|약속|일정|예약|모임|만남|수업|면접|발표|진료|데이트|생일|기념일|마감"
)

# ---------------------------------------------------------------------------
# Extraction patterns
# ---------------------------------------------------------------------------

_ROUTE_PATTERNS = (
    re.compile(r"(?P<start>.+?)\s*에서\s*(?P<end>.+?)\s*까지"),
    re.compile(r"(?P<start>.+?)\s*에서\s*(?P<end>.+?)\s*(?:으로|로)\s*(?:가|이동)"),
    re.compile(r"(?P<start>.+?)\s*부터\s*(?P<end>.+?)\s*까지"),
)
_LEADING_FILLER_RE = re.compile(r"^(?:(?:지금|오늘|내일|모레|혹시|나|저|우리)\s+)+")

_DELETION_PHRASE_RE = re.compile(
    r"(?:삭제|지워|지우|취소|없애|빼)\s*(?:해|하)?\s*(?:줘|주세요|줄래|주라|라)?요?"
)
_REQUEST_NOISE_RE = re.compile(r"(?:^|\s)좀(?=\s|$)|[?!.~]+")

_MONTH_DAY_RE = re.compile(r"(\d{1,2})\s*월\s*(\d{1,2})\s*일")
_TIME_RE = re.compile(r"(\d{1,2})\s*시(?:\s*(\d{1,2})\s*분|\s*(반))?")
_AFTERNOON_RE = re.compile(r"오후|저녁|밤")
_NOON_RE = re.compile(r"정오|점심")
_LOCATION_RE = re.compile(r"(?:^|\s)([^\s]+?)에서(?=\s)")


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _nearby(text: str, now: datetime) -> Intent:
    lowered = text.lower()
    found = [(lowered.find(word), word) for word in _PLACE_WORDS if word in lowered]
    keyword = min(found)[1] if found else DEFAULT_NEARBY_KEYWORD
    if keyword == "pc방":
        keyword = "PC방"
    return NearbyIntent(keyword=keyword, category=category_for_keyword(keyword))


def _clean_place(name: str) -> str:
    name = _REQUEST_NOISE_RE.sub(" ", name).strip()
    return _LEADING_FILLER_RE.sub("", name).strip()


def extract_route_endpoints(text: str) -> tuple[str, str]:
    """Start/end place names, or two empty strings when no pattern fits."""
    normalized = text.replace("여기서", "여기에서")
    for pattern in _ROUTE_PATTERNS:
        match = pattern.search(normalized)
        if match:
            start = _clean_place(match.group("start"))
            end = _clean_place(match.group("end"))
            if start and end:
                return start, end
    return "", ""


def _transit(text: str, now: datetime) -> Intent:
    start, end = extract_route_endpoints(text)
    return TransitIntent(start_name=start, end_name=end)


def strip_deletion_phrases(text: str) -> str:
    """The utterance without deletion verbs and request endings."""
    query = _DELETION_PHRASE_RE.sub(" ", text)
    query = _REQUEST_NOISE_RE.sub(" ", query)
    return " ".join(query.split())


def _remove(text: str, now: datetime) -> Intent:
    return RemoveIntent(query=strip_deletion_phrases(text) or None)


def _resolve_date(text: str, now: datetime) -> datetime:
    """Calendar day the utterance refers to (time of day untouched)."""
    month_day = _MONTH_DAY_RE.search(text)
    if month_day:
        month, day = int(month_day.group(1)), int(month_day.group(2))
        try:
            candidate = now.replace(month=month, day=day)
            if candidate.date() < now.date():
                candidate = candidate.replace(year=now.year + 1)
            return candidate
        except ValueError:
            logger.debug(f"Ignoring impossible date {month}월 {day}일")

    if "내일모레" in text or "모레" in text:
        return now + timedelta(days=2)
    if "글피" in text:
        return now + timedelta(days=3)
    if "내일" in text:
        return now + timedelta(days=1)
    return now


def _resolve_time(text: str) -> tuple[int, int]:
    """(hour, minute) from "N시(M분|반)" plus meridiem words."""
    match = _TIME_RE.search(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2)) if match.group(2) else 0
        if match.group(3):
            minute = 30
        if _AFTERNOON_RE.search(text) and hour < 12:
            hour += 12
        if hour > 23:
            return DEFAULT_HOUR, 0
        return hour, minute if minute < 60 else 0

    # Meridiem word without an hour
    if _NOON_RE.search(text):
        return 12, 0
    if _AFTERNOON_RE.search(text):
        return 18, 0
    return DEFAULT_HOUR, 0


def _extract_location(text: str) -> Optional[str]:
    match = _LOCATION_RE.search(f" {text} ")
    if not match:
        return None
    location = match.group(1)
    if _SCHEDULE_CUE_RE.fullmatch(location):
        return None
    return location


def _add(text: str, now: datetime) -> Intent:
    hour, minute = _resolve_time(text)
    date = _resolve_date(text, now).replace(hour=hour, minute=minute, second=0, microsecond=0)
    return AddIntent(
        schedule=ScheduleDraft(title=text, date=date, location=_extract_location(text)),
    )


def _is_list_request(text: str) -> bool:
    if _LIST_RE.search(text):
        return True
    return bool(_LIST_ASK_RE.search(text) and _SCHEDULE_NOUN_RE.search(text))


_Rule = tuple[Callable[[str], object], Callable[[str, datetime], Intent]]

_RULES: tuple[_Rule, ...] = (
    (_NOTIFICATION_TEST_RE.search, lambda text, now: NotificationTestIntent()),
    (_WEATHER_RE.search, lambda text, now: WeatherIntent()),
    (_NEARBY_RE.search, _nearby),
    (_TRANSIT_RE.search, _transit),
    (lambda text: _DELETE_RE.search(text) and _ALL_RE.search(text), lambda text, now: ClearIntent()),
    (_DELETE_RE.search, _remove),
    (_is_list_request, lambda text, now: ListIntent(query=text)),
    (_UPDATE_RE.search, lambda text, now: UpdateIntent(query=text)),
    (lambda text: not _SCHEDULE_CUE_RE.search(text), lambda text, now: NoneIntent()),
    (lambda text: True, _add),
)


def fallback_classify(text: str, now: Optional[datetime] = None) -> Intent:
    """
    Classify ``text`` without any network access. Never raises.

    ``now`` anchors relative dates; defaults to the local wall clock.
    """
    text = (text or "").strip()
    if not text:
        return NoneIntent()

    now = now or datetime.now().astimezone()

    try:
        for predicate, build in _RULES:
            if predicate(text):
                intent = build(text, now)
                logger.info(f"Fallback parser classified input as '{intent.action}'")
                return intent
    except Exception as e:
        logger.error(f"Fallback parser failed on input, treating as chat: {e}", exc_info=True)

    return NoneIntent()
