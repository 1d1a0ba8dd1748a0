"""Tests for the offline fallback intent parser."""
from datetime import datetime, timedelta

import pytest

from core.fallback_parser import (
    extract_route_endpoints,
    fallback_classify,
    strip_deletion_phrases,
)
from models.intent import (
    AddIntent,
    ClearIntent,
    ListIntent,
    NearbyIntent,
    NoneIntent,
    NotificationTestIntent,
    RemoveIntent,
    TransitIntent,
    UpdateIntent,
    WeatherIntent,
)


def _at(now: datetime, day_offset: int, hour: int, minute: int = 0) -> datetime:
    return (now + timedelta(days=day_offset)).replace(hour=hour, minute=minute, second=0, microsecond=0)


# ---------------------------------------------------------------------------
# add: relative days, N시(M분), +12 rule
# ---------------------------------------------------------------------------

class TestAddDates:

    def test_tomorrow_afternoon_meeting(self, now):
        intent = fallback_classify("내일 오후 3시에 회의", now)
        assert isinstance(intent, AddIntent)
        assert intent.schedule.date == _at(now, 1, 15)
        assert intent.schedule.title == "내일 오후 3시에 회의"

    @pytest.mark.parametrize(
        "text,offset,hour,minute",
        [
            ("오늘 오후 5시 팀 미팅", 0, 17, 0),
            ("내일 오전 10시 30분 치과 진료", 1, 10, 30),
            ("모레 저녁 7시 약속", 2, 19, 0),
            ("내일모레 밤 9시 통화 일정", 2, 21, 0),
            ("내일 13시 면접", 1, 13, 0),
            ("오늘 오후 2시 반 수업", 0, 14, 30),
        ],
    )
    def test_relative_day_and_time(self, now, text, offset, hour, minute):
        intent = fallback_classify(text, now)
        assert isinstance(intent, AddIntent)
        assert intent.schedule.date == _at(now, offset, hour, minute)

    def test_default_hour_is_nine(self, now):
        intent = fallback_classify("내일 회의", now)
        assert intent.schedule.date == _at(now, 1, 9)

    def test_afternoon_marker_does_not_shift_hours_past_noon(self, now):
        intent = fallback_classify("오후 13시 회의", now)
        assert intent.schedule.date.hour == 13

    @pytest.mark.parametrize(
        "text,hour",
        [("내일 점심 약속", 12), ("내일 저녁 약속", 18), ("내일 오전 회의", 9)],
    )
    def test_meridiem_without_hour(self, now, text, hour):
        intent = fallback_classify(text, now)
        assert intent.schedule.date == _at(now, 1, hour)

    def test_absolute_month_day(self, now):
        intent = fallback_classify("9월 20일 오후 3시 면접", now)
        assert intent.schedule.date == now.replace(day=20, hour=15, minute=0)

    def test_today_month_day_is_not_rolled_over(self, now):
        intent = fallback_classify("9월 10일 오후 2시 회의", now)
        assert intent.schedule.date.year == 2025
        assert intent.schedule.date.day == 10

    def test_past_month_day_rolls_to_next_year(self, now):
        intent = fallback_classify("3월 1일 졸업식", now)
        assert intent.schedule.date == datetime(2026, 3, 1, 9, 0, tzinfo=now.tzinfo)

    def test_impossible_date_falls_back_to_base_day(self, now):
        intent = fallback_classify("2월 30일 회의", now)
        assert isinstance(intent, AddIntent)
        assert intent.schedule.date == _at(now, 0, 9)

    def test_out_of_range_hour_uses_default(self, now):
        intent = fallback_classify("내일 25시 회의", now)
        assert intent.schedule.date == _at(now, 1, 9)

    def test_date_keeps_timezone(self, now):
        intent = fallback_classify("내일 오후 3시 회의", now)
        assert intent.schedule.date.tzinfo == now.tzinfo

    def test_location_from_place_particle(self, now):
        intent = fallback_classify("금요일 저녁 7시 강남역에서 친구와 저녁", now)
        assert isinstance(intent, AddIntent)
        assert intent.schedule.location == "강남역"

    def test_rain_like_syllable_inside_word_is_not_weather(self, now):
        intent = fallback_classify("내일 발표 준비 오후 3시", now)
        assert isinstance(intent, AddIntent)


# ---------------------------------------------------------------------------
# Rule precedence and the other kinds
# ---------------------------------------------------------------------------

class TestOtherKinds:

    @pytest.mark.parametrize("text", ["내일 비 와?", "우산 챙겨야 해?", "오늘 날씨 어때", "미세먼지 어때?"])
    def test_weather(self, now, text):
        assert isinstance(fallback_classify(text, now), WeatherIntent)

    def test_weather_wins_over_deletion(self, now):
        assert isinstance(fallback_classify("내일 비 오면 약속 취소해줘", now), WeatherIntent)

    @pytest.mark.parametrize(
        "text,keyword,category",
        [
            ("근처 카페 찾아줘", "카페", "CE7"),
            ("주변 맛집 알려줘", "맛집", "FD6"),
            ("가까운 약국이랑 병원 어디야", "약국", "PM9"),
            ("근처 대형마트", "대형마트", "MT1"),
            ("근처 지하철역 어디야", "지하철역", "SW8"),
        ],
    )
    def test_nearby_keyword(self, now, text, keyword, category):
        intent = fallback_classify(text, now)
        assert isinstance(intent, NearbyIntent)
        assert intent.keyword == keyword
        assert intent.category == category

    def test_nearby_defaults_to_convenience_store(self, now):
        intent = fallback_classify("근처에 뭐 있어?", now)
        assert isinstance(intent, NearbyIntent)
        assert intent.keyword == "편의점"
        assert intent.category == "CS2"

    def test_nearby_wins_over_transit(self, now):
        assert isinstance(fallback_classify("근처 카페 가는 길", now), NearbyIntent)

    @pytest.mark.parametrize(
        "text,start,end",
        [
            ("강남역에서 서울역까지 어떻게 가?", "강남역", "서울역"),
            ("집에서 회사로 가는 길 알려줘", "집", "회사"),
            ("서울역부터 강남역까지 경로", "서울역", "강남역"),
            ("여기서 홍대입구역까지 가는 길", "여기", "홍대입구역"),
            ("지금 강남역에서 잠실역까지 대중교통으로 어떻게 가?", "강남역", "잠실역"),
        ],
    )
    def test_transit_endpoints(self, now, text, start, end):
        intent = fallback_classify(text, now)
        assert isinstance(intent, TransitIntent)
        assert (intent.start_name, intent.end_name) == (start, end)
        assert not intent.start_resolved
        assert not intent.end_resolved

    def test_transit_without_pattern_has_empty_names(self, now):
        intent = fallback_classify("길찾기 해줘", now)
        assert isinstance(intent, TransitIntent)
        assert intent.start_name == ""
        assert intent.end_name == ""

    @pytest.mark.parametrize(
        "text",
        ["모든 일정 삭제해줘", "일정 전부 지워줘", "일정 다 지워", "약속 싹 다 취소해줘"],
    )
    def test_clear(self, now, text):
        assert isinstance(fallback_classify(text, now), ClearIntent)

    @pytest.mark.parametrize(
        "text,query",
        [
            ("내일 회의 취소해줘", "내일 회의"),
            ("치과 예약 좀 지워줄래?", "치과 예약"),
            ("다음주 회의 삭제", "다음주 회의"),
        ],
    )
    def test_remove_query(self, now, text, query):
        intent = fallback_classify(text, now)
        assert isinstance(intent, RemoveIntent)
        assert intent.query == query

    @pytest.mark.parametrize("text", ["내 일정 보여줘", "이번 주 약속 뭐 있어?", "일정 목록"])
    def test_list(self, now, text):
        intent = fallback_classify(text, now)
        assert isinstance(intent, ListIntent)
        assert intent.query == text

    @pytest.mark.parametrize("text", ["내일 일정 알려줘", "오늘 약속 확인", "다음 주 스케줄 뭐야"])
    def test_list_asks_need_a_schedule_noun(self, now, text):
        assert isinstance(fallback_classify(text, now), ListIntent)

    def test_reminder_phrasing_is_an_add(self, now):
        intent = fallback_classify("내일 3시 회의 알려줘", now)
        assert isinstance(intent, AddIntent)
        assert intent.schedule.date.day == 11

    def test_checkup_phrasing_is_an_add(self, now):
        intent = fallback_classify("오후 2시 진료 확인", now)
        assert isinstance(intent, AddIntent)
        assert intent.schedule.date.hour == 14
        assert intent.schedule.title == "오후 2시 진료 확인"

    def test_question_without_schedule_noun_is_chat(self, now):
        assert isinstance(fallback_classify("이게 뭐야", now), NoneIntent)

    @pytest.mark.parametrize("text", ["회의 시간 4시로 바꿔줘", "내일 회의를 모레로 미뤄줘"])
    def test_update(self, now, text):
        assert isinstance(fallback_classify(text, now), UpdateIntent)

    def test_notification_test(self, now):
        assert isinstance(fallback_classify("알림 테스트 해줘", now), NotificationTestIntent)


# ---------------------------------------------------------------------------
# none and totality
# ---------------------------------------------------------------------------

class TestNoneAndTotality:

    @pytest.mark.parametrize("text", ["안녕하세요", "고마워!", "너는 누구야?", "사랑해", "hello there"])
    def test_no_keyword_is_none(self, now, text):
        assert isinstance(fallback_classify(text, now), NoneIntent)

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_input_is_none(self, now, text):
        assert isinstance(fallback_classify(text, now), NoneIntent)

    @pytest.mark.parametrize("text", ["{}{}", "에서까지", "시시시", "99월 99일", "😀" * 50, "부터까지 가려면"])
    def test_odd_input_never_raises(self, now, text):
        fallback_classify(text, now)

    def test_now_defaults_to_local_clock(self):
        intent = fallback_classify("내일 회의")
        assert isinstance(intent, AddIntent)
        assert intent.schedule.date.tzinfo is not None


class TestHelpers:

    def test_extract_route_endpoints_no_match(self):
        assert extract_route_endpoints("강남역 가는 길") == ("", "")

    def test_strip_deletion_phrases(self):
        assert strip_deletion_phrases("팀 회의 삭제해 주세요") == "팀 회의"
