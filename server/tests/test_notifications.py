"""Tests for NotificationService reminders."""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from models.schedule import Schedule
from services.notification_service import (
    REMINDER_TITLE,
    InMemoryNotificationSink,
    NotificationService,
)


@pytest.fixture
def sink():
    return InMemoryNotificationSink()


@pytest.fixture
def service(sink, settings):
    return NotificationService(sink, settings)


def test_reminder_text_with_location(service, now):
    schedule = Schedule(title="팀 회의", date=now, location="본사 3층")
    assert service.reminder_text(schedule) == (
        '1시간 후에 "팀 회의" (본사 3층) 일정이 예정되어있습니다. 잊지 않으셨나요?'
    )


def test_reminder_text_without_location(sink, settings_factory, now):
    service = NotificationService(sink, settings_factory(REMINDER_LEAD_MINUTES=30))
    schedule = Schedule(title="운동", date=now)
    assert service.reminder_text(schedule) == '30분 후에 "운동" 일정이 예정되어있습니다. 잊지 않으셨나요?'


@pytest.mark.asyncio
async def test_reminder_fires_an_hour_early(service, sink, now):
    schedule = Schedule(title="회의", date=now + timedelta(hours=3))

    notification = await service.schedule_reminder(schedule, now)

    assert notification.fire_at == now + timedelta(hours=2)
    assert notification.title == REMINDER_TITLE
    assert notification.schedule_id == schedule.id
    assert sink.notifications == [notification]


@pytest.mark.asyncio
@pytest.mark.parametrize("offset", [timedelta(minutes=30), timedelta(hours=1), -timedelta(days=1)])
async def test_past_due_reminder_is_skipped(service, sink, now, offset):
    schedule = Schedule(title="회의", date=now + offset)
    assert await service.schedule_reminder(schedule, now) is None
    assert sink.notifications == []


@pytest.mark.asyncio
async def test_sink_failure_is_not_fatal(settings, now):
    broken = MagicMock()
    broken.deliver = AsyncMock(side_effect=RuntimeError("push service down"))
    service = NotificationService(broken, settings)

    assert await service.schedule_reminder(Schedule(title="회의", date=now + timedelta(days=1)), now) is None


@pytest.mark.asyncio
async def test_reschedule_all_counts_queued(service, sink, now):
    schedules = [
        Schedule(title="지난 일정", date=now - timedelta(days=1)),
        Schedule(title="내일", date=now + timedelta(days=1)),
        Schedule(title="모레", date=now + timedelta(days=2)),
    ]

    assert await service.reschedule_all(schedules, now) == 2
    assert len(sink.notifications) == 2


@pytest.mark.asyncio
async def test_cancel_and_cancel_all(service, sink, now):
    a = Schedule(title="a", date=now + timedelta(days=1))
    b = Schedule(title="b", date=now + timedelta(days=2))
    await service.reschedule_all([a, b], now)

    service.cancel([a.id])
    assert [n.schedule_id for n in sink.notifications] == [b.id]

    service.cancel_all()
    assert sink.notifications == []


def test_cancel_without_sink_support(settings):
    class DeliverOnly:
        async def deliver(self, notification):
            pass

    service = NotificationService(DeliverOnly(), settings)
    service.cancel(["x"])
    service.cancel_all()


@pytest.mark.asyncio
async def test_send_now(service, sink):
    notification = await service.send_now("🌦️ 날씨 알림", "맑음")
    assert notification.fire_at is None
    assert sink.notifications[0].body == "맑음"
