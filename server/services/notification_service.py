"""Schedule reminders and immediate notifications."""
import logging
from datetime import datetime, timedelta
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from config.settings import Settings
from models.schedule import Schedule

logger = logging.getLogger(__name__)

REMINDER_TITLE = "일정 알림 📅"


class Notification(BaseModel):
    title: str
    body: str
    fire_at: Optional[datetime] = None  # None = deliver immediately
    schedule_id: Optional[str] = None


class NotificationSink(Protocol):
    """Delivery backend (push service, device, test recorder)."""

    async def deliver(self, notification: Notification) -> None:
        ...


class InMemoryNotificationSink:
    """Records notifications instead of delivering them."""

    def __init__(self):
        self.notifications: list[Notification] = []

    async def deliver(self, notification: Notification) -> None:
        self.notifications.append(notification)
        when = notification.fire_at.isoformat() if notification.fire_at else "now"
        logger.info(f"Notification queued for {when}: {notification.title}")

    def cancel(self, schedule_id: str) -> None:
        self.notifications = [n for n in self.notifications if n.schedule_id != schedule_id]

    def clear(self) -> None:
        self.notifications.clear()


def _lead_label(minutes: int) -> str:
    if minutes and minutes % 60 == 0:
        return f"{minutes // 60}시간"
    return f"{minutes}분"


class NotificationService:
    def __init__(self, sink: NotificationSink, settings: Settings):
        self.sink = sink
        self.lead = timedelta(minutes=settings.REMINDER_LEAD_MINUTES)
        self.tz = ZoneInfo(settings.TIMEZONE)

    def reminder_text(self, schedule: Schedule) -> str:
        location = f" ({schedule.location})" if schedule.location else ""
        lead = _lead_label(int(self.lead.total_seconds() // 60))
        return f'{lead} 후에 "{schedule.title}"{location} 일정이 예정되어있습니다. 잊지 않으셨나요?'

    async def schedule_reminder(
        self,
        schedule: Schedule,
        now: Optional[datetime] = None,
    ) -> Optional[Notification]:
        """Queue a reminder ahead of the schedule. Past-due reminders are skipped."""
        now = now or datetime.now(self.tz)
        fire_at = schedule.date - self.lead
        if fire_at <= now:
            logger.info(f"Reminder for schedule {schedule.id} is past due, not scheduling")
            return None

        notification = Notification(
            title=REMINDER_TITLE,
            body=self.reminder_text(schedule),
            fire_at=fire_at,
            schedule_id=schedule.id,
        )
        try:
            await self.sink.deliver(notification)
        except Exception as e:
            logger.error(f"Failed to schedule reminder for {schedule.id}: {e}")
            return None
        return notification

    async def reschedule_all(self, schedules: list[Schedule], now: Optional[datetime] = None) -> int:
        """Re-register reminders for stored schedules; returns how many were queued."""
        queued = 0
        for schedule in schedules:
            if await self.schedule_reminder(schedule, now):
                queued += 1
        logger.info(f"Rescheduled {queued}/{len(schedules)} reminders")
        return queued

    def cancel(self, schedule_ids: list[str]) -> None:
        """Drop pending reminders when the sink supports it."""
        cancel = getattr(self.sink, "cancel", None)
        if cancel is None:
            return
        for schedule_id in schedule_ids:
            cancel(schedule_id)

    def cancel_all(self) -> None:
        clear = getattr(self.sink, "clear", None)
        if clear is not None:
            clear()

    async def send_now(self, title: str, body: str) -> Notification:
        notification = Notification(title=title, body=body)
        await self.sink.deliver(notification)
        return notification
