"""Schedule routes: direct management outside the chat."""
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from api.schemas.request_schemas import CreateScheduleRequest
from api.schemas.response_schemas import DeleteResponse, ScheduleListResponse
from core.dependencies import get_dispatcher, get_notification_service, get_schedule_repo
from core.dispatcher import ActionDispatcher
from database.repositories.schedule_repo import ScheduleRepository
from models.schedule import Schedule
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ScheduleListResponse)
async def list_schedules(schedules: ScheduleRepository = Depends(get_schedule_repo)):
    """All schedules, soonest first."""
    return ScheduleListResponse(schedules=sorted(await schedules.load(), key=lambda s: s.date))


@router.post("", response_model=Schedule, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    request: CreateScheduleRequest,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
):
    """Create a schedule and its reminder (e.g. an accepted suggestion)."""
    return await dispatcher.create_schedule(
        title=request.title,
        date=request.date,
        location=request.location,
    )


@router.delete("/{schedule_id}", response_model=DeleteResponse)
async def delete_schedule(
    schedule_id: str,
    schedules: ScheduleRepository = Depends(get_schedule_repo),
    notifications: NotificationService = Depends(get_notification_service),
):
    removed = await schedules.remove_ids([schedule_id])
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule not found",
        )
    notifications.cancel([schedule_id])
    return DeleteResponse(deleted=len(removed))


@router.delete("", response_model=DeleteResponse)
async def clear_schedules(
    schedules: ScheduleRepository = Depends(get_schedule_repo),
    notifications: NotificationService = Depends(get_notification_service),
):
    deleted = await schedules.clear()
    notifications.cancel_all()
    logger.info(f"Cleared {deleted} schedules")
    return DeleteResponse(deleted=deleted)
