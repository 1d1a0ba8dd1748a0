"""Schedule repository over the blob store."""
import asyncio
from typing import Iterable
from pydantic import TypeAdapter, ValidationError
import logging

from database.blob_store import BlobStore
from models.schedule import Schedule

logger = logging.getLogger(__name__)

SCHEDULES_KEY = "schedules"

_SCHEDULE_LIST = TypeAdapter(list[Schedule])


class ScheduleRepository:
    """
    The whole schedule list lives in one JSON blob.

    ``load`` never raises: read failures yield an empty list. Mutations read
    strictly instead, so a failed read propagates and nothing is written over
    the stored list. A lock serialises read-modify-write cycles between the
    chat pipeline and the schedule routes.
    """

    def __init__(self, store: BlobStore):
        self.store = store
        self._lock = asyncio.Lock()

    async def load(self) -> list[Schedule]:
        try:
            return await self._load_strict()
        except Exception as e:
            logger.error(f"Error loading schedules, starting empty: {e}")
            return []

    async def _load_strict(self) -> list[Schedule]:
        raw = await self.store.get(SCHEDULES_KEY)
        if not raw:
            return []
        try:
            return _SCHEDULE_LIST.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Stored schedules are unreadable, replacing them: {e}")
            return []

    async def save(self, schedules: list[Schedule]) -> None:
        try:
            await self.store.set(SCHEDULES_KEY, _SCHEDULE_LIST.dump_json(schedules).decode("utf-8"))
        except Exception as e:
            logger.error(f"Error saving {len(schedules)} schedules: {e}")

    async def add(self, schedule: Schedule) -> list[Schedule]:
        async with self._lock:
            schedules = await self._load_strict()
            schedules.append(schedule)
            await self.save(schedules)
            return schedules

    async def remove_ids(self, ids: Iterable[str]) -> list[Schedule]:
        """Drop the given ids; returns the schedules that were removed."""
        doomed = set(ids)
        async with self._lock:
            schedules = await self._load_strict()
            removed = [s for s in schedules if s.id in doomed]
            if removed:
                await self.save([s for s in schedules if s.id not in doomed])
            return removed

    async def clear(self) -> int:
        """Remove everything; returns how many schedules were dropped."""
        async with self._lock:
            count = len(await self._load_strict())
            await self.save([])
            return count
