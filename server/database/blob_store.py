"""Flat key-value blob storage."""
from asyncio import to_thread
from datetime import datetime, timezone
from typing import Optional, Protocol
from supabase import Client
import logging

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """String blobs addressed by key."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class InMemoryBlobStore:
    """Process-local store for development and tests."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SupabaseBlobStore:
    """
    One row per key in a ``(key text primary key, value text, updated_at)``
    table. The sync supabase client runs in a worker thread.
    """

    def __init__(self, supabase: Client, table: str = "kv_store"):
        self.supabase = supabase
        self.table = table

    async def get(self, key: str) -> Optional[str]:
        try:
            response = await to_thread(
                lambda: self.supabase.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
            return response.data[0]["value"] if response.data else None

        except Exception as e:
            logger.error(f"Error reading blob '{key}': {e}")
            raise

    async def set(self, key: str, value: str) -> None:
        try:
            data = {
                "key": key,
                "value": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
            await to_thread(
                lambda: self.supabase.table(self.table)
                .upsert(data, on_conflict="key")
                .execute()
            )

        except Exception as e:
            logger.error(f"Error writing blob '{key}': {e}")
            raise
