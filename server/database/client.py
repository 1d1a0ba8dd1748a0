"""Blob store selection and the Supabase client behind it."""
from typing import Optional
from supabase import create_client, Client
from config.settings import Settings
from database.blob_store import BlobStore, InMemoryBlobStore, SupabaseBlobStore
import logging

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def init_supabase(settings: Settings) -> Client:
    """Supabase client for the configured project, created on first use."""
    global _supabase_client

    if _supabase_client is None:
        logger.info(f"Connecting to Supabase project at {settings.SUPABASE_URL}")
        _supabase_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)

    return _supabase_client


def create_blob_store(settings: Settings) -> BlobStore:
    """
    Store holding the ``schedules`` and ``messages`` blobs.

    Supabase when both URL and key are set; otherwise an in-process store
    whose contents are lost on restart.
    """
    if not settings.supabase_configured:
        logger.warning("Supabase is not configured; schedules and messages will not survive a restart")
        return InMemoryBlobStore()

    logger.info(f"Using Supabase table '{settings.BLOB_TABLE}' for schedules and messages")
    return SupabaseBlobStore(init_supabase(settings), settings.BLOB_TABLE)
