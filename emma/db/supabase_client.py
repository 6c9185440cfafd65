from typing import Optional

from loguru import logger
from supabase import Client, create_client

from emma.core import config
from emma.core.errors import StorageNotConfiguredError

_client: Optional[Client] = None


def get_supabase() -> Client:
    """Return the shared Supabase client, creating it on first use."""
    global _client
    if _client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
            raise StorageNotConfiguredError("Supabase credentials not found in environment variables.")
        _client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
        logger.info("Supabase storage client created for {}", config.SUPABASE_URL)
    return _client


def get_storage_bucket():
    """FastAPI dependency yielding the bucket used for uploaded images."""
    return get_supabase().storage.from_(config.SUPABASE_STORAGE_BUCKET)
