"""Supabase client construction."""
import logging
from typing import Optional

from supabase import create_client, Client

from config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Create the Supabase client shared by the vector and document stores.

    Raises:
        ValueError: If Supabase credentials are missing
    """
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")

    client = create_client(settings.supabase_url, settings.supabase_key)
    logger.info("Initialized Supabase client")
    return client
