"""
Supabase connection for the knowledge store.

The async client is created once per process and shared by every
repository. Call ``get_supabase()`` from async code (FastAPI lifespan,
scripts) rather than constructing clients ad hoc.
"""

import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from recall.core.config import settings

logger = logging.getLogger("Recall.Database.Connection")

_supabase: Optional[AsyncClient] = None


async def get_supabase() -> AsyncClient:
    """Return the shared async Supabase client, creating it on first use."""
    global _supabase
    if _supabase is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
        _supabase = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        logger.info("Supabase async client initialized")
    return _supabase
