"""
Supabase database connection management.
"""

import logging
from supabase import acreate_client, AsyncClient
from config.settings import SUPABASE_URL, SUPABASE_KEY
from typing import Optional

logger = logging.getLogger(__name__)

def is_configured() -> bool:
    """Check whether the Supabase credentials are present."""
    return bool(SUPABASE_URL and SUPABASE_KEY)

async def get_supabase_client() -> Optional[AsyncClient]:
    """
    Create an async Supabase client instance.

    Returns:
        AsyncClient: Supabase client instance or None if configuration is missing
    """
    if not is_configured():
        logger.error("Supabase configuration is missing. Set SUPABASE_URL and SUPABASE_KEY in your .env file.")
        return None

    try:
        return await acreate_client(SUPABASE_URL, SUPABASE_KEY)
    except Exception as e:
        logger.error(f"Failed to connect to Supabase: {str(e)}")
        return None
