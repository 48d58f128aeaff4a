"""Database connection and utilities"""
from functools import lru_cache

from supabase import create_client, Client
from bibforms.config import get_settings


@lru_cache()
def get_supabase_admin() -> Client:
    """
    Shared service role client (bypasses RLS - use carefully)

    Created on first use and reused by every request and every detached
    notification, so the underlying HTTP connection pool is shared.

    Returns:
        Supabase client authenticated with the service role key
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key
    )
