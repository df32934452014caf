"""
Supabase client factory.

The catalog and blob stores share one client per application. Every
request made through it carries the configured timeout.
"""

from supabase import Client, ClientOptions, create_client

from config.settings import Settings


class SupabaseClientError(Exception):
    """Raised when Supabase client cannot be created."""
    pass


def build_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client for the given settings.

    Raises:
        SupabaseClientError: If client cannot be created
    """
    options = ClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=settings.store_timeout_seconds,
        storage_client_timeout=int(settings.store_timeout_seconds),
    )
    try:
        return create_client(settings.supabase_url, settings.supabase_service_key, options=options)
    except Exception as e:
        raise SupabaseClientError(f"Failed to create Supabase client: {e}") from e
