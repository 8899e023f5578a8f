from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from studyup.config import settings
from studyup.core.errors import ConfigurationError
from studyup.utils.logging import get_logger

logger = get_logger(__name__)

_CLIENT_OPTIONS = dict(auto_refresh_token=False, persist_session=False)


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """Return a cached service-role client.

    The study planner reads assignments and materials with it, as the hosted
    edge function did, so it bypasses RLS. Never hand it to user-driven writes.
    """
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise ConfigurationError("Supabase service role credentials are not configured")
    logger.debug("Initializing Supabase admin client")
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        options=ClientOptions(**_CLIENT_OPTIONS),
    )


def create_request_supabase_client(bearer_token: str | None = None) -> Client:
    """Create a per-request client using the anon key.

    With a user JWT the PostgREST bearer is set so inserts into
    `study_sessions` run under that user's RLS policies.
    """
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ConfigurationError("Supabase anon credentials are not configured")
    logger.debug("Creating request-scoped Supabase client")
    client = create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(**_CLIENT_OPTIONS),
    )
    if bearer_token:
        client.postgrest.auth(bearer_token)
    return client
