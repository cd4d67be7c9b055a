from supabase import create_client, Client, ClientOptions
from igi_backend.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """
        Service-role client for score writes, team management and the evaluation worker.
        Falls back to the anon client when SUPABASE_SERVICE_ROLE_KEY is not set.
        """
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options=ClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def check_database(client: Client) -> bool:
    """Cheap teams query used by the readiness probe"""
    try:
        client.table("teams").select("team_id").limit(1).execute()
        return True
    except Exception as e:
        logger.error(f"Supabase connectivity check failed: {e}")
        return False


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_supabase_admin() -> Client:
    return SupabaseClient.get_service_client()
