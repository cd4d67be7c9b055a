from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = Field(default="", validation_alias=AliasChoices("supabase_url", "next_public_supabase_url"))
    supabase_key: str = Field(default="", validation_alias=AliasChoices("supabase_key", "next_public_supabase_anon_key"))
    supabase_service_role_key: Optional[str] = None  # Required for writes that bypass RLS

    # Gemini keys, tried in this order
    gemini_api_key: Optional[str] = None
    gemini_api_key_2: Optional[str] = None
    gemini_api_key_3: Optional[str] = None
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 60.0

    # Uploads (S3 is used when credentials are set, Supabase Storage otherwise)
    uploads_bucket: str = "uploads"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Contest
    commander_email: str = "agentalpha@foss.ops"
    commander_password: Optional[str] = None
    commander_display_name: str = "Commander Alpha"
    team_login_suffix: str = "@igifosscit"
    session_ttl_seconds: int = 7 * 24 * 60 * 60
    leaderboard_cache_ttl_seconds: float = 5.0
    leaderboard_cache_max_size: int = 10
    telecast_default_video: str = "/infovid.mp4"

    # App
    app_name: str = "igi-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    port: int = 4000
    frontend_url: str = "http://localhost:3000"
    cors_origins: str = "http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def gemini_api_keys(self) -> List[str]:
        keys = [self.gemini_api_key, self.gemini_api_key_2, self.gemini_api_key_3, self.google_api_key]
        return [k for k in keys if k]

    def get_cors_origins_list(self) -> List[str]:
        origins = [self.frontend_url] + self.cors_origins.split(",")
        result = []
        for origin in origins:
            origin = origin.strip()
            if origin and origin not in result:
                result.append(origin)
        return result

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()


def validate_environment(current: Optional[Settings] = None) -> List[str]:
    """Return the names of required settings that are missing, logging each one."""
    current = current or settings
    required = {
        "SUPABASE_URL": current.supabase_url,
        "SUPABASE_KEY": current.supabase_key,
        "SUPABASE_SERVICE_ROLE_KEY": current.supabase_service_role_key,
    }
    missing = [name for name, value in required.items() if not value]
    for name in missing:
        logger.warning("Missing required environment variable: %s", name)
    if not current.gemini_api_keys:
        logger.warning("No Gemini API keys configured; AI scoring will return zero scores")
    else:
        logger.info("Gemini scoring enabled with %d key(s)", len(current.gemini_api_keys))
    return missing
