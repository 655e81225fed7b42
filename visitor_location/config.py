from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from visitor_location.countries import COUNTRY_CODES

DEFAULT_DRIVER_NAMESPACE = "visitor_location.drivers."

# Checked in order; the first non-empty value wins.
DEFAULT_IP_SOURCES = [
    "HTTP_CLIENT_IP",
    "HTTP_X_FORWARDED_FOR",
    "HTTP_X_FORWARDED",
    "HTTP_FORWARDED_FOR",
    "HTTP_FORWARDED",
    "REMOTE_ADDR",
]


class Settings(BaseSettings):
    """Service configuration loaded from `LOCATION_*` environment variables (or a `.env` file).

    List and dict settings are read from the environment as JSON, e.g.
    `LOCATION_SELECTED_DRIVER_FALLBACKS='["MaxMind"]'`.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    selected_driver: str = Field(default="IpApiCo", description="Primary driver name (case-sensitive).")
    selected_driver_fallbacks: list[str] = Field(
        default_factory=lambda: ["IpApiCom", "MaxMind"],
        description="Drivers tried in order when the primary driver fails.",
    )
    driver_namespace: str = Field(
        default=DEFAULT_DRIVER_NAMESPACE,
        description="Prefix combined with a driver name to form its registry key.",
    )

    localhost_testing: bool = Field(default=False, description="Use `localhost_testing_ip` instead of detecting the IP.")
    localhost_testing_ip: str = Field(default="66.102.0.0")
    localhost_forget_location: bool = Field(
        default=False,
        description="Drop the session-cached location before every lookup.",
    )
    default_ip: str = Field(default="66.102.0.0", description="Used when no client IP can be detected.")
    ip_sources: list[str] = Field(default_factory=lambda: list(DEFAULT_IP_SOURCES))

    ipapi_co_base_url: str = "https://ipapi.co"
    ip_api_com_base_url: str = "http://ip-api.com"
    http_timeout_seconds: float = 5.0
    maxmind_database_path: str = "database/maxmind/GeoLite2-City.mmdb"

    country_codes: dict[str, str] = Field(default_factory=lambda: dict(COUNTRY_CODES))
    dropdown_value: str = "country_code"
    dropdown_name: str = "country_name"

    session_secret_key: str = "change-me-visitor-location-session-secret"
    session_max_age_seconds: int = 14 * 24 * 60 * 60

    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
