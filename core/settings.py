"""Application settings loaded from environment variables."""
import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from eventos.presets import DEFAULT_API_BASE, LockPolicy, StatusPolicy

_config_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime configuration, overridable with ``EVENTOS_*`` variables."""

    app_title: str = "Gestión de Clientes"
    api_base_url: str = DEFAULT_API_BASE
    request_timeout: float = 15.0

    # Double-submit guard for the data-entry form
    submit_cooldown_seconds: float = 10.0

    # Product configuration for the edit workflow
    lock_policy: LockPolicy = LockPolicy.FILL_EMPTY_ONLY
    status_policy: StatusPolicy = StatusPolicy.ON_BUDGET_FILLED

    timezone: str = "America/Argentina/Buenos_Aires"
    language: str = "es"

    # Logging — DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"
    log_level_http: str = "WARNING"          # httpx / httpcore

    model_config = SettingsConfigDict(
        env_prefix="EVENTOS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context: object) -> None:
        self.api_base_url = self.api_base_url.rstrip("/")
        _config_logger.debug("Settings loaded (api=%s)", self.api_base_url)


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
