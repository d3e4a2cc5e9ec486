"""Application configuration and settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application
    app_name: str = "AutoRank"
    app_version: str = "1.0.2"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]
    cors_credentials: bool = True
    cors_methods: list[str] = ["*"]
    cors_headers: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    # Catalog portal
    portal_login_url: str = "https://withpassion.decathlon.net/rank2/control/login"
    portal_catalog_url: str = "https://withpassion.decathlon.net/rank2/control/catalog"
    portal_template_url: str = "https://withpassion.decathlon.net/rank2/assets/template.xlsx"

    # Job Configuration
    default_batch_size: int = 500
    inter_batch_delay_seconds: float = 2.0  # Pause between batches to spare the portal

    # Simulation
    simulation_delay_scale: float = 1.0  # 0 disables simulated latency
    simulation_random_failure_rate: float = 0.01

    # Browser automation (Playwright)
    browser_headless: bool = False  # Headed by default so the operator can follow along
    browser_navigation_timeout_ms: int = 30000
    browser_selector_timeout_ms: int = 5000
    manual_login_wait_seconds: float = 15.0
    post_login_wait_seconds: float = 3.0
    upload_confirm_wait_ms: int = 1000
    upload_workdir: str | None = None  # Temporary directory when unset

    # Spreadsheet source
    sheet_fetch_timeout_seconds: int = 30
    sheet_fallback_to_demo: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
