"""
Configuration Settings.
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..sources.base import DEFAULT_EXPORT_DIR, DEFAULT_LIVE_SYNC_PATH, SourceConfig


class Settings(BaseSettings):
    """Application settings."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App info
    app_name: str = "HealthBridge"
    app_version: str = "1.0.0"
    debug: bool = False

    # Data sources
    health_export_dir: Path = DEFAULT_EXPORT_DIR
    live_sync_path: Path = DEFAULT_LIVE_SYNC_PATH
    max_export_bytes: int = 100 * 1024 * 1024  # 100 MB
    parse_timeout_seconds: float = 10.0
    synthetic_seed_includes_hour: bool = False

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/healthbridge.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses

    def source_config(self) -> SourceConfig:
        """Snapshot the data-source settings handed to the resolver."""
        return SourceConfig(
            health_export_dir=self.health_export_dir.expanduser(),
            live_sync_path=self.live_sync_path.expanduser(),
            max_export_bytes=self.max_export_bytes,
            parse_timeout_seconds=self.parse_timeout_seconds,
            synthetic_seed_includes_hour=self.synthetic_seed_includes_hour,
        )


settings = Settings()
