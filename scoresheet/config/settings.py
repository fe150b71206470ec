import logging
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Project layout
    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Base directory that relative paths are resolved against.",
    )

    # Alias store / registry files
    alias_base_file: str = Field(
        "data/aliases.json", description="Authoritative (base) alias layer."
    )
    alias_local_file: str = Field(
        "data/aliases.local.json", description="Staging (local) alias layer."
    )
    pending_dir: str = Field(
        "logs/pending_aliases",
        description="Directory holding pending/unknown name JSON-Lines files.",
    )
    alias_audit_log: str = Field(
        "logs/alias_audit.jsonl", description="Audit log for alias promotions."
    )
    alias_reg_log: str = Field(
        "logs/alias_registrations.jsonl",
        description="Log of every alias registration attempt.",
    )

    # Dictionary API
    api_base: str = Field(
        "http://localhost:8000", description="Base URL of the dictionary API."
    )
    api_timeout: float = Field(
        10.0, gt=0, description="Dictionary API timeout in seconds."
    )
    api_token: Optional[str] = Field(
        None, description="Bearer token for the dictionary API, if required."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Optional[str] = Field(
        None, description="Optional file sink for logs (rotated)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
