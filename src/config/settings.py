# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: which storage
backend to talk to, its credentials and bucket, URL lifetimes, and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed text reported by every storage-dependent action when the backend
# endpoint or access key is missing.
MISSING_STORAGE_MESSAGE = (
    "Missing storage configuration. "
    "Set STORAGE_ENDPOINT_URL and STORAGE_ACCESS_KEY."
)


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Storage backend ===
    storage_backend: Literal["local", "s3"] = "local"
    storage_endpoint_url: str = ""
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_region: str = ""
    storage_bucket: str = "robodoc"
    storage_public_base_url: str = ""

    # Local filesystem backend
    local_storage_root: Path = Path("~/.robodoc/storage")
    local_storage_create_bucket: bool = True

    # === URLs and listing ===
    signed_url_ttl_seconds: int = 3600
    storage_list_limit: int = 200

    # === Checklists ===
    checklists_file: Path | None = None

    # === Workflow ===
    success_notice_seconds: float = 4.0
    manifest_generated_by: str = "robodoc-prototype"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("signed_url_ttl_seconds", "storage_list_limit")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field rules that no single field validator can express."""
        if not self.storage_bucket.strip():
            raise ConfigurationError("STORAGE_BUCKET must not be empty")
        if self.success_notice_seconds < 0:
            raise ConfigurationError("SUCCESS_NOTICE_SECONDS must be >= 0")
        return self

    # --- Helpers ---

    @property
    def storage_configured(self) -> bool:
        """True when storage-dependent actions can run.

        The local backend needs nothing beyond its root directory; the S3
        backend needs at least an endpoint and an access key.
        """
        if self.storage_backend == "local":
            return True
        return bool(self.storage_endpoint_url and self.storage_access_key)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
