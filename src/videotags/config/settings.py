"""
Application settings and configuration management.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from videotags.models.metadata import CATEGORY_FIELDS, DEFAULT_COMPLETENESS_FIELDS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    log_level: str = Field(default="INFO")

    # Twelve Labs
    twelvelabs_api_key: str = Field(default="")
    twelvelabs_api_base_url: str = Field(default="https://api.twelvelabs.io/v1.3")
    content_index_id: str = Field(default="")
    ads_index_id: str = Field(default="")

    # Enrichment pipeline
    enrichment_concurrency: int = Field(default=10, ge=1)
    enrichment_cooldown_ms: int = Field(default=2000, ge=0)
    enrichment_completeness_fields: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_COMPLETENESS_FIELDS)
    )
    enrichment_require_ready_status: bool = Field(default=True)
    enrichment_max_attempts: Optional[int] = Field(default=None, ge=1)
    enrichment_call_timeout: Optional[float] = Field(default=60.0, gt=0)
    keyword_dictionary_path: Optional[Path] = Field(default=None)

    # HTTP
    request_timeout: int = Field(default=30)
    retry_attempts: int = Field(default=3, ge=0)
    retry_backoff: float = Field(default=2.0, ge=0)
    page_limit: int = Field(default=10, ge=1, le=50)

    # Storage
    logs_dir: Path = Field(default=Path("./logs"))
    export_dir: Path = Field(default=Path("./exports"))

    @field_validator("enrichment_completeness_fields", mode="before")
    @classmethod
    def parse_completeness_fields(cls, v: str | list[str]) -> list[str]:
        """Parse completeness fields from comma-separated string or list."""
        if isinstance(v, str):
            return [field.strip().lower() for field in v.split(",") if field.strip()]
        return [field.lower() for field in v]

    @field_validator("enrichment_completeness_fields")
    @classmethod
    def validate_completeness_fields(cls, v: list[str]) -> list[str]:
        """Validate that every completeness field is a known category."""
        if not v:
            raise ValueError("At least one completeness field is required")
        unknown = [field for field in v if field not in CATEGORY_FIELDS]
        if unknown:
            raise ValueError(
                f"Unknown completeness fields: {', '.join(unknown)}. "
                f"Valid fields: {', '.join(CATEGORY_FIELDS)}"
            )
        return v

    @field_validator("logs_dir", "export_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure directory paths are Path objects."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("twelvelabs_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the API base URL so paths can be appended directly."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def has_api_credentials(self) -> bool:
        """Check if a Twelve Labs API key is configured."""
        return bool(self.twelvelabs_api_key)

    @property
    def enrichment_cooldown_seconds(self) -> float:
        """Post-batch cooldown expressed in seconds."""
        return self.enrichment_cooldown_ms / 1000.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
