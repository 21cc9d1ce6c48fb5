"""Centralized application settings using pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
# Look for .env in the backend directory or project root
env_path = Path(__file__).parent.parent.parent / ".env"
if not env_path.exists():
    env_path = Path(__file__).parent.parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path, override=False)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
]


class Settings(BaseSettings):
    """Environment-aware configuration for the catalog view session."""

    # Application settings
    app_name: str = "Catalog View"
    log_level: str = "INFO"

    # Inventory service
    inventory_base_url: str = Field(
        default="http://localhost:5184",
        description="Base URL of the remote inventory service",
    )
    inventory_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout applied by the HTTP transport",
    )

    # Externally resolved identity; None means an anonymous session
    current_user_id: str | None = Field(
        default=None,
        description="Opaque identifier of the viewing user",
    )

    # Transient notices
    notice_visible_seconds: float = Field(default=3.0, ge=0)
    notice_clear_seconds: float = Field(default=4.5, ge=0)

    # Display
    default_page_size: int = Field(default=25, ge=1, le=500)

    # Export settings
    export_title: str = "Ürün Listesi"
    export_date_format: str = "%d.%m.%Y"
    export_font_path: str | None = Field(
        default=None,
        description="TrueType font used for PDF exports (must cover the full locale charset)",
    )

    # CORS settings - stored as string, converted to list via property
    cors_origins_raw: str | None = Field(
        default=None,
        validation_alias="CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins",
        exclude=True,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS_ORIGINS from comma-separated string to list."""
        if self.cors_origins_raw is None or not self.cors_origins_raw.strip():
            return list(DEFAULT_CORS_ORIGINS)
        origins = [
            origin.strip().rstrip("/")
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]
        return origins if origins else list(DEFAULT_CORS_ORIGINS)

    @field_validator("inventory_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str:
        """Normalize the base URL so endpoint paths can be joined verbatim."""
        if v is None or not str(v).strip():
            return "http://localhost:5184"
        return str(v).strip().rstrip("/")

    @field_validator("current_user_id", mode="before")
    @classmethod
    def blank_user_is_anonymous(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("export_font_path", mode="after")
    @classmethod
    def resolve_font_path(cls, v: str | None) -> str | None:
        """Resolve a relative font path against the backend directory."""
        if v is None:
            return None
        path = Path(v)
        if not path.is_absolute():
            backend_dir = Path(__file__).parent.parent.parent
            path = (backend_dir / v).resolve()
        return str(path)

    @model_validator(mode="after")
    def clear_after_fade(self) -> "Settings":
        # A notice's text must outlive its visibility so the fade-out never renders empty.
        if self.notice_clear_seconds < self.notice_visible_seconds:
            self.notice_clear_seconds = self.notice_visible_seconds
        return self


@lru_cache
def get_settings() -> Settings:
    """Provide singleton-like access for dependency injection."""
    return Settings()
