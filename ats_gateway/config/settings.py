"""Configuration settings for the ATS gateway."""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeploymentMode(str, Enum):
    """Requested deployment mode."""

    AUTO = "auto"
    LOCAL = "local"
    CONSTRAINED = "constrained"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        enable_decoding=False,
        extra="ignore",
    )

    # Provider settings
    gemini_api_key: str | None = Field(
        default=None,
        description="Server-held provider credential used when the caller sends no key",
    )
    provider_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Root URL of the generation provider API",
    )
    provider_model: str = Field(
        default="gemini-2.5-flash-preview-09-2025",
        description="Model ID used for generateContent calls",
    )
    provider_timeout: Annotated[float, Field(gt=0)] = Field(
        default=60.0,
        description="Timeout in seconds for a single upstream generation call",
    )

    # Admin settings
    admin_password: str = Field(
        default="admin123",
        description="Shared secret for config updates and admin login",
    )

    # Paths
    remote_config_path: Path = Field(
        default=Path("./data/config.json"),
        description="Best-effort disk mirror of the remote configuration",
    )
    submissions_dir: Path = Field(
        default=Path("./submissions"),
        description="Directory for archived optimization requests (local deployments)",
    )

    # Deployment
    deployment_mode: DeploymentMode = Field(
        default=DeploymentMode.AUTO,
        description="'local', 'constrained' (serverless), or 'auto' to detect",
    )

    # Rendering settings
    chrome_executable_path: Path | None = Field(
        default=None,
        description="Operator override for the local Chrome/Chromium binary",
    )
    bundled_chromium_path: Path | None = Field(
        default=None,
        description="Explicit path of the bundled Chromium used in constrained environments",
    )
    render_launch_timeout: Annotated[float, Field(gt=0)] = Field(
        default=30.0,
        description="Timeout in seconds for launching the browser",
    )
    render_content_timeout: Annotated[float, Field(gt=0)] = Field(
        default=15.0,
        description="Timeout in seconds for parsing the submitted HTML",
    )
    render_network_idle_timeout: Annotated[float, Field(ge=0)] = Field(
        default=5.0,
        description="Best-effort wait in seconds for network activity to settle",
    )
    render_pdf_timeout: Annotated[float, Field(gt=0)] = Field(
        default=30.0,
        description="Timeout in seconds for PDF generation",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: Annotated[int, Field(gt=0, lt=65536)] = Field(
        default=3000,
        description="Bind port",
    )
    max_body_bytes: Annotated[int, Field(gt=0)] = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted JSON request body size in bytes",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def validate_deployment_mode(cls, v: str | DeploymentMode) -> DeploymentMode:
        """Convert string mode to DeploymentMode enum."""
        if isinstance(v, DeploymentMode):
            return v
        if isinstance(v, str):
            try:
                return DeploymentMode(v.strip().lower())
            except ValueError:
                raise ValueError(
                    f"Invalid deployment mode: {v}. Must be 'auto', 'local' or 'constrained'"
                ) from None
        raise ValueError(f"Invalid deployment mode type: {type(v)}")

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v: str | None) -> str | None:
        """Treat an empty GEMINI_API_KEY as unset."""
        if v is None:
            return None
        value = str(v).strip()
        return value or None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: object) -> list[str]:
        """Parse CORS_ORIGINS from a JSON list or a comma-separated string."""
        if v is None:
            return ["*"]

        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]

        raw = str(v).strip()
        if not raw:
            return ["*"]

        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            else:
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]

        return [part.strip() for part in raw.split(",") if part.strip()]

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
