"""Configuration for the Identity SDK.

Uses Pydantic v2 for validation with sensible defaults.
"""

from __future__ import annotations

from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .errors import InvalidConfigError


class TelemetryConfig(BaseModel):
    """Structured logging and tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "identity-sdk"
    log_level: str = "INFO"
    json_logs: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unsupported log level: {v}"
            raise ValueError(msg)
        return level


class IdentityClientConfig(BaseModel):
    """Main configuration for the identity API clients."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Required
    endpoint: HttpUrl

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0, le=60)] = 10.0
    user_agent: str = "identity-sdk/0.1.0 Python"

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @property
    def endpoint_str(self) -> str:
        """Get endpoint as string without trailing slash."""
        return str(self.endpoint).rstrip("/")

    def endpoint_url(self, path: str) -> str:
        """Join a fixed path onto the base endpoint."""
        return f"{self.endpoint_str}/{path.lstrip('/')}"

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "IDENTITY_SDK_") -> Self:
        """Create config from environment variables."""
        import os

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        endpoint = get_env("ENDPOINT")
        if not endpoint:
            msg = f"{prefix}ENDPOINT environment variable is required"
            raise InvalidConfigError(msg, field="endpoint")

        return cls(
            endpoint=endpoint,
            timeout=float(get_env("TIMEOUT", "30.0")),
            connect_timeout=float(get_env("CONNECT_TIMEOUT", "10.0")),
        )
