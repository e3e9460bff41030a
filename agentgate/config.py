from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    agentgate_host: str = Field("127.0.0.1", alias="AGENTGATE_HOST")
    agentgate_port: int = Field(8080, alias="AGENTGATE_PORT")
    agentgate_log_level: str = Field("INFO", alias="AGENTGATE_LOG_LEVEL")
    agentgate_log_file: Path | None = Field(None, alias="AGENTGATE_LOG_FILE")
    agentgate_ssl_certfile: Path | None = Field(None, alias="AGENTGATE_SSL_CERTFILE")
    agentgate_ssl_keyfile: Path | None = Field(None, alias="AGENTGATE_SSL_KEYFILE")
    agentgate_ssl_keyfile_password: str | None = Field(
        None, alias="AGENTGATE_SSL_KEYFILE_PASSWORD"
    )
    agentgate_request_timeout_s: float = Field(
        30.0,
        gt=0,
        alias="AGENTGATE_REQUEST_TIMEOUT_S",
    )
    agentgate_trace_enabled: bool = Field(True, alias="AGENTGATE_TRACE_ENABLED")
    agentgate_trace_max_items: int = Field(
        500,
        ge=1,
        alias="AGENTGATE_TRACE_MAX_ITEMS",
    )
    agentgate_trace_content: Literal["none", "truncate", "full"] = Field(
        "full",
        alias="AGENTGATE_TRACE_CONTENT",
    )
    agentgate_trace_max_chars: int = Field(
        200_000,
        ge=0,
        alias="AGENTGATE_TRACE_MAX_CHARS",
    )
    agentgate_default_model: str = Field(
        "gpt-4o-mini",
        alias="AGENTGATE_DEFAULT_MODEL",
    )
    app_config_json: str | None = Field(None, alias="APP_CONFIG_JSON")

    @model_validator(mode="after")
    def _validate_tls_settings(self) -> "Settings":
        cert = self.agentgate_ssl_certfile
        key = self.agentgate_ssl_keyfile
        if (cert is None) ^ (key is None):
            raise ValueError(
                "AGENTGATE_SSL_CERTFILE and AGENTGATE_SSL_KEYFILE must be set together"
            )
        if cert is not None and not cert.exists():
            raise ValueError(f"AGENTGATE_SSL_CERTFILE not found: {cert}")
        if key is not None and not key.exists():
            raise ValueError(f"AGENTGATE_SSL_KEYFILE not found: {key}")
        return self


_settings: Settings | None = None


def load_settings() -> Settings:
    global _settings
    if _settings is None:
        # Settings is loaded from environment variables via pydantic-settings.
        # Use Any to avoid static type checkers requiring init params.
        settings_cls: Any = Settings
        _settings = settings_cls()
    assert _settings is not None
    return _settings


def reset_settings_cache() -> None:
    """Reset the cached Settings instance.

    This is mainly useful for tests and CLI invocations that intentionally vary
    environment variables between runs.
    """
    global _settings
    _settings = None
