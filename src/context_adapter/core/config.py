"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def _leading_slash(value: str) -> str:
    if not value:
        return ""
    return value if value.startswith("/") else f"/{value}"


class ServerConfig(BaseSettings):
    """Where the adapter itself listens."""

    model_config = {"env_prefix": "CA_"}

    host: str = "localhost"
    port: int = 9999
    path: str = "/v1"

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return _leading_slash(value)


class CallbackConfig(BaseSettings):
    """Webhook exposed to asynchronous third parties."""

    model_config = {"env_prefix": "CA_CALLBACK_"}

    path: str = "/update"
    public_base_url: str | None = None
    secret: str | None = None

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return _leading_slash(value)


class BrokerConfig(BaseSettings):
    """Context Broker connection configuration."""

    model_config = {"env_prefix": "CB_"}

    host: str = "localhost"
    port: int = 1026
    path: str = "/v1"
    timeout_seconds: float = 10.0

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return _leading_slash(value)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"


class ThirdPartyConfig(BaseSettings):
    """Outbound third-party call configuration."""

    model_config = {"env_prefix": "CA_THIRD_PARTY_"}

    default_timeout_seconds: float = 30.0
    notify_in_progress: bool = False
    result_mappings_path: str = "config/result_mappings.yml"


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "CA_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "json"
    service_name: str = "context-adapter"

    server: ServerConfig = Field(default_factory=ServerConfig)
    callback: CallbackConfig = Field(default_factory=CallbackConfig)
    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    third_party: ThirdPartyConfig = Field(default_factory=ThirdPartyConfig)
