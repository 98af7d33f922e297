"""Application configuration settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    service_name: str = "gateway-registry-service"
    service_version: str = "0.1.0"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"
    database_url: str = "sqlite:///./gateway_registry.db"
    sql_echo: bool = False
    seed_device_types: bool = True

    max_devices_per_gateway: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(env_prefix="GATEWAY_REGISTRY_", extra="ignore")


def get_settings() -> Settings:
    """Return settings object."""

    return Settings()
