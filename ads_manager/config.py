"""
Application configuration.

This module provides centralized configuration management using Pydantic.
Nested sections are read from the environment with a double underscore
delimiter, e.g. ``BIDDING__LICA_BATCH_SIZE=50``.
"""

from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class ApiConfig(BaseModel):
    """Remote ad-server adapter configuration."""
    base_url: str = "http://localhost:8080/wp-json"
    namespace: str = "/newspack-ads/v1"
    auth_token: Optional[str] = None
    timeout: int = 60
    max_retries: int = Field(default=3, ge=0)
    backoff_factor: float = Field(default=0.3, ge=0)

class BiddingConfig(BaseModel):
    """Header bidding order provisioning configuration."""
    lica_batch_size: int = Field(default=100, ge=1)

class RedisConfig(BaseModel):
    """Redis configuration."""
    url: str = "redis://localhost:6379"
    password: Optional[str] = None
    prefix: str = "ads:"

class ServerConfig(BaseModel):
    """Server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]

class Settings(BaseSettings):
    """Application settings."""
    api: ApiConfig = ApiConfig()
    bidding: BiddingConfig = BiddingConfig()
    redis: RedisConfig = RedisConfig()
    server: ServerConfig = ServerConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

# Create global settings instance
settings = Settings()

# Export individual configs for convenience
api_config = settings.api
bidding_config = settings.bidding
redis_config = settings.redis
server_config = settings.server
