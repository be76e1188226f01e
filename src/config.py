from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3Settings(BaseModel):
    """Object store (S3) connection settings."""

    bucket_name: str
    region: str
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None


class RedisSettings(BaseModel):
    host: str = "localhost"
    port: int = 6379
    image_ttl_seconds: int = 3600
    cache_version: int = 1


class Settings(BaseSettings):
    """Application settings, read from the environment (or a .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_version: str = "0.1.0"
    postgres_database_url: str
    s3: S3Settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    stream_chunk_size: int = Field(64 * 1024, ge=1024)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
